"""Compiler entrypoints for query language."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from jqlite.query_language.ast import Expr
from jqlite.query_language.parser import parse_query
from jqlite.query_language.runtime import EvalContext, Stream, execute


CompiledQuery: TypeAlias = Callable[[object], Stream]


def compile_expr(expr: Expr, max_visits: int | None = None) -> CompiledQuery:
    """Compile expression into executable query callable.

    Every call gets a fresh evaluation context, so one compiled query can be
    shared between threads.
    """

    def _compiled(document: object) -> Stream:
        return execute(expr, document, EvalContext(max_visits=max_visits))

    return _compiled


def compile_query_text(query: str, max_visits: int | None = None) -> CompiledQuery:
    """Parse and compile query text."""
    expr = parse_query(query)
    return compile_expr(expr, max_visits)
