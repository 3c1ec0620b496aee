"""Public API for query language lexer/parser/compiler/runtime."""

from jqlite.query_language.compiler import CompiledQuery, compile_expr, compile_query_text
from jqlite.query_language.errors import (
    QueryBudgetExceededError,
    QueryLanguageError,
    QueryLexError,
    QueryParseError,
    QueryRuntimeError,
    QuerySyntaxError,
    QueryTypeError,
    QueryUnexpectedEndError,
    QueryUnknownFunctionError,
)
from jqlite.query_language.lexer import tokenize
from jqlite.query_language.parser import format_query_error, parse, parse_query
from jqlite.query_language.runtime import EvalContext, Stream, evaluate_expr, execute


__all__ = [
    "CompiledQuery",
    "EvalContext",
    "QueryBudgetExceededError",
    "QueryLanguageError",
    "QueryLexError",
    "QueryParseError",
    "QueryRuntimeError",
    "QuerySyntaxError",
    "QueryTypeError",
    "QueryUnexpectedEndError",
    "QueryUnknownFunctionError",
    "Stream",
    "compile_expr",
    "compile_query_text",
    "evaluate_expr",
    "execute",
    "format_query_error",
    "parse",
    "parse_query",
    "tokenize",
]
