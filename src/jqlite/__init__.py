"""jqlite - Query JSON documents with a small jq-style language."""

from jqlite.query_language import (
    EvalContext,
    QueryLanguageError,
    QueryLexError,
    QueryParseError,
    QueryRuntimeError,
    Stream,
    compile_query_text,
    execute,
    parse_query,
    tokenize,
)


__version__ = "0.1.0"

__all__ = [
    "EvalContext",
    "QueryLanguageError",
    "QueryLexError",
    "QueryParseError",
    "QueryRuntimeError",
    "Stream",
    "__version__",
    "compile_query_text",
    "execute",
    "parse_query",
    "tokenize",
]
