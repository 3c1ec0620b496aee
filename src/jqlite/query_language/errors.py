"""Errors for query language lexing, parsing and execution."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from jqlite.query_language.tokens import Token


class QueryLanguageError(Exception):
    """Base exception for query language failures."""


class QueryLexError(QueryLanguageError):
    """Raised when query text cannot be split into tokens."""

    def __init__(self, reason: str, character: str | None, position: int) -> None:
        self.reason = reason
        self.character = character
        self.position = position
        if character is None:
            super().__init__(f"{reason} at position {position}")
        else:
            super().__init__(f"{reason}: {character!r} at position {position}")


class QueryParseError(QueryLanguageError):
    """Raised when query text cannot be parsed."""

    position: int | None = None


class QuerySyntaxError(QueryParseError):
    """Raised when a token does not fit the grammar."""

    def __init__(self, expected: tuple[str, ...], found: Token) -> None:
        self.expected = expected
        self.found = found
        self.position = found.position
        super().__init__(f"expected {_describe_expected(expected)}, found {found.describe()}")


class QueryUnexpectedEndError(QueryParseError):
    """Raised when the token stream ends in the middle of an expression."""

    def __init__(self, expected: tuple[str, ...], position: int | None = None) -> None:
        self.expected = expected
        self.position = position
        super().__init__(f"unexpected end of input, expected {_describe_expected(expected)}")


class QueryUnknownFunctionError(QueryParseError):
    """Raised when an identifier does not name a known function."""

    def __init__(self, name: str, available: tuple[str, ...], position: int) -> None:
        self.name = name
        self.position = position
        super().__init__(f"Unknown function: {name}. Available functions: {', '.join(available)}")


class QueryRuntimeError(QueryLanguageError):
    """Raised when query execution fails at runtime."""


class QueryTypeError(QueryRuntimeError):
    """Raised when an operation is applied to an incompatible value kind."""

    def __init__(self, operation: str, type_name: str, message: str) -> None:
        self.operation = operation
        self.type_name = type_name
        super().__init__(message)


class QueryBudgetExceededError(QueryRuntimeError):
    """Raised when recursive descent visits more values than allowed."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Recursive descent exceeded the visit budget of {limit} values")


def _describe_expected(expected: tuple[str, ...]) -> str:
    """Join expected token descriptions for messages."""
    if not expected:
        return "more input"
    if len(expected) == 1:
        return expected[0]
    return "one of " + ", ".join(expected)
