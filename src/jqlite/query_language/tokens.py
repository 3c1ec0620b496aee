"""Token model for query language lexing."""

from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass, field
from enum import StrEnum


class TokenKind(StrEnum):
    """Lexical token kinds.

    Punctuation kinds use their source text as value so that they can be
    shown directly in diagnostics.
    """

    DOT = "."
    DOT_DOT = ".."
    PIPE = "|"
    COMMA = ","
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    COLON = ":"
    QUESTION = "?"
    EQ = "=="
    NE = "!="
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"
    BOOL = "boolean"
    NULL = "null"


COMPARISON_KINDS = frozenset(
    {TokenKind.EQ, TokenKind.NE, TokenKind.GE, TokenKind.LE, TokenKind.GT, TokenKind.LT}
)

TokenValue: TypeAlias = str | float | bool | None


@dataclass(frozen=True, slots=True)
class Token:
    """One lexical token with its start offset in the query text."""

    kind: TokenKind
    value: TokenValue = None
    position: int = field(default=0, compare=False)

    def describe(self) -> str:
        """Return a short human readable rendering for error messages."""
        match self.kind:
            case TokenKind.IDENTIFIER:
                return f"'{self.value}'"
            case TokenKind.STRING:
                return f'string "{self.value}"'
            case TokenKind.NUMBER:
                return f"number {_format_number(self.value)}"
            case TokenKind.BOOL:
                return "true" if self.value else "false"
            case TokenKind.NULL:
                return "null"
        return f"'{self.kind.value}'"


def _format_number(value: TokenValue) -> str:
    """Render numeric token values without a redundant fraction."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
