"""Lexer turning query text into tokens."""

from __future__ import annotations

from collections.abc import Generator
from typing import TypeAlias, cast

from parsy import ParseError, Parser, alt, any_char, eof, generate, index, regex, string

from jqlite.query_language.errors import QueryLexError
from jqlite.query_language.tokens import Token, TokenKind, TokenValue


_CLOSING_QUOTE = "closing quote"
_ESCAPED_CHARACTER = "escaped character"
_INTEGER_DIGITS = "digit"
_FRACTION_DIGITS = "digit after decimal point"

_KEYWORDS: dict[str, tuple[TokenKind, TokenValue]] = {
    "true": (TokenKind.BOOL, True),
    "false": (TokenKind.BOOL, False),
    "null": (TokenKind.NULL, None),
}

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Longer symbols first so that `..` and two-character comparisons win.
_PUNCTUATION = (
    TokenKind.DOT_DOT,
    TokenKind.EQ,
    TokenKind.NE,
    TokenKind.GE,
    TokenKind.LE,
    TokenKind.DOT,
    TokenKind.PIPE,
    TokenKind.COMMA,
    TokenKind.LBRACKET,
    TokenKind.RBRACKET,
    TokenKind.LBRACE,
    TokenKind.RBRACE,
    TokenKind.LPAREN,
    TokenKind.RPAREN,
    TokenKind.COLON,
    TokenKind.QUESTION,
    TokenKind.GT,
    TokenKind.LT,
)

TokenBody: TypeAlias = tuple[TokenKind, TokenValue]


def _unescape(character: str) -> str:
    """Decode one escaped character; unknown escapes pass through."""
    return _ESCAPES.get(character, character)


def _keyword_or_identifier(name: str) -> TokenBody:
    """Map reserved literal words to their tokens."""
    return _KEYWORDS.get(name, (TokenKind.IDENTIFIER, name))


def _build_string_parser() -> Parser:
    """Build parser for double-quoted string literals."""
    plain = regex(r'[^"\\]+').desc("string character")
    escape = string("\\") >> any_char.desc(_ESCAPED_CHARACTER).map(_unescape)

    @generate
    def string_literal() -> Generator[Parser, object, TokenBody]:
        yield string('"')
        parts_result = yield (plain | escape).many()
        yield string('"').desc(_CLOSING_QUOTE)
        parts = cast(list[str], parts_result)
        return (TokenKind.STRING, "".join(parts))

    return string_literal


def _build_number_parser() -> Parser:
    """Build parser for number literals with an optional fraction."""
    digits = regex(r"[0-9]+")

    @generate
    def number_literal() -> Generator[Parser, object, TokenBody]:
        sign = yield string("-").optional()
        if sign is None:
            integer_part = yield digits
        else:
            integer_part = yield digits.desc(_INTEGER_DIGITS)
        point = yield string(".").optional()
        fraction = ""
        if point is not None:
            fraction_result = yield digits.desc(_FRACTION_DIGITS)
            fraction = "." + cast(str, fraction_result)
        text = f"{sign or ''}{integer_part}{fraction}"
        return (TokenKind.NUMBER, float(text))

    return number_literal


def _positioned(body: Parser) -> Parser:
    """Attach the start offset to a token body parser."""

    @generate
    def token() -> Generator[Parser, object, Token]:
        position = yield index
        body_result = yield body
        kind, value = cast(TokenBody, body_result)
        return Token(kind, value, cast(int, position))

    return token


def _make_lexer() -> Parser:
    """Create the full token stream parser."""
    ws = regex(r"\s*")
    identifier = regex(r"[A-Za-z_][A-Za-z0-9_]*").desc("identifier").map(_keyword_or_identifier)
    punctuation = alt(*(string(kind.value).result((kind, None)) for kind in _PUNCTUATION))

    body = _build_string_parser() | _build_number_parser() | identifier | punctuation
    token = _positioned(body) << ws
    return ws >> token.many() << eof


TOKEN_PARSER = _make_lexer()


def _lex_error(text: str, exc: ParseError) -> QueryLexError:
    """Classify a scanner failure into a lexer error."""
    position = exc.index
    character = text[position] if position < len(text) else None
    if exc.expected & {_CLOSING_QUOTE, _ESCAPED_CHARACTER}:
        return QueryLexError("Unterminated string literal", None, position)
    if exc.expected & {_INTEGER_DIGITS, _FRACTION_DIGITS}:
        return QueryLexError("Malformed number literal", character, position)
    return QueryLexError("Unexpected character", character, position)


def tokenize(text: str) -> list[Token]:
    """Split query text into tokens."""
    try:
        result = TOKEN_PARSER.parse(text)
    except ParseError as exc:
        raise _lex_error(text, exc) from exc
    return cast(list[Token], result)
