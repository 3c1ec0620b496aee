"""Parser for query language expressions.

The parser works on the token list produced by the lexer. parsy combinators
are applied to tokens with ``test_item``, so the grammar below reads like the
precedence chain it implements::

    pipe    := simple ('|' simple)*
    simple  := postfix '?'*
    postfix := dotted | '..' | array | object | call
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from functools import reduce
from typing import cast

from parsy import ParseError, Parser, eof, forward_declaration, generate, seq, test_item

from jqlite.query_language.ast import (
    ArrayConstruct,
    Expr,
    Identity,
    Index,
    Iterate,
    Keys,
    Length,
    Literal,
    LiteralValue,
    Map,
    ObjectConstruct,
    Optional,
    Pipe,
    Property,
    RecursiveDescent,
    Select,
    Slice,
)
from jqlite.query_language.errors import (
    QueryLanguageError,
    QueryLexError,
    QuerySyntaxError,
    QueryUnexpectedEndError,
    QueryUnknownFunctionError,
)
from jqlite.query_language.lexer import tokenize
from jqlite.query_language.tokens import COMPARISON_KINDS, Token, TokenKind


KNOWN_FUNCTIONS = ("keys", "length", "map", "select")


def _kind(kind: TokenKind, description: str | None = None) -> Parser:
    """Match one token of the given kind."""
    if description is None:
        description = f"'{kind.value}'"
    return test_item(lambda token: token.kind is kind, description)


def _word(name: str) -> Parser:
    """Match an identifier token with the given text."""
    return test_item(
        lambda token: token.kind is TokenKind.IDENTIFIER and token.value == name,
        f"'{name}'",
    )


def _is_integer_token(token: Token) -> bool:
    """Return whether token is a number literal without a fraction."""
    return (
        token.kind is TokenKind.NUMBER
        and isinstance(token.value, float)
        and token.value.is_integer()
    )


NAME_KINDS = frozenset({TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.BOOL, TokenKind.NULL})


def _name_text(token: Token) -> str:
    """Return the key named by a token; `true`, `false` and `null` name themselves."""
    if token.kind is TokenKind.BOOL:
        return "true" if token.value else "false"
    if token.kind is TokenKind.NULL:
        return "null"
    return str(token.value)


def _literal(token: Token) -> Literal:
    """Build a predicate literal from a literal token."""
    value = token.value
    if _is_integer_token(token):
        value = int(cast(float, value))
    return Literal(cast(LiteralValue, value))


def _fold_pipe(first: Expr, rest: Sequence[Expr]) -> Expr:
    """Fold expressions left-to-right into nested pipes."""
    return reduce(Pipe, rest, first)


def _build_bracket_parser(integer: Parser) -> Parser:
    """Build parser for `[]`, `[N]` and `[N:M]` suffixes."""
    lbracket = _kind(TokenKind.LBRACKET)
    rbracket = _kind(TokenKind.RBRACKET)
    colon = _kind(TokenKind.COLON)

    iterate = lbracket >> rbracket.result(Iterate())
    slice_ = seq(
        lbracket >> integer.optional(),
        colon >> integer.optional() << rbracket,
    ).combine(Slice)
    index = (lbracket >> integer << rbracket).map(Index)
    return iterate | slice_ | index


def _build_dotted_parser(name: Parser, bracket: Parser) -> Parser:
    """Build parser for dot-rooted path expressions."""
    dot = _kind(TokenKind.DOT)
    step = name.map(Property) | bracket
    suffix = (dot >> step) | bracket

    @generate
    def dotted() -> Generator[Parser, object, Expr]:
        yield dot
        first_result = yield step.optional()
        if first_result is None:
            return Identity()
        rest_result = yield suffix.many()
        return _fold_pipe(cast(Expr, first_result), cast(list[Expr], rest_result))

    return dotted


def _build_array_parser(expr: Parser) -> Parser:
    """Build parser for array construction `[e, ...]`."""
    items = expr.sep_by(_kind(TokenKind.COMMA))
    return (
        _kind(TokenKind.LBRACKET) >> items << _kind(TokenKind.RBRACKET)
    ).map(lambda values: ArrayConstruct(tuple(values)))


def _object_entry(key: str, value: Expr | None) -> tuple[str, Expr]:
    """Build one object entry; a bare key is shorthand for `key: .key`."""
    if value is None:
        return (key, Property(key))
    return (key, value)


def _build_object_parser(name: Parser, expr: Parser) -> Parser:
    """Build parser for object construction `{k: e, ...}`."""
    entry = seq(name, (_kind(TokenKind.COLON) >> expr).optional()).combine(_object_entry)
    entries = entry.sep_by(_kind(TokenKind.COMMA))
    return (
        _kind(TokenKind.LBRACE) >> entries << _kind(TokenKind.RBRACE)
    ).map(lambda values: ObjectConstruct(tuple(values)))


def _build_call_parser(expr: Parser) -> Parser:
    """Build parser for `select`, `map`, `keys` and `length`."""
    lparen = _kind(TokenKind.LPAREN)
    rparen = _kind(TokenKind.RPAREN)
    literal = (
        _kind(TokenKind.STRING, "string")
        | _kind(TokenKind.NUMBER, "number")
        | _kind(TokenKind.BOOL, "boolean")
        | _kind(TokenKind.NULL, "null")
    ).map(_literal)
    operand = literal | expr
    comparison = test_item(
        lambda token: token.kind in COMPARISON_KINDS, "comparison operator"
    ).map(lambda token: token.kind.value)

    select = seq(
        _word("select") >> lparen >> operand,
        comparison,
        operand << rparen,
    ).combine(Select)
    map_ = (_word("map") >> lparen >> expr << rparen).map(Map)
    keys = _word("keys").result(Keys())
    length = _word("length").result(Length())
    unknown_name = test_item(
        lambda token: token.kind is TokenKind.IDENTIFIER and token.value not in KNOWN_FUNCTIONS,
        "function name",
    )

    @generate
    def unknown_function() -> Generator[Parser, object, Expr]:
        token_result = yield unknown_name
        token = cast(Token, token_result)
        raise QueryUnknownFunctionError(str(token.value), KNOWN_FUNCTIONS, token.position)

    return select | map_ | keys | length | unknown_function


def _optional_suffixes(expr: Expr, marks: list[object]) -> Expr:
    """Wrap an expression once per trailing `?`."""
    for _mark in marks:
        expr = Optional(expr)
    return expr


def _chain_left(term: Parser, op: Parser, builder: Callable[[Expr, Expr], Expr]) -> Parser:
    """Build a left-associative parser from term and operator parsers."""
    return seq(term, (op >> term).many()).combine(
        lambda first, rest: reduce(builder, rest, first)
    )


def _make_parser() -> Parser:
    """Create the full expression parser."""
    expr = forward_declaration()

    name = test_item(lambda token: token.kind in NAME_KINDS, "name").map(_name_text)
    integer = test_item(_is_integer_token, "integer").map(
        lambda token: int(cast(float, token.value))
    )

    bracket = _build_bracket_parser(integer)
    dotted = _build_dotted_parser(name, bracket)
    recursive = _kind(TokenKind.DOT_DOT).result(RecursiveDescent())
    array = _build_array_parser(expr)
    object_ = _build_object_parser(name, expr)
    call = _build_call_parser(expr)

    postfix = dotted | recursive | array | object_ | call
    simple = seq(postfix, _kind(TokenKind.QUESTION).many()).combine(_optional_suffixes)
    pipe = _chain_left(simple, _kind(TokenKind.PIPE), Pipe)

    expr.become(pipe)
    return expr << eof


QUERY_PARSER = _make_parser()


def _expected_descriptions(expected: frozenset[str]) -> tuple[str, ...]:
    """Normalize parsy expectations into sorted descriptions."""
    return tuple(sorted("end of input" if item == "EOF" else item for item in expected))


def parse(tokens: Sequence[Token]) -> Expr:
    """Parse a complete token list into an AST expression."""
    token_list = list(tokens)
    try:
        result = QUERY_PARSER.parse(token_list)
    except ParseError as exc:
        expected = _expected_descriptions(exc.expected)
        if exc.index >= len(token_list):
            raise QueryUnexpectedEndError(expected) from exc
        raise QuerySyntaxError(expected, token_list[exc.index]) from exc
    return cast(Expr, result)


def parse_query(query: str) -> Expr:
    """Parse query text into an AST expression."""
    try:
        return parse(tokenize(query))
    except QueryUnexpectedEndError as exc:
        if exc.position is None:
            exc.position = len(query)
        raise


def _line_and_column(query: str, position: int) -> tuple[int, int]:
    """Convert a character offset into zero-based line and column."""
    prefix = query[:position]
    line_number = prefix.count("\n")
    column_number = position - (prefix.rfind("\n") + 1)
    return (line_number, column_number)


def format_query_error(query: str, exc: QueryLanguageError) -> str:
    """Build a query error message with a pointer under the failing offset."""
    position = getattr(exc, "position", None)
    label = "Invalid query token" if isinstance(exc, QueryLexError) else "Invalid query syntax"
    if position is None:
        return f"{label}: {exc}"

    line_number, column_number = _line_and_column(query, position)
    query_lines = query.splitlines() or [query]
    error_line = query_lines[line_number] if line_number < len(query_lines) else ""
    pointer = " " * column_number + "^"
    return f"{label}: {exc}\n\n{error_line}\n{pointer}"
