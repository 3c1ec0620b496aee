"""AST nodes for query language."""

from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass


LiteralValue: TypeAlias = str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Expr:
    """Base AST expression type."""


@dataclass(frozen=True, slots=True)
class Identity(Expr):
    """Identity expression returning the input unchanged."""


@dataclass(frozen=True, slots=True)
class RecursiveDescent(Expr):
    """Every value nested in the input, pre-order."""


@dataclass(frozen=True, slots=True)
class Property(Expr):
    """Object key access expression."""

    name: str


@dataclass(frozen=True, slots=True)
class Index(Expr):
    """Array index expression; negative indices count from the end."""

    index: int


@dataclass(frozen=True, slots=True)
class Slice(Expr):
    """Array slice expression with optional bounds."""

    start: int | None
    end: int | None


@dataclass(frozen=True, slots=True)
class Iterate(Expr):
    """Array element or object value iteration expression."""


@dataclass(frozen=True, slots=True)
class ArrayConstruct(Expr):
    """Array literal collecting the outputs of its items."""

    items: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class ObjectConstruct(Expr):
    """Object literal with keys in declaration order."""

    entries: tuple[tuple[str, Expr], ...]


@dataclass(frozen=True, slots=True)
class Pipe(Expr):
    """Pipe expression sending left outputs into right input."""

    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Literal(Expr):
    """Constant operand of a select predicate."""

    value: LiteralValue


@dataclass(frozen=True, slots=True)
class Select(Expr):
    """Predicate filter `select(<left> <operator> <right>)`."""

    left: Expr
    operator: str
    right: Expr


@dataclass(frozen=True, slots=True)
class Map(Expr):
    """Array mapping expression `map(<body>)`."""

    body: Expr


@dataclass(frozen=True, slots=True)
class Keys(Expr):
    """Object keys or array indices."""


@dataclass(frozen=True, slots=True)
class Length(Expr):
    """Size of an array, object or string."""


@dataclass(frozen=True, slots=True)
class Optional(Expr):
    """Suffix `?` suppressing type faults of the wrapped expression."""

    expr: Expr
