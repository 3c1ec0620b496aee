"""Runtime evaluation for query language expressions."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from jqlite.query_language.ast import (
    ArrayConstruct,
    Expr,
    Identity,
    Index,
    Iterate,
    Keys,
    Length,
    Literal,
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
    QueryBudgetExceededError,
    QueryRuntimeError,
    QueryTypeError,
)


class Stream(list[object]):
    """Typed stream container for query evaluation values."""


logger = logging.getLogger("jqlite")


def _stream(values: Iterable[object] = ()) -> Stream:
    """Build a stream from iterable values."""
    return Stream(values)


@dataclass(slots=True)
class EvalContext:
    """Execution context for runtime evaluation.

    Attributes:
        max_visits: Upper bound on values emitted by recursive descent, or None
        visits: Values emitted by recursive descent so far
    """

    max_visits: int | None = None
    visits: int = field(default=0)


def execute(expr: Expr, value: object, context: EvalContext | None = None) -> Stream:
    """Evaluate an expression against one JSON value.

    Results are deep copies, so callers may mutate them without touching
    the input document.
    """
    if context is None:
        context = EvalContext()
    results = evaluate_expr(expr, value, context)
    return _stream(copy.deepcopy(result) for result in results)


def evaluate_expr(expr: Expr, value: object, context: EvalContext) -> Stream:
    """Evaluate an expression for one input value."""
    atomic_result = _evaluate_atomic(expr, value, context)
    if atomic_result is not None:
        return atomic_result

    if isinstance(expr, Pipe):
        return _evaluate_pipe(expr, value, context)
    return _evaluate_operator_expr(expr, value, context)


def _evaluate_atomic(expr: Expr, value: object, context: EvalContext) -> Stream | None:
    """Evaluate path and builtin expressions that need no sub-expressions."""
    result: Stream | None = None
    if isinstance(expr, Identity):
        result = _stream([value])
    elif isinstance(expr, RecursiveDescent):
        result = _evaluate_recursive_descent(value, context)
    elif isinstance(expr, Property):
        result = _stream([_resolve_property(value, expr.name)])
    elif isinstance(expr, Index):
        result = _stream([_index_one(value, expr.index)])
    elif isinstance(expr, Slice):
        result = _stream([_slice_one(value, expr.start, expr.end)])
    elif isinstance(expr, Iterate):
        result = _evaluate_iterate(value)
    elif isinstance(expr, Keys):
        result = _stream([_func_keys(value)])
    elif isinstance(expr, Length):
        result = _stream([_func_length(value)])
    elif isinstance(expr, Literal):
        result = _stream([expr.value])
    return result


def _evaluate_operator_expr(expr: Expr, value: object, context: EvalContext) -> Stream:
    """Evaluate expressions built from sub-expressions."""
    result: Stream | None = None
    if isinstance(expr, ArrayConstruct):
        result = _evaluate_array_construct(expr, value, context)
    elif isinstance(expr, ObjectConstruct):
        result = _evaluate_object_construct(expr, value, context)
    elif isinstance(expr, Select):
        result = _func_select(expr, value, context)
    elif isinstance(expr, Map):
        result = _func_map(expr, value, context)
    elif isinstance(expr, Optional):
        result = _evaluate_optional(expr, value, context)
    if result is not None:
        return result
    raise QueryRuntimeError(f"Unsupported expression type: {type(expr).__name__}")


def _evaluate_pipe(expr: Pipe, value: object, context: EvalContext) -> Stream:
    """Feed every left output into the right expression, in order."""
    output = _stream()
    for item in evaluate_expr(expr.left, value, context):
        output.extend(evaluate_expr(expr.right, item, context))
    return output


def _type_name(value: object) -> str:
    """Return the JSON type name of a value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _type_fault(operation: str, value: object, message: str) -> QueryTypeError:
    """Build a type fault naming the offending value type."""
    type_name = _type_name(value)
    return QueryTypeError(operation, type_name, f"{message}, got {type_name}")


def _iter_recursive(value: object) -> Iterator[object]:
    """Yield a value and everything nested in it, pre-order."""
    pending = [value]
    while pending:
        current = pending.pop()
        yield current
        if isinstance(current, dict):
            pending.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            pending.extend(reversed(current))


def _evaluate_recursive_descent(value: object, context: EvalContext) -> Stream:
    """Collect all nested values while honoring the visit budget."""
    output = _stream()
    for item in _iter_recursive(value):
        context.visits += 1
        if context.max_visits is not None and context.visits > context.max_visits:
            raise QueryBudgetExceededError(context.max_visits)
        output.append(item)
    return output


def _resolve_property(value: object, name: str) -> object:
    """Resolve object key access with null fallback for missing keys."""
    if not isinstance(value, dict):
        raise _type_fault("property", value, f"Cannot access property '{name}' on non-object")
    return value.get(name)


def _index_one(value: object, index: int) -> object:
    """Apply one index operation; out of range resolves to null."""
    if not isinstance(value, list):
        raise _type_fault("index", value, "Index access requires an array")
    if -len(value) <= index < len(value):
        return value[index]
    return None


def _slice_one(value: object, start: int | None, end: int | None) -> list[object]:
    """Apply one slice operation; bounds are clamped, never raising."""
    if not isinstance(value, list):
        raise _type_fault("slice", value, "Slice access requires an array")
    return value[start:end]


def _evaluate_iterate(value: object) -> Stream:
    """Emit array elements or object values in order."""
    if isinstance(value, list):
        return _stream(value)
    if isinstance(value, dict):
        return _stream(value.values())
    raise _type_fault("iterate", value, "Iteration requires an array or object")


def _evaluate_array_construct(
    expr: ArrayConstruct, value: object, context: EvalContext
) -> Stream:
    """Collect every item output into a single array."""
    collected: list[object] = []
    for item in expr.items:
        collected.extend(evaluate_expr(item, value, context))
    return _stream([collected])


def _evaluate_object_construct(
    expr: ObjectConstruct, value: object, context: EvalContext
) -> Stream:
    """Build one object; empty outputs omit the key, extra outputs are ignored."""
    built: dict[str, object] = {}
    for key, value_expr in expr.entries:
        values = evaluate_expr(value_expr, value, context)
        if values:
            built[key] = values[0]
    return _stream([built])


def _evaluate_optional(expr: Optional, value: object, context: EvalContext) -> Stream:
    """Evaluate an expression, turning type faults into no output."""
    try:
        return evaluate_expr(expr.expr, value, context)
    except QueryTypeError as exc:
        logger.debug("Suppressed type fault: %s", exc)
        return _stream()


def _func_select(expr: Select, value: object, context: EvalContext) -> Stream:
    """Emit the input when the predicate holds for it.

    Scalar inputs never match. Type faults raised by the operands propagate.
    """
    if not isinstance(value, dict | list):
        return _stream()

    left_values = evaluate_expr(expr.left, value, context)
    right_values = evaluate_expr(expr.right, value, context)
    if len(left_values) != 1 or len(right_values) != 1:
        return _stream()
    if _apply_comparison(expr.operator, left_values[0], right_values[0]):
        return _stream([value])
    return _stream()


def _func_map(expr: Map, value: object, context: EvalContext) -> Stream:
    """Map each array element using the body, collecting one array."""
    if not isinstance(value, list):
        raise _type_fault("map", value, "map requires an array")
    mapped: list[object] = []
    for item in value:
        mapped.extend(evaluate_expr(expr.body, item, context))
    return _stream([mapped])


def _func_keys(value: object) -> list[object]:
    """Return object keys in insertion order or array indices."""
    if isinstance(value, dict):
        return list(value.keys())
    if isinstance(value, list):
        return list(range(len(value)))
    raise _type_fault("keys", value, "keys requires an object or array")


def _func_length(value: object) -> int:
    """Return the size of an array, object or string."""
    if isinstance(value, list | dict | str):
        return len(value)
    raise _type_fault("length", value, "length requires an array, object or string")


def _is_number(value: object) -> bool:
    """Return whether value is a JSON number (booleans excluded)."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def json_equal(left: object, right: object) -> bool:
    """Deep structural equality over JSON values."""
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            json_equal(left_item, right_item)
            for left_item, right_item in zip(left, right, strict=True)
        )
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(
            json_equal(left[key], right[key]) for key in left
        )
    if type(left) is not type(right):
        return False
    return left == right


def json_compare(left: object, right: object) -> int | None:
    """Order two JSON values; None when no ordering is defined."""
    if _is_number(left) and _is_number(right):
        return _sign(left, right)
    if isinstance(left, str) and isinstance(right, str):
        return _sign(left, right)
    if isinstance(left, bool) and isinstance(right, bool):
        return _sign(int(left), int(right))
    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return None
        for left_item, right_item in zip(left, right, strict=True):
            ordering = json_compare(left_item, right_item)
            if ordering != 0:
                return ordering
        return 0
    return None


def _sign(left: object, right: object) -> int:
    """Three-way compare two values of one orderable kind."""
    if left < right:  # type: ignore[operator]
        return -1
    if left > right:  # type: ignore[operator]
        return 1
    return 0


def _apply_comparison(operator: str, left: object, right: object) -> bool:
    """Apply one comparison operator to two values."""
    if operator == "==":
        return json_equal(left, right)
    if operator == "!=":
        return not json_equal(left, right)

    ordering = json_compare(left, right)
    if ordering is None:
        return False
    if operator == ">":
        return ordering > 0
    if operator == "<":
        return ordering < 0
    if operator == ">=":
        return ordering >= 0
    if operator == "<=":
        return ordering <= 0
    raise QueryRuntimeError(f"Unsupported comparison operator: {operator}")
