"""Tests for query language runtime execution."""

from __future__ import annotations

import logging

import pytest

from jqlite.query_language import (
    EvalContext,
    QueryBudgetExceededError,
    QueryRuntimeError,
    QueryTypeError,
    compile_query_text,
    evaluate_expr,
    execute,
    parse_query,
)
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
from jqlite.query_language.runtime import json_compare, json_equal


def _run(query: str, document: object) -> list[object]:
    return compile_query_text(query)(document)


@pytest.mark.parametrize(
    "value",
    [None, True, 0, 1.5, "text", [], [1, [2]], {}, {"a": {"b": None}}],
)
def test_identity_returns_input(value: object) -> None:
    """Identity should emit its input as the only output."""
    assert execute(Identity(), value) == [value]


@pytest.mark.parametrize(
    ("first", "second", "third", "document"),
    [
        (Property("a"), Iterate(), Property("b"), {"a": [{"b": 1}, {"b": 2}]}),
        (Iterate(), Iterate(), Length(), [[[1, 2], "xyz"], [{"k": 1}]]),
        (RecursiveDescent(), Optional(Keys()), Identity(), {"a": [1, {"b": 2}]}),
    ],
)
def test_pipe_is_associative(first: Expr, second: Expr, third: Expr, document: object) -> None:
    """Grouping of pipe stages should not change the output."""
    left_nested = Pipe(Pipe(first, second), third)
    right_nested = Pipe(first, Pipe(second, third))
    assert execute(left_nested, document) == execute(right_nested, document)


def test_pipe_flattens_outputs_in_order() -> None:
    """Every left output should be fed to the right side, in order."""
    document = {"groups": [{"xs": [1, 2]}, {"xs": []}, {"xs": [3]}]}
    assert _run(".groups[] | .xs[]", document) == [1, 2, 3]


def test_property_missing_key_is_null() -> None:
    """Absent keys should resolve to null rather than failing."""
    assert execute(Property("x"), {}) == [None]


@pytest.mark.parametrize("value", [[1, 2], "text", 3, True, None])
def test_property_on_non_object_is_type_fault(value: object) -> None:
    """Property access should require an object input."""
    with pytest.raises(QueryTypeError) as exc_info:
        execute(Property("x"), value)
    assert exc_info.value.operation == "property"


def test_type_fault_names_offending_type() -> None:
    """Type faults should carry the JSON type name of the bad input."""
    with pytest.raises(QueryTypeError) as exc_info:
        execute(Property("x"), [1, 2])
    assert exc_info.value.type_name == "array"
    assert str(exc_info.value) == "Cannot access property 'x' on non-object, got array"


@pytest.mark.parametrize(
    ("index", "expected"),
    [(0, 1), (2, 3), (-1, 3), (-3, 1), (5, None), (-4, None)],
)
def test_index(index: int, expected: object) -> None:
    """Negative indices count from the end and out of range gives null."""
    assert execute(Index(index), [1, 2, 3]) == [expected]


def test_index_on_object_is_type_fault() -> None:
    """Index access should require an array input."""
    with pytest.raises(QueryTypeError, match="Index access requires an array, got object"):
        execute(Index(0), {"0": 1})


@pytest.mark.parametrize(
    ("start", "end", "document", "expected"),
    [
        (-2, None, [1, 2, 3, 4], [3, 4]),
        (5, 1, [1, 2, 3], []),
        (None, 2, [1, 2, 3], [1, 2]),
        (1, None, [1, 2, 3], [2, 3]),
        (None, None, [1, 2], [1, 2]),
        (-10, 10, [1, 2], [1, 2]),
        (1, -1, [1, 2, 3, 4], [2, 3]),
        (7, 9, [1, 2], []),
    ],
)
def test_slice(
    start: int | None, end: int | None, document: list[object], expected: object
) -> None:
    """Slices should clamp their bounds and never fail within an array."""
    assert execute(Slice(start, end), document) == [expected]


def test_slice_on_string_is_type_fault() -> None:
    """Slicing should require an array input."""
    with pytest.raises(QueryTypeError):
        execute(Slice(0, 1), "abc")


def test_iterate_array_and_object() -> None:
    """Iteration should emit array elements or object values in order."""
    assert execute(Iterate(), [3, 1, 2]) == [3, 1, 2]
    assert execute(Iterate(), {"z": 1, "a": 2}) == [1, 2]
    assert execute(Iterate(), []) == []


@pytest.mark.parametrize("value", ["abc", 1, None, False])
def test_iterate_scalar_is_type_fault(value: object) -> None:
    """Scalars cannot be iterated."""
    with pytest.raises(QueryTypeError):
        execute(Iterate(), value)


def test_recursive_descent_is_pre_order() -> None:
    """Recursive descent should emit parents before children, in document order."""
    document = {"a": [1, {"b": 2}], "c": "x"}
    assert execute(RecursiveDescent(), document) == [
        document,
        [1, {"b": 2}],
        1,
        {"b": 2},
        2,
        "x",
    ]


def test_recursive_descent_handles_deep_nesting() -> None:
    """Deeply nested documents should not exhaust the call stack."""
    document: object = 0
    for _ in range(5000):
        document = [document]
    assert len(evaluate_expr(RecursiveDescent(), document, EvalContext())) == 5001


def test_recursive_descent_honors_visit_budget() -> None:
    """Exceeding the visit budget should abort evaluation."""
    with pytest.raises(QueryBudgetExceededError) as exc_info:
        execute(RecursiveDescent(), [1, 2, 3], EvalContext(max_visits=3))
    assert exc_info.value.limit == 3
    assert isinstance(exc_info.value, QueryRuntimeError)


def test_recursive_descent_budget_counts_all_descents() -> None:
    """The budget should be shared by every descent in one evaluation."""
    context = EvalContext(max_visits=4)
    assert execute(RecursiveDescent(), [1], context) == [[1], 1]
    assert context.visits == 2
    with pytest.raises(QueryBudgetExceededError):
        execute(RecursiveDescent(), [1, 2], context)


def test_array_construct_concatenates_outputs() -> None:
    """Array literals should gather all outputs of all items into one array."""
    document = {"a": [1, 2], "b": "x"}
    expr = ArrayConstruct((Pipe(Property("a"), Iterate()), Property("b")))
    assert execute(expr, document) == [[1, 2, "x"]]
    assert execute(ArrayConstruct(()), document) == [[]]


def test_object_construct_uses_first_output_and_omits_empty() -> None:
    """Empty outputs omit the key and extra outputs are ignored."""
    document = {"xs": [1, 2], "none": []}
    expr = ObjectConstruct(
        (
            ("first", Pipe(Property("xs"), Iterate())),
            ("skipped", Pipe(Property("none"), Iterate())),
            ("whole", Property("xs")),
        )
    )
    assert execute(expr, document) == [{"first": 1, "whole": [1, 2]}]


def test_object_construct_keeps_declaration_order() -> None:
    """Built objects should list keys in declaration order."""
    expr = ObjectConstruct((("z", Literal(1)), ("a", Literal(2))))
    (built,) = execute(expr, None)
    assert list(built) == ["z", "a"]


def test_object_shorthand_selects_named_keys() -> None:
    """`{city}` should copy only the named key."""
    assert _run("{city}", {"city": "X", "zip": "Y"}) == [{"city": "X"}]


def test_literal_words_address_keys() -> None:
    """Keys spelled `null`, `true` or `false` should be reachable by name."""
    document = {"null": 1, "true": 2, "false": 3}
    assert _run(".null", document) == [1]
    assert _run(".true", document) == [2]
    assert _run("{false, n: .null}", document) == [{"false": 3, "n": 1}]
    assert _run("select(.true == 2) | .false", document) == [3]


def test_select_filters_iterated_elements() -> None:
    """select after iteration should keep only matching elements."""
    expr = Pipe(Iterate(), Select(Property("t"), "==", Literal("b")))
    assert execute(expr, [{"t": "a"}, {"t": "b"}]) == [{"t": "b"}]


def test_select_on_bare_value() -> None:
    """select should pass or drop a single non-array input."""
    assert _run('select(.name == "x")', {"name": "x"}) == [{"name": "x"}]
    assert _run('select(.name == "y")', {"name": "x"}) == []


def test_select_on_scalar_never_matches() -> None:
    """Scalar inputs should produce no output, whatever the predicate."""
    assert _run("select(. == 3)", 3) == []
    assert _run('select(. == "x")', "x") == []
    assert _run(".[] | select(. > 0)", [1, 2, 3]) == []
    document = [{"n": 1}, "text", 5, None, {"n": 3}]
    assert _run(".[] | select(.n > 2)", document) == [{"n": 3}]


def test_select_operand_type_fault_propagates() -> None:
    """A wrong-kind operand on an object or array input should raise."""
    expr = Select(Pipe(Property("a"), Property("b")), "==", Literal(1))
    with pytest.raises(QueryTypeError, match="Cannot access property 'b' on non-object"):
        execute(expr, {"a": 1})
    with pytest.raises(QueryTypeError, match="Index access requires an array"):
        _run(".[] | select(.a[0] == 1)", [{"a": {"x": 1}}])
    with pytest.raises(QueryTypeError):
        _run("select(.name == 1)", [1, 2])


def test_select_operand_type_fault_suppressed_by_optional() -> None:
    """`?` around the operand path should turn the fault into no match."""
    document = [{"a": 1}, {"a": {"b": 1}}]
    assert _run(".[] | select(.a.b? == 1)", document) == [{"a": {"b": 1}}]


def test_select_requires_single_operand_values() -> None:
    """Operands yielding zero or many values should fail the predicate."""
    document = {"xs": [1, 1], "empty": []}
    assert _run("select(.xs[] == 1)", document) == []
    assert _run("select(.empty[] == 1)", document) == []
    assert _run("select(.xs | length == 2)", document) == [document]


def test_select_missing_key_compares_as_null() -> None:
    """A missing key resolves to null inside predicates."""
    document = [{"a": 1}, {"b": 2}]
    assert _run(".[] | select(.a == null)", document) == [{"b": 2}]
    assert _run(".[] | select(.a != null) | .a", document) == [1]


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        (".[] | select(.v > 2) | .v", [3, 4.5]),
        (".[] | select(.v >= 2) | .v", [2, 3, 4.5]),
        (".[] | select(.v < 2) | .v", [1]),
        (".[] | select(.v <= 2) | .v", [1, 2]),
        (".[] | select(.v != 2) | .v", [1, 3, 4.5]),
        (".[] | select(.v == 2) | .v", [2]),
    ],
)
def test_select_numeric_comparators(query: str, expected: list[object]) -> None:
    """Ordering comparators should compare numbers by magnitude."""
    assert _run(query, [{"v": 1}, {"v": 2}, {"v": 3}, {"v": 4.5}]) == expected


def test_select_string_and_boolean_ordering() -> None:
    """Strings order lexicographically and false sorts before true."""
    strings = [{"v": "a"}, {"v": "b"}, {"v": "c"}, {"v": "ba"}]
    assert _run('.[] | select(.v > "b") | .v', strings) == ["c", "ba"]
    booleans = [{"v": True}, {"v": False}]
    assert _run(".[] | select(.v > false) | .v", booleans) == [True]


def test_select_mixed_kinds_never_order() -> None:
    """Pairs without an ordering should fail every ordering comparator."""
    document = [{"v": "1"}, {"v": True}, {"v": None}, {"v": [1]}, {"v": {"a": 1}}]
    assert _run(".[] | select(.v > 0)", document) == []
    assert _run(".[] | select(.v <= 0)", document) == []


def test_select_deep_equality() -> None:
    """Equality should compare arrays and objects structurally."""
    document = [
        {"v": [1, {"k": "x"}], "w": [1, {"k": "x"}]},
        {"v": [1, 2], "w": [2, 1]},
        {"v": {"b": 2, "a": 1}, "w": {"a": 1, "b": 2}},
        {"v": {"a": 1}, "w": {"a": 1, "b": None}},
    ]
    assert _run(".[] | select(.v == .w) | .w", document) == [
        [1, {"k": "x"}],
        {"a": 1, "b": 2},
    ]
    assert len(_run(".[] | select(.v != .w)", document)) == 2


def test_map_returns_single_array() -> None:
    """map should collect the body outputs of every element into one array."""
    assert execute(Map(Property("a")), [{"a": 1}, {"a": 2}]) == [[1, 2]]
    assert _run("map(.[])", [[1, 2], [], [3]]) == [[1, 2, 3]]
    assert _run("map(.)", []) == [[]]


def test_map_with_select_drops_elements() -> None:
    """map bodies producing nothing should drop the element."""
    document = [{"v": 1}, {"v": 2}, {"v": 3}]
    assert _run("map(select(.v > 1) | .v)", document) == [[2, 3]]


def test_map_on_object_is_type_fault() -> None:
    """map should require an array input."""
    with pytest.raises(QueryTypeError, match="map requires an array, got object"):
        execute(Map(Identity()), {"a": 1})


def test_keys_keeps_insertion_order() -> None:
    """keys should not sort object keys."""
    assert execute(Keys(), {"b": 1, "a": 2}) == [["b", "a"]]
    assert execute(Keys(), ["x", "y", "z"]) == [[0, 1, 2]]


def test_keys_on_string_is_type_fault() -> None:
    """keys should require an object or array."""
    with pytest.raises(QueryTypeError) as exc_info:
        execute(Keys(), "abc")
    assert exc_info.value.operation == "keys"
    assert exc_info.value.type_name == "string"


@pytest.mark.parametrize(
    ("value", "expected"),
    [({"a": 1, "b": 2}, 2), ([1, 2, 3], 3), ("héllo", 5), ("", 0), ([], 0)],
)
def test_length(value: object, expected: int) -> None:
    """length should count elements, keys or characters."""
    assert execute(Length(), value) == [expected]


@pytest.mark.parametrize("value", [None, 3, True])
def test_length_on_scalar_is_type_fault(value: object) -> None:
    """length should reject values without a size."""
    with pytest.raises(QueryTypeError):
        execute(Length(), value)


def test_type_fault_aborts_whole_query() -> None:
    """The first type fault should abort evaluation without partial output."""
    with pytest.raises(QueryTypeError):
        _run(".[] | .name", [{"name": "a"}, "oops", {"name": "b"}])


def test_optional_suppresses_type_faults() -> None:
    """`?` should turn type faults of its expression into no output."""
    document = [{"name": "a"}, "oops", {"name": "b"}]
    assert _run(".[] | .name?", document) == ["a", "b"]
    assert _run(".name?", [1]) == []
    assert _run(".[]?", 5) == []


def test_optional_logs_suppressed_fault(caplog: pytest.LogCaptureFixture) -> None:
    """Suppressed type faults should be logged at debug level."""
    caplog.set_level(logging.DEBUG, logger="jqlite")
    assert execute(Optional(Keys()), 3) == []
    assert "Suppressed type fault: keys requires an object or array, got number" in caplog.text


def test_optional_does_not_hide_budget_errors() -> None:
    """`?` should only suppress type faults."""
    with pytest.raises(QueryBudgetExceededError):
        execute(Optional(RecursiveDescent()), [1, 2], EvalContext(max_visits=1))


def test_execute_returns_copies() -> None:
    """Mutating results should not change the input document."""
    document = {"items": [{"name": "a"}]}
    (items,) = execute(Property("items"), document)
    items.append("extra")
    items[0]["name"] = "changed"
    assert document == {"items": [{"name": "a"}]}


def test_evaluate_expr_returns_live_values() -> None:
    """evaluate_expr should return values from the input without copying."""
    document = {"items": [1]}
    (items,) = evaluate_expr(Property("items"), document, EvalContext())
    assert items is document["items"]


def test_execute_rejects_unknown_expression_type() -> None:
    """Unsupported expression nodes should raise runtime errors."""

    class Unknown(Expr):
        pass

    with pytest.raises(QueryRuntimeError, match="Unsupported expression type: Unknown"):
        execute(Unknown(), None)


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        (1, 1.0, True),
        (True, 1, False),
        (False, 0, False),
        (None, None, True),
        ([1, [2]], [1, [2]], True),
        ([1, 2], [2, 1], False),
        ({"a": 1, "b": [True]}, {"b": [True], "a": 1}, True),
        ({"a": 1}, {"a": 1, "b": None}, False),
        ("1", 1, False),
    ],
)
def test_json_equal(left: object, right: object, expected: bool) -> None:
    """Equality should be structural and never treat booleans as numbers."""
    assert json_equal(left, right) is expected


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        (1, 2, -1),
        (2.5, 2, 1),
        ("b", "a", 1),
        ("a", "a", 0),
        (False, True, -1),
        ([1, 2], [1, 3], -1),
        ([1, "x"], [1, "x"], 0),
        ([1, 2], [1, 2, 3], None),
        ([1, "x"], [1, 2], None),
        ({"a": 1}, {"a": 2}, None),
        (True, 1, None),
        (None, None, None),
    ],
)
def test_json_compare(left: object, right: object, expected: int | None) -> None:
    """Ordering should exist only between values of one orderable kind."""
    assert json_compare(left, right) == expected


def test_end_to_end_examples() -> None:
    """Parsed queries should evaluate against decoded documents."""
    assert _run(".phones[0].number", {"phones": [{"number": "555-1234"}]}) == ["555-1234"]
    assert _run(".items | length", {"items": [1, 2, 3]}) == [3]


def test_end_to_end_projection_pipeline() -> None:
    """Iteration, filtering and construction should compose through pipes."""
    document = {
        "items": [
            {"name": "pen", "price": 2, "tags": ["office"]},
            {"name": "desk", "price": 150, "tags": []},
            {"name": "lamp", "price": 40, "tags": ["home", "office"]},
        ]
    }
    query = ".items[] | select(.price > 10) | {name, tags: .tags | length}"
    assert _run(query, document) == [
        {"name": "desk", "tags": 0},
        {"name": "lamp", "tags": 2},
    ]
    assert _run("[.items[].name]", document) == [["pen", "desk", "lamp"]]
    assert _run(".items | map(.price) | .[1:]", document) == [[150, 40]]


def test_parsed_expression_is_reusable() -> None:
    """One parsed expression should evaluate independently per document."""
    expr = parse_query(".a")
    assert execute(expr, {"a": 1}) == [1]
    assert execute(expr, {"a": 2}) == [2]
