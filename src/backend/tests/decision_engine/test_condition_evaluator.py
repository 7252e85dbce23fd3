from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from common.decision_engine.context import Context
from common.decision_engine.evaluator import evaluate
from common.decision_engine.operators import temporal
from common.decision_engine.parser import parse_condition
from common.decision_engine.registry import Operator, registry
from common.decision_engine.ruleset import AllCondition, AnyCondition, FieldCondition


def test_age_gte_scenario(check):
    cond = {"field": "age", "op": "gte", "value": 18}
    assert check(cond, {"age": 20}) is True
    assert check(cond, {"age": 16}) is False
    assert check(cond, {}) is False


def test_empty_all_is_true_and_empty_any_is_false():
    ctx = Context({})
    assert evaluate(AllCondition(()), ctx) is True
    assert evaluate(AnyCondition(()), ctx) is False


@pytest.fixture
def temp_operator():
    names = []

    def _register(name, func):
        registry.register(Operator(name=name, family="test", func=func, phrase="{field} " + name))
        names.append(name)

    yield _register
    for name in names:
        registry.unregister(name)


def test_all_and_any_short_circuit_left_to_right(temp_operator):
    seen = []

    def _spy(actual, expected):
        seen.append(expected)
        return expected

    temp_operator("spy", _spy)
    all_cond = AllCondition((FieldCondition("x", "spy", False), FieldCondition("x", "spy", True)))
    assert evaluate(all_cond, Context({})) is False
    assert seen == [False]

    seen.clear()
    any_cond = AnyCondition((FieldCondition("x", "spy", True), FieldCondition("x", "spy", False)))
    assert evaluate(any_cond, Context({})) is True
    assert seen == [True]


def test_operators_cannot_mutate_operand_or_context(temp_operator):
    def _append_operand(actual, expected):
        expected.append("b")
        return True

    def _rewrite_actual(actual, expected):
        actual["age"] = 10
        return True

    temp_operator("append_operand", _append_operand)
    temp_operator("rewrite_actual", _rewrite_actual)
    ctx = Context({"user": {"age": 30}})

    condition = parse_condition({"field": "user", "op": "append_operand", "value": ["a"]})
    assert evaluate(condition, ctx) is False
    assert condition.operand == ("a",)

    assert evaluate(FieldCondition("user", "rewrite_actual", None), ctx) is False
    assert ctx.get("user.age") == 30
    assert evaluate(parse_condition({"field": "user.age", "op": "gte", "value": 18}), ctx) is True


def test_unknown_operator_at_runtime_is_false():
    assert evaluate(FieldCondition("x", "no_such_op", 1), Context({"x": 1})) is False


def test_operator_exception_degrades_to_false(temp_operator, caplog):
    def _boom(actual, expected):
        raise RuntimeError("boom")

    temp_operator("boom", _boom)
    with caplog.at_level("WARNING"):
        assert evaluate(FieldCondition("x", "boom", 1), Context({"x": 1})) is False
    assert "'boom'" in caplog.text


@pytest.mark.parametrize(
    "op,actual,expected,result",
    [
        ("eq", "active", "active", True),
        ("eq", {"a": [1, 2]}, {"a": [1, 2]}, True),
        ("eq", True, 1, False),
        ("neq", "active", "inactive", True),
        ("neq", 1, 1, False),
        ("gt", 5, 3, True),
        ("gt", 3, 5, False),
        ("gt", "b", "a", True),
        ("gte", 5, 5, True),
        ("lt", 1.5, 2.5, True),
        ("lte", Decimal("2.0"), Decimal("2.0"), True),
        ("in", "b", ["a", "b"], True),
        ("in", "c", ["a", "b"], False),
        ("in", "a", "a", True),
        ("in", 1, [True], False),
    ],
)
def test_comparison_operators(check, op, actual, expected, result):
    assert check({"field": "v", "op": op, "value": expected}, {"v": actual}) is result


@pytest.mark.parametrize("op", ["gt", "gte", "lt", "lte"])
def test_ordering_requires_same_concrete_type(check, op):
    # Integer and float never compare, even when numerically ordered.
    assert check({"field": "v", "op": op, "value": 1.0}, {"v": 1}) is False
    assert check({"field": "v", "op": op, "value": "1"}, {"v": 1}) is False
    assert check({"field": "v", "op": op, "value": 0}, {"v": True}) is False
    assert check({"field": "v", "op": op, "value": 1}, {}) is False


@pytest.mark.parametrize("value", [0, 0.0, False, True, 42])
def test_scalars_are_present_never_blank(check, value):
    assert check({"field": "v", "op": "present"}, {"v": value}) is True
    assert check({"field": "v", "op": "blank"}, {"v": value}) is False


@pytest.mark.parametrize("value", ["", [], {}, "x", [0], {"k": None}])
def test_present_is_complement_of_blank_for_emptiable_values(check, value):
    present = check({"field": "v", "op": "present"}, {"v": value})
    blank = check({"field": "v", "op": "blank"}, {"v": value})
    assert present is (not blank)


def test_missing_and_null_are_blank(check):
    assert check({"field": "v", "op": "blank"}, {}) is True
    assert check({"field": "v", "op": "blank"}, {"v": None}) is True
    assert check({"field": "v", "op": "present"}, {"v": None}) is False


@pytest.mark.parametrize(
    "op,actual,expected,result",
    [
        ("contains", "hello world", "lo w", True),
        ("contains", "hello", "H", False),
        ("contains", ["hello"], "hello", False),
        ("starts_with", "invoice-42", "invoice", True),
        ("starts_with", 42, "4", False),
        ("ends_with", "report.pdf", ".pdf", True),
        ("ends_with", "report.pdf", 5, False),
        ("matches", "user@example.com", r"^[^@]+@example\.com$", True),
        ("matches", "abc123", r"\d+", True),
        ("matches", "abc", r"\d+", False),
        ("matches", "abc", "[unclosed", False),
        ("matches", 123, r"\d+", False),
    ],
)
def test_string_operators(check, op, actual, expected, result):
    assert check({"field": "v", "op": op, "value": expected}, {"v": actual}) is result


@pytest.mark.parametrize(
    "op,actual,expected,result",
    [
        ("between", 5, [1, 10], True),
        ("between", 10, {"min": 1, "max": 10}, True),
        ("between", 1, [1, 10], True),
        ("between", 11, [1, 10], False),
        ("between", "5", [1, 10], False),
        ("between", 5, [1], False),
        ("between", 5, "1-10", False),
        ("modulo", 10, [3, 1], True),
        ("modulo", 9, {"divisor": 3, "remainder": 0}, True),
        ("modulo", 10, [3, 2], False),
        ("modulo", 10, [0, 0], False),
        ("modulo", "10", [3, 1], False),
    ],
)
def test_numeric_operators(check, op, actual, expected, result):
    assert check({"field": "v", "op": op, "value": expected}, {"v": actual}) is result


@pytest.mark.parametrize(
    "op,actual,expected,result",
    [
        ("before_date", "2024-01-01", "2024-06-01", True),
        ("before_date", "2024-06-01", "2024-06-01", False),
        ("after_date", "2024-06-01T12:00:00Z", "2024-06-01T11:59:59+00:00", True),
        ("after_date", "2024/07/01", "2024-06-01", True),
        ("before_date", "not a date", "2024-06-01", False),
        ("after_date", 20240601, "2024-06-01", False),
        ("day_of_week", "2024-06-02", "sunday", True),
        ("day_of_week", "2024-06-02", 0, True),
        ("day_of_week", "2024-06-03", "Mon", True),
        ("day_of_week", "2024-06-03", "FRIDAY", False),
        ("day_of_week", "2024-06-08", 6, True),
        ("day_of_week", "2024-06-03", 1.0, True),
        ("day_of_week", "2024-06-03", 8, True),
        ("day_of_week", "2024-06-03", 2.0, False),
        ("day_of_week", "garbage", "monday", False),
    ],
)
def test_temporal_operators(check, op, actual, expected, result):
    assert check({"field": "v", "op": op, "value": expected}, {"v": actual}) is result


def test_within_days_compares_against_now(check, monkeypatch):
    now = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(temporal, "_now", lambda: now)
    cond = {"field": "v", "op": "within_days", "value": 7}
    assert check(cond, {"v": (now - timedelta(days=3)).isoformat()}) is True
    assert check(cond, {"v": (now + timedelta(days=7)).isoformat()}) is True
    assert check(cond, {"v": (now - timedelta(days=8)).isoformat()}) is False
    assert check(cond, {"v": "not a date"}) is False
    assert check({"field": "v", "op": "within_days", "value": "7"}, {"v": now.isoformat()}) is False


@pytest.mark.parametrize(
    "op,actual,expected,result",
    [
        ("contains_all", ["a", "b", "c"], ["a", "c"], True),
        ("contains_all", ["a", "b"], ["a", "z"], False),
        ("contains_any", ["a", "b"], ["z", "b"], True),
        ("contains_any", ["a", "b"], ["y", "z"], False),
        ("intersects", [1, 2, 3], [3, 4], True),
        ("intersects", [1, 2], [3, 4], False),
        ("subset_of", ["a"], ["a", "b"], True),
        ("subset_of", ["a", "x"], ["a", "b"], False),
        ("contains_all", "abc", ["a"], False),
        ("subset_of", ["a"], "ab", False),
    ],
)
def test_collection_operators(check, op, actual, expected, result):
    assert check({"field": "v", "op": op, "value": expected}, {"v": actual}) is result


def test_nested_paths_and_composite_conditions(check):
    cond = {
        "all": [
            {"field": "user.profile.role", "op": "in", "value": ["admin", "owner"]},
            {"any": [{"field": "user.age", "op": "gte", "value": 21}, {"field": "user.verified", "op": "eq", "value": True}]},
        ]
    }
    assert check(cond, {"user": {"profile": {"role": "admin"}, "age": 19, "verified": True}}) is True
    assert check(cond, {"user": {"profile": {"role": "admin"}, "age": 19, "verified": False}}) is False
    assert check(cond, {"user": {"profile": {"role": "guest"}, "age": 30}}) is False


def test_evaluation_does_not_mutate_context(check):
    data = {"tags": ["a", "b"], "user": {"age": 30}}
    check({"field": "tags", "op": "contains_all", "value": ["a"]}, data)
    assert data == {"tags": ["a", "b"], "user": {"age": 30}}
