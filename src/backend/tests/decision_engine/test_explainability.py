import pytest
from pydantic import ValidationError

from common.decision_engine import Agent, JsonRuleEvaluator
from common.decision_engine.explainability import ConditionTrace, TraceCollector, describe_condition, format_value


@pytest.mark.parametrize(
    "field,op,expected,text",
    [
        ("age", "gte", 18, "age >= 18"),
        ("status", "eq", "active", 'status = "active"'),
        ("email", "present", None, "email is present"),
        ("tags", "contains_any", ["vip"], 'tags contains any of ["vip"]'),
        ("score", "between", [1, 10], "score between [1, 10]"),
        ("flag", "eq", True, "flag = true"),
        ("x", "not_registered", 1, "x not_registered 1"),
    ],
)
def test_describe_condition_uses_operator_phrasing(field, op, expected, text):
    assert describe_condition(field, op, expected) == text


def test_format_value_renders_json_like_scalars():
    assert format_value(None) == "null"
    assert format_value("a") == '"a"'
    assert format_value(3.5) == "3.5"
    assert format_value({"k": 1}) == '{"k": 1}'


def test_condition_trace_fills_description_and_is_frozen():
    trace = ConditionTrace(field="age", operator="gte", expected_value=18, actual_value=20, result=True)
    assert trace.description == "age >= 18"
    assert str(trace) == "age >= 18"
    assert trace.passed and not trace.failed
    with pytest.raises(ValidationError):
        trace.result = False  # type: ignore[misc]


def test_trace_collector_records_in_order_and_can_be_cleared():
    collector = TraceCollector()
    collector.record(field="a", operator="eq", expected=1, actual=1, result=True)
    collector.record(field="b", operator="gt", expected=2, actual=1, result=False)
    assert [t.field for t in collector.traces] == ["a", "b"]
    assert len(collector) == 2

    rule_trace = collector.to_rule_trace("r1", matched=False)
    assert [t.field for t in rule_trace.failed_conditions()] == ["b"]

    collector.clear()
    assert collector.empty()
    # Traces already handed out are unaffected by clearing the collector.
    assert len(rule_trace.condition_traces) == 2


def test_missing_actual_value_is_recorded_as_null(check):
    collector = TraceCollector()
    check({"field": "age", "op": "gte", "value": 18}, {}, collector=collector)
    (trace,) = collector.traces
    assert trace.actual_value is None
    assert trace.result is False


def _loan_rules():
    return {
        "version": "2.0",
        "ruleset": "loans",
        "rules": [
            {
                "id": "minor",
                "if": {"field": "age", "op": "lt", "value": 18},
                "then": {"decision": "reject", "reason": "Applicant is a minor"},
            },
            {
                "id": "adult_with_income",
                "if": {
                    "all": [
                        {"field": "age", "op": "gte", "value": 18},
                        {"field": "income", "op": "gt", "value": 30000},
                    ]
                },
                "then": {"decision": "approve", "weight": 0.9, "reason": "Adult with income"},
            },
        ],
    }


def test_evaluation_carries_every_walked_rule_trace():
    evaluation = JsonRuleEvaluator(_loan_rules()).evaluate({"age": 30, "income": 50000})
    traces = evaluation.explainability.rule_traces
    assert [t.rule_id for t in traces] == ["minor", "adult_with_income"]
    assert [t.matched for t in traces] == [False, True]
    assert traces[1].decision == "approve"
    assert traces[1].weight == 0.9
    assert traces[0].decision is None
    assert evaluation.matched_trace.rule_id == "adult_with_income"


def test_decision_because_and_failed_conditions():
    decision = Agent([JsonRuleEvaluator(_loan_rules())]).decide({"age": 30, "income": 50000})
    assert decision.because() == ["age >= 18", "income > 30000"]
    assert decision.failed_conditions() == ["age < 18"]

    verbose = decision.failed_conditions(verbose=True)
    assert verbose[0]["field"] == "age"
    assert verbose[0]["actual_value"] == 30


def test_decision_explainability_summary():
    decision = Agent([JsonRuleEvaluator(_loan_rules())]).decide({"age": 30, "income": 50000})
    summary = decision.explainability()
    assert summary == {
        "decision": "approve",
        "because": ["age >= 18", "income > 30000"],
        "failed_conditions": ["age < 18"],
    }
    assert "rule_traces" in decision.explainability(verbose=True)


def test_explainability_can_be_disabled():
    evaluation = JsonRuleEvaluator(_loan_rules(), explain=False).evaluate({"age": 10})
    assert evaluation.decision == "reject"
    assert evaluation.explainability is None
    assert evaluation.matched_trace is None
