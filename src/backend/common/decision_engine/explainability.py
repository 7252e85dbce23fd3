from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from .context import MISSING, thaw
from .registry import registry


def format_value(value: Any) -> str:
    if value is MISSING:
        return "null"
    value = thaw(value)
    if value is None or isinstance(value, (str, bool, list, tuple, dict)):
        return json.dumps(value, default=str)
    return str(value)


def describe_condition(field: str, operator: str, expected: Any) -> str:
    op = registry.get(operator)
    phrase = op.phrase if op is not None else "{field} {operator} {expected}"
    return phrase.format(field=field, operator=operator, expected=format_value(expected))


class ConditionTrace(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    expected_value: Any = None
    actual_value: Any = None
    result: bool
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _fill_description(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("description"):
            data = dict(data)
            data["description"] = describe_condition(
                str(data.get("field", "")),
                str(data.get("operator", "")),
                data.get("expected_value"),
            )
        return data

    @property
    def passed(self) -> bool:
        return self.result is True

    @property
    def failed(self) -> bool:
        return self.result is False

    def __str__(self) -> str:
        return self.description


class RuleTrace(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    matched: bool
    condition_traces: Tuple[ConditionTrace, ...] = ()
    decision: Optional[str] = None
    weight: Optional[float] = None
    reason: Optional[str] = None

    def passed_conditions(self) -> List[ConditionTrace]:
        return [t for t in self.condition_traces if t.passed]

    def failed_conditions(self) -> List[ConditionTrace]:
        return [t for t in self.condition_traces if t.failed]


class ExplainabilityResult(BaseModel):
    """Every rule an evaluator walked for one context, in evaluation order."""

    model_config = ConfigDict(frozen=True)

    evaluator_name: str
    rule_traces: Tuple[RuleTrace, ...] = ()

    def matched_rules(self) -> List[RuleTrace]:
        return [t for t in self.rule_traces if t.matched]

    def passed_conditions(self) -> List[ConditionTrace]:
        return [c for t in self.rule_traces for c in t.passed_conditions()]

    def failed_conditions(self) -> List[ConditionTrace]:
        return [c for t in self.rule_traces for c in t.failed_conditions()]

    def because(self) -> List[str]:
        # Only the matched rule explains the outcome; earlier misses land in failed_conditions.
        return [c.description for t in self.matched_rules() for c in t.passed_conditions()]

    def failed_descriptions(self, *, verbose: bool = False) -> List[Any]:
        if verbose:
            return [c.model_dump() for c in self.failed_conditions()]
        return [c.description for c in self.failed_conditions()]


class TraceCollector:
    """Accumulates condition traces for one rule evaluation; reusable after `clear`."""

    def __init__(self):
        self._traces: List[ConditionTrace] = []

    def add(self, trace: ConditionTrace) -> None:
        self._traces.append(trace)

    def record(self, *, field: str, operator: str, expected: Any, actual: Any, result: bool) -> ConditionTrace:
        trace = ConditionTrace(
            field=field,
            operator=operator,
            expected_value=thaw(expected),
            actual_value=None if actual is MISSING else thaw(actual),
            result=result,
        )
        self.add(trace)
        return trace

    @property
    def traces(self) -> Tuple[ConditionTrace, ...]:
        return tuple(self._traces)

    def clear(self) -> None:
        self._traces.clear()

    def empty(self) -> bool:
        return not self._traces

    def __len__(self) -> int:
        return len(self._traces)

    def to_rule_trace(self, rule_id: str, *, matched: bool, **outcome: Any) -> RuleTrace:
        return RuleTrace(rule_id=rule_id, matched=matched, condition_traces=self.traces, **outcome)


def summarize(results: List[ExplainabilityResult], *, verbose: bool = False) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "because": [d for r in results for d in r.because()],
        "failed_conditions": [d for r in results for d in r.failed_descriptions(verbose=verbose)],
    }
    if verbose:
        summary["rule_traces"] = [r.model_dump() for r in results]
    return summary
