from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union


@dataclass(frozen=True)
class AllCondition:
    children: Tuple["Condition", ...] = ()


@dataclass(frozen=True)
class AnyCondition:
    children: Tuple["Condition", ...] = ()


@dataclass(frozen=True)
class FieldCondition:
    path: str
    operator: str
    # Operand as written in the document, frozen read-only; its shape depends on the operator.
    operand: Any = None


Condition = Union[AllCondition, AnyCondition, FieldCondition]


@dataclass(frozen=True)
class Rule:
    id: str
    condition: Condition
    decision: str
    weight: float = 1.0
    reason: Optional[str] = None


@dataclass(frozen=True)
class RuleSet:
    version: str
    rules: Tuple[Rule, ...] = ()
    name: str = "unknown"

    def rule_ids(self) -> Tuple[str, ...]:
        return tuple(rule.id for rule in self.rules)
