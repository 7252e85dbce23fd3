from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Union

from .context import Context
from .enrichment import EnrichmentClient
from .evaluator import EvaluationScope, evaluate_in_scope
from .explainability import ExplainabilityResult, RuleTrace, TraceCollector
from .models import Evaluation
from .parser import Document, parse_rule_set
from .ruleset import Rule, RuleSet

DEFAULT_REASON = "Rule matched"


class Evaluator(ABC):
    name: str

    @abstractmethod
    def evaluate(
        self,
        context: Context | Mapping[str, Any],
    ) -> Optional[Evaluation]:  # pragma: no cover
        raise NotImplementedError


class JsonRuleEvaluator(Evaluator):
    """First-match-wins evaluation of one rule set.

    Rules are walked in declaration order and the first rule whose condition
    holds produces the Evaluation; later rules are not evaluated.
    """

    def __init__(
        self,
        rules: Union[RuleSet, Document],
        *,
        name: Optional[str] = None,
        enrichment: Optional[EnrichmentClient] = None,
        explain: bool = True,
    ):
        self.rule_set = rules if isinstance(rules, RuleSet) else parse_rule_set(rules)
        self.name = name or f"JsonRuleEvaluator({self.rule_set.name})"
        self._enrichment = enrichment
        self._explain = explain

    def evaluate(
        self,
        context: Context | Mapping[str, Any],
    ) -> Optional[Evaluation]:
        ctx = Context.coerce(context)
        collector = TraceCollector() if self._explain else None
        rule_traces: list[RuleTrace] = []

        for rule in self.rule_set.rules:
            # Fresh scope per rule: enrichment results never leak across rules.
            scope = EvaluationScope(context=ctx, enrichment=self._enrichment, collector=collector)
            matched = evaluate_in_scope(rule.condition, scope)
            if collector is not None:
                rule_traces.append(self._rule_trace(rule, matched, collector))
                collector.clear()
            if matched:
                return self._build_evaluation(rule, rule_traces)
        return None

    def _rule_trace(self, rule: Rule, matched: bool, collector: TraceCollector) -> RuleTrace:
        if not matched:
            return collector.to_rule_trace(rule.id, matched=False)
        return collector.to_rule_trace(
            rule.id,
            matched=True,
            decision=rule.decision,
            weight=rule.weight,
            reason=rule.reason,
        )

    def _build_evaluation(self, rule: Rule, rule_traces: list[RuleTrace]) -> Evaluation:
        explainability = None
        if self._explain:
            explainability = ExplainabilityResult(evaluator_name=self.name, rule_traces=tuple(rule_traces))
        return Evaluation(
            decision=rule.decision,
            weight=rule.weight,
            reason=rule.reason or DEFAULT_REASON,
            evaluator_name=self.name,
            metadata={
                "type": "json_rule",
                "rule_id": rule.id,
                "ruleset": self.rule_set.name,
                "version": self.rule_set.version,
            },
            explainability=explainability,
        )


class StaticEvaluator(Evaluator):
    """Always proposes the same decision; used for fallbacks and replay."""

    def __init__(
        self,
        decision: str,
        *,
        weight: float = 1.0,
        reason: str = "Static decision",
        name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.name = name or "StaticEvaluator"
        self._evaluation = Evaluation(
            decision=decision,
            weight=weight,
            reason=reason,
            evaluator_name=self.name,
            metadata=dict(metadata) if metadata is not None else {"type": "static"},
        )

    def evaluate(
        self,
        context: Context | Mapping[str, Any],
    ) -> Optional[Evaluation]:
        return self._evaluation
