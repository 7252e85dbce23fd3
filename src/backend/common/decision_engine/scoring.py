"""Strategies that reduce many evaluations to one decision.

Every strategy is stateless and returns an explicit NO_DECISION result for an
empty evaluation list instead of raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

from .models import INCONCLUSIVE, NO_DECISION, Decision, Evaluation


def _round_confidence(value: float) -> float:
    return round(min(max(value, 0.0), 1.0), 4)


def _group_weights(evaluations: Sequence[Evaluation]) -> Dict[str, float]:
    # dicts keep first-seen order, so ties resolve to the earliest decision.
    totals: Dict[str, float] = {}
    for evaluation in evaluations:
        totals[evaluation.decision] = totals.get(evaluation.decision, 0.0) + evaluation.weight
    return totals


def _group_counts(evaluations: Sequence[Evaluation]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for evaluation in evaluations:
        counts[evaluation.decision] = counts.get(evaluation.decision, 0) + 1
    return counts


def _weighted_winner(evaluations: Sequence[Evaluation]) -> Tuple[str, float]:
    totals = _group_weights(evaluations)
    winner = max(totals, key=lambda decision: totals[decision])
    total_weight = sum(totals.values())
    confidence = totals[winner] / total_weight if total_weight > 0 else 0.0
    return winner, confidence


class ScoringStrategy(ABC):
    name: str = ""

    def score(self, evaluations: Sequence[Evaluation]) -> Decision:
        evaluations = list(evaluations)
        if not evaluations:
            return Decision(
                decision=NO_DECISION,
                confidence=0.0,
                explanations=("No evaluations to score",),
            )
        return self._score(evaluations)

    def params(self) -> Dict[str, Any]:
        return {}

    @abstractmethod
    def _score(self, evaluations: List[Evaluation]) -> Decision:  # pragma: no cover
        raise NotImplementedError

    def _decision(self, decision: str, confidence: float, evaluations: List[Evaluation], *notes: str) -> Decision:
        return Decision(
            decision=decision,
            confidence=_round_confidence(confidence),
            explanations=tuple(notes),
            evaluations=tuple(evaluations),
        )


class WeightedAverage(ScoringStrategy):
    """Highest summed weight wins; confidence is its share of all weight."""

    name = "weighted_average"

    def _score(self, evaluations: List[Evaluation]) -> Decision:
        winner, confidence = _weighted_winner(evaluations)
        return self._decision(winner, confidence, evaluations)


class MaxWeight(ScoringStrategy):
    """The single heaviest evaluation wins; ties go to the earliest."""

    name = "max_weight"

    def _score(self, evaluations: List[Evaluation]) -> Decision:
        best = max(evaluations, key=lambda e: e.weight)
        return self._decision(best.decision, best.weight, evaluations)


class Consensus(ScoringStrategy):
    """Count-based majority vote.

    A decision wins only when strictly more than `minimum_agreement` of the
    evaluations agree on it; otherwise the result is INCONCLUSIVE.
    """

    name = "consensus"

    def __init__(self, minimum_agreement: float = 0.5):
        if not 0.0 <= minimum_agreement < 1.0:
            raise ValueError("minimum_agreement must be in [0.0, 1.0)")
        self.minimum_agreement = minimum_agreement

    def params(self) -> Dict[str, Any]:
        return {"minimum_agreement": self.minimum_agreement}

    def _score(self, evaluations: List[Evaluation]) -> Decision:
        counts = _group_counts(evaluations)
        leader = max(counts, key=lambda decision: counts[decision])
        agreement = counts[leader] / len(evaluations)
        if agreement > self.minimum_agreement:
            return self._decision(leader, agreement, evaluations)
        return self._decision(
            INCONCLUSIVE,
            0.0,
            evaluations,
            f"No decision reached majority agreement (best: {leader} at {agreement:.2f})",
        )


class Threshold(ScoringStrategy):
    """Weighted average that only commits when confidence exceeds `threshold`."""

    name = "threshold"

    def __init__(self, threshold: float = 0.7, fallback_decision: str = NO_DECISION):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be in [0.0, 1.0]")
        if not fallback_decision or not fallback_decision.strip():
            raise ValueError("fallback_decision cannot be empty")
        self.threshold = threshold
        self.fallback_decision = fallback_decision

    def params(self) -> Dict[str, Any]:
        return {"threshold": self.threshold, "fallback_decision": self.fallback_decision}

    def _score(self, evaluations: List[Evaluation]) -> Decision:
        winner, confidence = _weighted_winner(evaluations)
        if confidence > self.threshold:
            return self._decision(winner, confidence, evaluations)
        return self._decision(
            self.fallback_decision,
            confidence,
            evaluations,
            f"Confidence {confidence:.2f} for {winner} did not exceed threshold {self.threshold:.2f}",
        )


STRATEGIES = {
    WeightedAverage.name: WeightedAverage,
    MaxWeight.name: MaxWeight,
    Consensus.name: Consensus,
    Threshold.name: Threshold,
}
