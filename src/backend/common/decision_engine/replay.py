from __future__ import annotations

import logging
from typing import Any, List, Mapping

from .agent import Agent
from .audit import NullAuditSink
from .errors import ReplayMismatchError, RuleSetValidationError
from .evaluators import StaticEvaluator
from .models import Decision, Evaluation
from .scoring import Consensus, MaxWeight, ScoringStrategy, Threshold, WeightedAverage

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("context", "evaluations", "decision", "confidence")
CONFIDENCE_TOLERANCE = 1e-4

_STRATEGY_BY_CLASS_NAME = {
    "WeightedAverage": WeightedAverage,
    "MaxWeight": MaxWeight,
    "Consensus": Consensus,
    "Threshold": Threshold,
}


def replay(audit_payload: Mapping[str, Any], *, strict: bool = True) -> Decision:
    """Re-score a recorded decision from its audit payload.

    The recorded evaluations are replayed through static evaluators, so the
    result depends only on the payload and the scoring strategy it names.
    """
    missing = [key for key in REQUIRED_KEYS if key not in audit_payload]
    if missing:
        raise RuleSetValidationError([f"Audit payload missing required key: {key}" for key in missing])

    evaluations = [Evaluation.model_validate(raw) for raw in audit_payload["evaluations"]]
    agent = Agent(
        [_static_evaluator(e) for e in evaluations] or [_NoOpEvaluator()],
        scoring_strategy=_strategy_for(audit_payload.get("scoring_strategy"), audit_payload.get("scoring_params")),
        audit_sink=NullAuditSink(),
    )
    replayed = agent.decide(audit_payload["context"], audit_payload.get("feedback") or {})

    differences = _differences(audit_payload["decision"], audit_payload["confidence"], replayed)
    if differences:
        if strict:
            raise ReplayMismatchError(
                expected={"decision": audit_payload["decision"], "confidence": audit_payload["confidence"]},
                actual={"decision": replayed.decision, "confidence": replayed.confidence},
                differences=differences,
            )
        for diff in differences:
            logger.warning("Replay difference: %s", diff)
    return replayed


def _static_evaluator(evaluation: Evaluation) -> StaticEvaluator:
    return StaticEvaluator(
        evaluation.decision,
        weight=evaluation.weight,
        reason=evaluation.reason or "Replayed evaluation",
        name=evaluation.evaluator_name or None,
        metadata=evaluation.metadata,
    )


class _NoOpEvaluator:
    name = "NoOpEvaluator"

    def evaluate(self, context: Any) -> None:
        return None


def _strategy_for(name: Any, params: Any) -> ScoringStrategy:
    cls = _STRATEGY_BY_CLASS_NAME.get(str(name or "").rsplit(".", 1)[-1])
    if cls is None:
        return WeightedAverage()
    return cls(**params) if isinstance(params, Mapping) else cls()


def _differences(decision: Any, confidence: Any, replayed: Decision) -> List[str]:
    differences: List[str] = []
    if str(decision) != replayed.decision:
        differences.append(f"decision mismatch (expected: {decision}, got: {replayed.decision})")
    try:
        drift = abs(float(confidence) - replayed.confidence)
    except (TypeError, ValueError):
        drift = float("inf")
    if drift > CONFIDENCE_TOLERANCE:
        differences.append(f"confidence mismatch (expected: {confidence}, got: {replayed.confidence})")
    return differences
