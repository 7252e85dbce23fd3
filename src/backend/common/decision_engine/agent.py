from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .audit import AuditSink, NullAuditSink
from .context import Context
from .errors import InvalidConfigurationError
from .evaluators import Evaluator
from .explainability import RuleTrace
from .models import Decision, Evaluation
from .scoring import ScoringStrategy, WeightedAverage
from .version import __version__

logger = logging.getLogger(__name__)

HASHED_PAYLOAD_KEYS = ("context", "evaluations", "decision", "confidence", "scoring_strategy")


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def compute_deterministic_hash(payload: Mapping[str, Any]) -> str:
    hashable = {key: payload.get(key) for key in HASHED_PAYLOAD_KEYS}
    return hashlib.sha256(canonical_json(hashable).encode("utf-8")).hexdigest()


class Agent:
    """Runs every evaluator, scores the proposals and hands the result to audit.

    Holds no per-request state, so one Agent can serve concurrent callers as
    long as its evaluators and audit sink are thread-safe.
    """

    def __init__(
        self,
        evaluators: Iterable[Evaluator],
        *,
        scoring_strategy: Optional[ScoringStrategy] = None,
        audit_sink: Optional[AuditSink] = None,
    ):
        self.evaluators = tuple(evaluators)
        self.scoring_strategy = scoring_strategy or WeightedAverage()
        self.audit_sink = audit_sink or NullAuditSink()
        self._validate_configuration()

    def _validate_configuration(self) -> None:
        if not self.evaluators:
            raise InvalidConfigurationError("At least one evaluator is required")
        for evaluator in self.evaluators:
            if not callable(getattr(evaluator, "evaluate", None)):
                raise InvalidConfigurationError(f"Evaluator {evaluator!r} must define evaluate()")
        if not callable(getattr(self.scoring_strategy, "score", None)):
            raise InvalidConfigurationError("Scoring strategy must define score()")
        if not callable(getattr(self.audit_sink, "record", None)):
            raise InvalidConfigurationError("Audit sink must define record()")

    def decide(
        self,
        context: Context | Mapping[str, Any],
        feedback: Optional[Mapping[str, Any]] = None,
    ) -> Decision:
        ctx = Context.coerce(context)
        feedback = dict(feedback or {})

        evaluations = self._collect_evaluations(ctx)
        scored = self.scoring_strategy.score(evaluations)

        explanations = self._build_explanations(evaluations, scored)
        audit_payload = self._build_audit_payload(ctx, feedback, evaluations, scored)
        decision = Decision(
            decision=scored.decision,
            confidence=scored.confidence,
            explanations=tuple(explanations),
            evaluations=tuple(evaluations),
            audit_payload=audit_payload,
        )

        self._record(decision)
        return decision

    def _collect_evaluations(self, ctx: Context) -> List[Evaluation]:
        evaluations: List[Evaluation] = []
        for evaluator in self.evaluators:
            try:
                evaluation = evaluator.evaluate(ctx)
            except Exception:
                logger.exception("Evaluator %s failed; skipping it for this decision", _evaluator_name(evaluator))
                continue
            if evaluation is not None:
                evaluations.append(evaluation)
        return evaluations

    def _build_explanations(self, evaluations: List[Evaluation], scored: Decision) -> List[str]:
        explanations = [f"Decision: {scored.decision} (confidence: {scored.confidence:.2f})"]

        supporting = [e for e in evaluations if e.decision == scored.decision]
        if len(supporting) == 1:
            e = supporting[0]
            explanations.append(f"{e.evaluator_name}: {e.reason} (weight: {e.weight})")
        elif len(supporting) > 1:
            explanations.append(f"Based on {len(supporting)} evaluators:")
            explanations.extend(f"  - {e.evaluator_name}: {e.reason} (weight: {e.weight})" for e in supporting)

        conflicting = [e for e in evaluations if e.decision != scored.decision]
        if conflicting:
            explanations.append(f"Conflicting evaluations resolved by {type(self.scoring_strategy).__name__}:")
            explanations.extend(
                f"  - {e.evaluator_name}: suggested '{e.decision}' (weight: {e.weight})" for e in conflicting
            )

        explanations.extend(scored.explanations)
        return explanations

    def _build_audit_payload(
        self,
        ctx: Context,
        feedback: Dict[str, Any],
        evaluations: List[Evaluation],
        scored: Decision,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="microseconds"),
            "context": json.loads(canonical_json(ctx.to_dict())),
            "feedback": json.loads(canonical_json(feedback)),
            "evaluations": [e.model_dump(mode="json", exclude={"explainability"}) for e in evaluations],
            "decision": scored.decision,
            "confidence": scored.confidence,
            "scoring_strategy": type(self.scoring_strategy).__name__,
            "scoring_params": dict(getattr(self.scoring_strategy, "params", dict)()),
            "engine_version": __version__,
        }
        payload["deterministic_hash"] = compute_deterministic_hash(payload)
        return payload

    def _record(self, decision: Decision) -> None:
        trace = _supporting_trace(decision)
        try:
            self.audit_sink.record(decision, trace)
        except Exception:
            logger.exception("Audit sink failed to record decision %s", decision.audit_payload.get("deterministic_hash"))


def _supporting_trace(decision: Decision) -> Optional[RuleTrace]:
    for evaluation in decision.supporting_evaluations():
        trace = evaluation.matched_trace
        if trace is not None:
            return trace
    return None


def _evaluator_name(evaluator: Any) -> str:
    return getattr(evaluator, "name", None) or type(evaluator).__name__
