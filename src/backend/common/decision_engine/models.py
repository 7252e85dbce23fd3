from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .explainability import ExplainabilityResult, RuleTrace, summarize

NO_DECISION = "no_decision"
INCONCLUSIVE = "inconclusive"


class Evaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    decision: str
    weight: float = Field(default=1.0, ge=0.0, le=1.0)
    reason: Optional[str] = None
    evaluator_name: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    explainability: Optional[ExplainabilityResult] = None

    @field_validator("decision")
    @classmethod
    def _decision_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("decision cannot be empty")
        return value

    @property
    def matched_trace(self) -> Optional[RuleTrace]:
        if self.explainability is None:
            return None
        matched = self.explainability.matched_rules()
        return matched[0] if matched else None


class Decision(BaseModel):
    model_config = ConfigDict(frozen=True)

    decision: str
    confidence: float = Field(ge=0.0, le=1.0)
    explanations: Tuple[str, ...] = ()
    evaluations: Tuple[Evaluation, ...] = ()
    audit_payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_conclusive(self) -> bool:
        return self.decision not in (NO_DECISION, INCONCLUSIVE)

    def supporting_evaluations(self) -> List[Evaluation]:
        return [e for e in self.evaluations if e.decision == self.decision]

    def _explainability_results(self) -> List[ExplainabilityResult]:
        return [e.explainability for e in self.supporting_evaluations() if e.explainability is not None]

    def because(self) -> List[str]:
        """Descriptions of the conditions that produced this decision."""
        return [d for r in self._explainability_results() for d in r.because()]

    def failed_conditions(self, *, verbose: bool = False) -> List[Any]:
        return [d for r in self._explainability_results() for d in r.failed_descriptions(verbose=verbose)]

    def explainability(self, *, verbose: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {"decision": self.decision}
        data.update(summarize(self._explainability_results(), verbose=verbose))
        return data
