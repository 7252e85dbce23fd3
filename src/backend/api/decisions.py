from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from common.decision_engine import Agent, JsonRuleEvaluator, RuleSetValidationError, validate
from common.decision_engine.config import build_scoring_strategy, get_engine_settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decisions", tags=["decisions"])


class ValidateRequest(BaseModel):
    document: Dict[str, Any]


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class EvaluateRequest(BaseModel):
    rules: List[Dict[str, Any]] = Field(min_length=1)
    context: Dict[str, Any] = Field(default_factory=dict)
    feedback: Dict[str, Any] = Field(default_factory=dict)
    strategy: Optional[str] = None


@router.post("/validate", response_model=ValidateResponse)
def validate_rules(payload: ValidateRequest) -> ValidateResponse:
    errors = validate(payload.document)
    return ValidateResponse(valid=not errors, errors=errors)


@router.post("/evaluate")
def evaluate_decision(payload: EvaluateRequest) -> dict[str, Any]:
    try:
        evaluators = [JsonRuleEvaluator(document) for document in payload.rules]
    except RuleSetValidationError as exc:
        raise HTTPException(status_code=422, detail={"errors": exc.errors}) from exc

    try:
        strategy = build_scoring_strategy(payload.strategy, get_engine_settings())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail={"errors": [str(exc)]}) from exc

    decision = Agent(evaluators, scoring_strategy=strategy).decide(payload.context, payload.feedback)
    logger.info(
        "Decision %s (confidence %.2f) from %d rule set(s)",
        decision.decision,
        decision.confidence,
        len(evaluators),
    )
    return decision.model_dump(mode="json")
