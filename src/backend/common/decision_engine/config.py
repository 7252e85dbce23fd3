from __future__ import annotations

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .models import NO_DECISION
from .scoring import STRATEGIES, Consensus, ScoringStrategy, Threshold


load_dotenv()

StrategyName = Literal["weighted_average", "max_weight", "consensus", "threshold"]


class EngineSettings(BaseModel):
    scoring_strategy: StrategyName = "weighted_average"
    # Threshold strategy commits only when confidence is strictly above this.
    threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    fallback_decision: str = NO_DECISION
    # Consensus requires strictly more than this fraction of evaluations to agree.
    min_agreement: float = Field(default=0.5, ge=0.0, lt=1.0)
    log_level: str = "WARNING"


def get_engine_settings() -> EngineSettings:
    """
    Load engine settings from environment variables (a local .env is honoured):
      DECISION_ENGINE_SCORING_STRATEGY, DECISION_ENGINE_THRESHOLD,
      DECISION_ENGINE_FALLBACK_DECISION, DECISION_ENGINE_MIN_AGREEMENT,
      DECISION_ENGINE_LOG_LEVEL
    """
    strategy = _env("DECISION_ENGINE_SCORING_STRATEGY", "weighted_average").lower()
    if strategy not in STRATEGIES:
        raise ValueError(
            f"DECISION_ENGINE_SCORING_STRATEGY must be one of {', '.join(sorted(STRATEGIES))}, got '{strategy}'."
        )
    return EngineSettings(
        scoring_strategy=strategy,
        threshold=_float_env("DECISION_ENGINE_THRESHOLD", 0.7),
        fallback_decision=_env("DECISION_ENGINE_FALLBACK_DECISION", NO_DECISION),
        min_agreement=_float_env("DECISION_ENGINE_MIN_AGREEMENT", 0.5),
        log_level=_env("DECISION_ENGINE_LOG_LEVEL", "WARNING").upper(),
    )


def build_scoring_strategy(name: Optional[str] = None, settings: Optional[EngineSettings] = None) -> ScoringStrategy:
    settings = settings or EngineSettings()
    key = (name or settings.scoring_strategy).strip().lower()
    if key not in STRATEGIES:
        raise ValueError(f"Unknown scoring strategy '{name}' (expected one of {', '.join(sorted(STRATEGIES))}).")
    if key == Threshold.name:
        return Threshold(threshold=settings.threshold, fallback_decision=settings.fallback_decision)
    if key == Consensus.name:
        return Consensus(minimum_agreement=settings.min_agreement)
    return STRATEGIES[key]()


def _env(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got '{raw}'.") from exc
