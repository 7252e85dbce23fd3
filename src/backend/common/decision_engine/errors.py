from __future__ import annotations

from typing import Any, Dict, List, Sequence


class DecisionEngineError(Exception):
    """Base class for all decision engine errors."""


class RuleSetValidationError(DecisionEngineError):
    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__(self._format(self.errors))

    @staticmethod
    def _format(errors: List[str]) -> str:
        plural = "s" if len(errors) != 1 else ""
        numbered = "\n".join(f"  {idx}. {err}" for idx, err in enumerate(errors, start=1))
        return f"Rule set validation failed with {len(errors)} error{plural}:\n{numbered}"


class InvalidConfigurationError(DecisionEngineError):
    pass


class EnrichmentError(DecisionEngineError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ReplayMismatchError(DecisionEngineError):
    def __init__(self, *, expected: Dict[str, Any], actual: Dict[str, Any], differences: List[str]):
        self.expected = expected
        self.actual = actual
        self.differences = differences
        super().__init__(f"Replay mismatch detected: {', '.join(differences)}")
