from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from .explainability import RuleTrace
from .models import Decision


class AuditSink(Protocol):
    def record(self, decision: Decision, trace: Optional[RuleTrace] = None) -> None:
        ...


class NullAuditSink:
    def record(self, decision: Decision, trace: Optional[RuleTrace] = None) -> None:
        return None


class LoggerAuditSink:
    """Writes one JSON line per decision to a standard library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("decision_engine.audit")
        self.level = level

    def record(self, decision: Decision, trace: Optional[RuleTrace] = None) -> None:
        payload = decision.audit_payload
        entry = {
            "timestamp": payload.get("timestamp"),
            "decision": decision.decision,
            "confidence": decision.confidence,
            "context": payload.get("context"),
            "audit_hash": payload.get("deterministic_hash"),
            "rule_id": trace.rule_id if trace is not None else None,
        }
        self.logger.log(self.level, json.dumps(entry, sort_keys=True, default=str))
