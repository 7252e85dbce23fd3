"""Deterministic, explainable decision engine.

This package intentionally contains only decision logic:
- Rule sets are plain JSON/YAML documents validated before use.
- Evaluators propose decisions; a scoring strategy picks one.
- Network access only happens through an injected enrichment client.
"""

from .agent import Agent
from .audit import AuditSink, LoggerAuditSink, NullAuditSink
from .context import MISSING, Context
from .enrichment import EnrichmentClient, StaticEnrichmentClient
from .errors import (
    DecisionEngineError,
    EnrichmentError,
    InvalidConfigurationError,
    ReplayMismatchError,
    RuleSetValidationError,
)
from .evaluator import evaluate
from .evaluators import Evaluator, JsonRuleEvaluator, StaticEvaluator
from .explainability import ConditionTrace, ExplainabilityResult, RuleTrace, TraceCollector
from .models import INCONCLUSIVE, NO_DECISION, Decision, Evaluation
from .parser import load_rule_set, parse_condition, parse_rule_set
from .replay import replay
from .schema import SchemaValidator, validate, validate_or_raise
from .scoring import Consensus, MaxWeight, ScoringStrategy, Threshold, WeightedAverage
from .version import __version__
