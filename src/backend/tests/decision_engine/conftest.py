import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.decision_engine.context import Context
from common.decision_engine.enrichment import StaticEnrichmentClient
from common.decision_engine.evaluator import evaluate
from common.decision_engine.models import Evaluation
from common.decision_engine.parser import parse_condition


@pytest.fixture
def make_rule():
    def _make(rule_id="r1", *, condition=None, decision="approve", weight=None, reason=None):
        then = {"decision": decision}
        if weight is not None:
            then["weight"] = weight
        if reason is not None:
            then["reason"] = reason
        return {
            "id": rule_id,
            "if": condition if condition is not None else {"field": "status", "op": "eq", "value": "active"},
            "then": then,
        }

    return _make


@pytest.fixture
def make_rule_set(make_rule):
    def _make(*rules, version="1.0", name=None):
        doc = {"version": version, "rules": list(rules) or [make_rule()]}
        if name is not None:
            doc["ruleset"] = name
        return doc

    return _make


@pytest.fixture
def make_evaluation():
    def _make(decision="approve", weight=1.0, *, reason=None, evaluator_name="test"):
        return Evaluation(decision=decision, weight=weight, reason=reason, evaluator_name=evaluator_name)

    return _make


@pytest.fixture
def check():
    """Evaluate one condition document against a plain context mapping."""

    def _check(condition, data, **kwargs):
        return evaluate(parse_condition(condition), Context(data), **kwargs)

    return _check


@pytest.fixture
def enrichment_client():
    return StaticEnrichmentClient()
