"""Boolean evaluation of condition trees against a request context.

Evaluation is fail-safe: an operator that cannot make sense of its inputs
returns False for that one condition instead of raising, so a single malformed
context field never aborts the whole decision.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .context import Context
from .enrichment import EnrichmentClient
from .explainability import TraceCollector
from .registry import registry
from .ruleset import AllCondition, AnyCondition, Condition, FieldCondition

# Importing the operator modules registers them.
from . import operators as _builtin_operators  # noqa: F401

logger = logging.getLogger(__name__)


@dataclass
class EvaluationScope:
    """Per-rule evaluation state.

    `context` starts as the request context and is replaced by a derived one
    when an enrichment operator merges fetched fields; later sibling conditions
    of the same rule see the derived context. The request context itself is
    never modified.
    """

    context: Context
    enrichment: Optional[EnrichmentClient] = None
    collector: Optional[TraceCollector] = None


def evaluate(
    condition: Condition,
    context: Context | Mapping[str, Any],
    *,
    enrichment: Optional[EnrichmentClient] = None,
    collector: Optional[TraceCollector] = None,
) -> bool:
    scope = EvaluationScope(context=Context.coerce(context), enrichment=enrichment, collector=collector)
    return evaluate_in_scope(condition, scope)


def evaluate_in_scope(condition: Condition, scope: EvaluationScope) -> bool:
    if isinstance(condition, AllCondition):
        # all() / any() short-circuit left to right; all([]) is True and any([]) is False.
        return all(evaluate_in_scope(child, scope) for child in condition.children)
    if isinstance(condition, AnyCondition):
        return any(evaluate_in_scope(child, scope) for child in condition.children)
    if isinstance(condition, FieldCondition):
        return _evaluate_field(condition, scope)
    return False


def _evaluate_field(condition: FieldCondition, scope: EvaluationScope) -> bool:
    actual = scope.context.get(condition.path)
    operator = registry.get(condition.operator)

    if operator is None:
        result = False
    else:
        try:
            result = operator(actual, condition.operand, scope)
        except Exception:
            logger.warning(
                "Operator %r raised for field %r; treating condition as false",
                condition.operator,
                condition.path,
                exc_info=True,
            )
            result = False

    if scope.collector is not None:
        scope.collector.record(
            field=condition.path,
            operator=condition.operator,
            expected=condition.operand,
            actual=actual,
            result=result,
        )
    return result
