from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Dict

from ..context import Context, is_missing, thaw
from ..registry import register_operator

if TYPE_CHECKING:  # pragma: no cover
    from ..evaluator import EvaluationScope

logger = logging.getLogger(__name__)

_TEMPLATE = re.compile(r"\{\{([^}]+)\}\}")
_WHOLE_TEMPLATE = re.compile(r"^\{\{([^}]+)\}\}$")


def expand_params(params: Any, context: Context) -> Dict[str, Any]:
    """Replace `{{path}}` placeholders in string params with context values.

    A param that is exactly one placeholder takes the raw context value; an
    unresolved placeholder is left as written.
    """
    if not isinstance(params, Mapping):
        return {}
    return {str(key): _expand_value(value, context) for key, value in params.items()}


def _expand_value(value: Any, context: Context) -> Any:
    if not isinstance(value, str):
        return value
    whole = _WHOLE_TEMPLATE.match(value.strip())
    if whole:
        path = whole.group(1).strip()
        return thaw(context.get(path)) if path in context else value

    def _replace(match: re.Match) -> str:
        path = match.group(1).strip()
        if path not in context:
            return match.group(0)
        return str(context.get(path))

    return _TEMPLATE.sub(_replace, value)


def apply_mapping(response: Any, mapping: Any) -> Dict[str, Any]:
    """Pick `{source_path: target_key}` fields out of a response body."""
    if not isinstance(response, Mapping) or not isinstance(mapping, Mapping):
        return {}
    source = Context(dict(response))
    mapped: Dict[str, Any] = {}
    for source_path, target_key in mapping.items():
        value = source.get(str(source_path))
        if is_missing(value):
            continue
        mapped[str(target_key)] = value
    return mapped


@register_operator(
    "fetch_from_api",
    family="enrichment",
    phrase="{field} fetched from {expected}",
    contextual=True,
)
def fetch_from_api(_actual: Any, expected: Any, scope: "EvaluationScope") -> bool:
    """Fetch from an enrichment endpoint and expose mapped fields to later conditions."""
    if not isinstance(expected, Mapping) or not expected.get("endpoint"):
        return False
    if scope.enrichment is None:
        logger.warning("fetch_from_api used without an enrichment client; condition is false")
        return False

    endpoint = str(expected["endpoint"])
    try:
        params = expand_params(expected.get("params") or {}, scope.context)
        response = scope.enrichment.fetch(endpoint, params)
        mapping = expected.get("mapping") or {}
        if not mapping:
            return response is not None
        mapped = apply_mapping(response, mapping)
    except Exception as exc:
        logger.warning("Enrichment fetch from %r failed: %s", endpoint, exc)
        return False

    if not mapped:
        return False
    scope.context = scope.context.merge(mapped)
    return True
