from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

import yaml

from .context import freeze
from .errors import RuleSetValidationError
from .ruleset import AllCondition, AnyCondition, Condition, FieldCondition, Rule, RuleSet
from .schema import SchemaValidator

Document = Union[Mapping[str, Any], str, bytes]


def parse_rule_set(document: Document) -> RuleSet:
    """Validate a rule-set document and build an immutable RuleSet.

    Raises RuleSetValidationError carrying every structural error found.
    """
    data = _decode(document)
    SchemaValidator(data).validate_or_raise()
    return RuleSet(
        version=str(data["version"]),
        rules=tuple(_build_rule(rule) for rule in data["rules"]),
        name=data.get("ruleset") or "unknown",
    )


def parse_condition(condition: Mapping[str, Any]) -> Condition:
    """Validate and build a single condition tree outside of a rule set."""
    wrapper = {"version": "inline", "rules": [{"id": "inline", "if": condition, "then": {"decision": "inline"}}]}
    SchemaValidator(wrapper).validate_or_raise()
    return _build_condition(condition)


def load_rule_set(path: Path | str) -> RuleSet:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule set file not found: {path}")
    text = path.read_text()
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise RuleSetValidationError([f"Invalid YAML in {path.name}: {exc}"]) from exc
        return parse_rule_set(data)
    return parse_rule_set(text)


def _decode(document: Document) -> Any:
    if isinstance(document, bytes):
        document = document.decode("utf-8")
    if isinstance(document, str):
        try:
            return json.loads(document)
        except json.JSONDecodeError as exc:
            raise RuleSetValidationError([f"Invalid JSON: {exc}"]) from exc
    return document


def _build_rule(raw: Mapping[str, Any]) -> Rule:
    then = raw["then"]
    weight = then.get("weight")
    return Rule(
        id=raw["id"],
        condition=_build_condition(raw["if"]),
        decision=then["decision"],
        weight=1.0 if weight is None else float(weight),
        reason=then.get("reason"),
    )


def _build_condition(raw: Mapping[str, Any]) -> Condition:
    if "all" in raw:
        return AllCondition(children=tuple(_build_condition(child) for child in raw["all"]))
    if "any" in raw:
        return AnyCondition(children=tuple(_build_condition(child) for child in raw["any"]))
    return FieldCondition(
        path=raw["field"],
        operator=raw["op"],
        operand=freeze(raw.get("value")),
    )
