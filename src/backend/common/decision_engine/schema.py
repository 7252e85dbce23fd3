"""Structural validation of rule-set documents.

The validator never stops at the first problem: every violation in the
document is collected so a rule author can fix them in one pass. Operators
outside the registered set are rejected here, which keeps attacker-controlled
rule data from reaching the evaluator with an operator it does not know.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Set

from .errors import RuleSetValidationError
from .registry import registry

from . import operators as _builtin_operators  # noqa: F401

CONDITION_KEYS = ("field", "all", "any")


def supported_operators() -> List[str]:
    return sorted(registry.names())


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SchemaValidator:
    def __init__(self, document: Any):
        self._document = document
        self._errors: List[str] = []

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    def validate(self) -> List[str]:
        self._errors = []
        if not isinstance(self._document, Mapping):
            self._errors.append(f"Root element must be an object, got {_type_name(self._document)}")
            return self.errors

        self._validate_version()
        name = self._document.get("ruleset")
        if name is not None and not isinstance(name, str):
            self._errors.append(f"Field 'ruleset' must be a string, got {_type_name(name)}")
        self._validate_rules()
        return self.errors

    def validate_or_raise(self) -> None:
        errors = self.validate()
        if errors:
            raise RuleSetValidationError(errors)

    def _validate_version(self) -> None:
        version = self._document.get("version")
        if version is None:
            self._errors.append("Missing required field 'version'. Example: {\"version\": \"1.0\", ...}")
        elif not isinstance(version, (str, int, float)) or isinstance(version, bool):
            self._errors.append(f"Field 'version' must be a string, got {_type_name(version)}")

    def _validate_rules(self) -> None:
        if "rules" not in self._document or self._document["rules"] is None:
            self._errors.append("Missing required field 'rules'. Expected an array of rule objects.")
            return
        rules = self._document["rules"]
        if not isinstance(rules, list):
            self._errors.append(f"Field 'rules' must be an array, got {_type_name(rules)}")
            return

        seen_ids: Set[str] = set()
        for idx, rule in enumerate(rules):
            self._validate_rule(rule, f"rules[{idx}]", seen_ids)

    def _validate_rule(self, rule: Any, path: str, seen_ids: Set[str]) -> None:
        if not isinstance(rule, Mapping):
            self._errors.append(f"{path}: Rule must be an object, got {_type_name(rule)}")
            return

        rule_id = rule.get("id")
        if rule_id is None:
            self._errors.append(f"{path}: Missing required field 'id'. Each rule must have a unique identifier.")
        elif not isinstance(rule_id, str):
            self._errors.append(f"{path}: Field 'id' must be a string, got {_type_name(rule_id)}")
        elif not rule_id.strip():
            self._errors.append(f"{path}: Field 'id' cannot be empty")
        elif rule_id in seen_ids:
            self._errors.append(f"{path}: Duplicate rule id '{rule_id}'")
        else:
            seen_ids.add(rule_id)

        if rule.get("if") is None:
            self._errors.append(
                f"{path}: Missing required field 'if'. Expected a condition object with 'field', 'all', or 'any'."
            )
        else:
            self._validate_condition(rule["if"], f"{path}.if")

        self._validate_then(rule.get("then"), path)

    def _validate_condition(self, condition: Any, path: str) -> None:
        if not isinstance(condition, Mapping):
            self._errors.append(f"{path}: Condition must be an object, got {_type_name(condition)}")
            return

        present = [key for key in CONDITION_KEYS if key in condition]
        if not present:
            self._errors.append(
                f"{path}: Condition must have one of: 'field', 'all', or 'any'. "
                'Example: {"field": "status", "op": "eq", "value": "active"}'
            )
            return
        if len(present) > 1:
            keys = ", ".join(f"'{k}'" for k in present)
            self._errors.append(f"{path}: Condition must have exactly one of 'field', 'all', or 'any', got {keys}")
            return

        kind = present[0]
        if kind == "field":
            self._validate_field_condition(condition, path)
            return

        children = condition[kind]
        if not isinstance(children, list):
            self._errors.append(
                f"{path}: '{kind}' condition must contain an array of conditions, got {_type_name(children)}"
            )
            return
        for idx, child in enumerate(children):
            self._validate_condition(child, f"{path}.{kind}[{idx}]")

    def _validate_field_condition(self, condition: Mapping, path: str) -> None:
        field = condition.get("field")
        if not isinstance(field, str):
            self._errors.append(f"{path}: Field condition 'field' must be a string, got {_type_name(field)}")
        elif not field:
            self._errors.append(f"{path}: Field path cannot be empty")
        elif any(segment == "" for segment in field.split(".")):
            self._errors.append(
                f"{path}: Invalid field path '{field}'. Dot-notation paths cannot have empty segments. "
                "Example: 'user.profile.role'"
            )

        op = condition.get("op")
        if op is None:
            self._errors.append(f"{path}: Field condition missing 'op' (operator) key")
            return
        operator = registry.get(op) if isinstance(op, str) else None
        if operator is None:
            self._errors.append(
                f"{path}: Unsupported operator '{op}'. Supported operators: {', '.join(supported_operators())}"
            )
            return

        value = condition.get("value")
        if operator.requires_value and value is None:
            self._errors.append(f"{path}: Field condition missing 'value' for operator '{op}'")
            return
        if op == "fetch_from_api":
            self._validate_fetch_from_api(value, path)

    def _validate_fetch_from_api(self, value: Any, path: str) -> None:
        if not isinstance(value, Mapping):
            self._errors.append(
                f"{path}: 'fetch_from_api' requires 'value' to be an object with 'endpoint', "
                "and optional 'params' and 'mapping'"
            )
            return
        endpoint = value.get("endpoint")
        if not isinstance(endpoint, str) or not endpoint:
            self._errors.append(f"{path}: 'fetch_from_api' requires a string 'endpoint' in value")
        params = value.get("params")
        if params is not None and not isinstance(params, Mapping):
            self._errors.append(f"{path}: 'fetch_from_api' 'params' must be an object if provided")
        mapping = value.get("mapping")
        if mapping is not None and not isinstance(mapping, Mapping):
            self._errors.append(f"{path}: 'fetch_from_api' 'mapping' must be an object if provided")

    def _validate_then(self, then: Any, path: str) -> None:
        if then is None:
            self._errors.append(f"{path}: Missing required field 'then'. Expected an object with 'decision' field.")
            return
        if not isinstance(then, Mapping):
            self._errors.append(f"{path}.then: Must be an object, got {_type_name(then)}")
            return

        decision = then.get("decision")
        if decision is None:
            self._errors.append(f"{path}.then: Missing required field 'decision'")
        elif not isinstance(decision, str):
            self._errors.append(f"{path}.then.decision: Must be a string, got {_type_name(decision)}")
        elif not decision.strip():
            self._errors.append(f"{path}.then.decision: Cannot be empty")

        weight = then.get("weight")
        if weight is not None:
            if not _is_number(weight):
                self._errors.append(f"{path}.then.weight: Must be a number, got {_type_name(weight)}")
            elif not 0.0 <= weight <= 1.0:
                self._errors.append(f"{path}.then.weight: Must be between 0.0 and 1.0, got {weight}")

        reason = then.get("reason")
        if reason is not None and not isinstance(reason, str):
            self._errors.append(f"{path}.then.reason: Must be a string, got {_type_name(reason)}")


def validate(document: Any) -> List[str]:
    """Return every structural error in `document`; an empty list means valid."""
    return SchemaValidator(document).validate()


def validate_or_raise(document: Any) -> None:
    SchemaValidator(document).validate_or_raise()
