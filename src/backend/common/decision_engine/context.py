from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class _Missing:
    """Sentinel for a path that does not resolve to a stored value."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def is_missing(value: Any) -> bool:
    """Missing paths and stored nulls behave the same in operator logic."""
    return value is MISSING or value is None


def _normalize_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, Enum):
        return str(key.value)
    if isinstance(key, bytes):
        return key.decode("utf-8", errors="replace")
    return str(key)


def freeze(value: Any) -> Any:
    """Read-only copy of nested request data: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({_normalize_key(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value


def thaw(value: Any) -> Any:
    """Plain, independently mutable dicts and lists for a frozen value."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class Context:
    """Read-only view over one request's data.

    The source mapping is frozen on construction: `data` and every nested value
    `get` hands out are read-only, so one Context can be shared across
    evaluators and threads. `to_dict` returns a plain mutable copy.
    """

    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        source = self.data if isinstance(self.data, Mapping) else {}
        object.__setattr__(self, "data", freeze(source))

    @classmethod
    def coerce(cls, value: "Context | Mapping[str, Any] | None") -> "Context":
        if isinstance(value, Context):
            return value
        return cls(dict(value or {}))

    def get(self, path: str) -> Any:
        current: Any = self.data
        for segment in str(path).split("."):
            if not isinstance(current, Mapping) or segment not in current:
                return MISSING
            current = current[segment]
        return current

    def merge(self, updates: Mapping[str, Any]) -> "Context":
        """Return a derived context with `updates` layered over top-level keys."""
        merged = dict(self.data)
        merged.update(updates)
        return Context(merged)

    def to_dict(self) -> Dict[str, Any]:
        return thaw(self.data)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not MISSING
