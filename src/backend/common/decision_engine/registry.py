from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .evaluator import EvaluationScope


OperatorFunc = Callable[..., bool]


@dataclass(frozen=True)
class Operator:
    name: str
    family: str
    func: OperatorFunc
    phrase: str
    description: str = ""
    requires_value: bool = True
    # Contextual operators also receive the evaluation scope (current context, collaborators).
    contextual: bool = False

    def __call__(self, actual: Any, operand: Any, scope: "EvaluationScope") -> bool:
        if self.contextual:
            return bool(self.func(actual, operand, scope))
        return bool(self.func(actual, operand))


class OperatorRegistry:
    def __init__(self):
        self._operators: Dict[str, Operator] = {}

    def register(self, operator: Operator) -> None:
        if not operator.name:
            raise ValueError("Operator must define a name")
        if operator.name in self._operators:
            raise ValueError(f"Duplicate operator registered: {operator.name}")
        self._operators[operator.name] = operator

    def unregister(self, name: str) -> None:
        self._operators.pop(name, None)

    def get(self, name: str) -> Optional[Operator]:
        return self._operators.get(name)

    def names(self) -> Iterable[str]:
        return self._operators.keys()

    def __contains__(self, name: object) -> bool:
        return name in self._operators

    def __iter__(self):
        return iter(self._operators.values())


registry = OperatorRegistry()


def register_operator(
    name: str,
    *,
    family: str,
    phrase: str = "{field} {operator} {expected}",
    requires_value: bool = True,
    contextual: bool = False,
) -> Callable[[OperatorFunc], OperatorFunc]:
    def decorator(func: OperatorFunc) -> OperatorFunc:
        doc = (func.__doc__ or "").strip().splitlines()
        registry.register(
            Operator(
                name=name,
                family=family,
                func=func,
                phrase=phrase,
                description=doc[0] if doc else "",
                requires_value=requires_value,
                contextual=contextual,
            )
        )
        return func

    return decorator
