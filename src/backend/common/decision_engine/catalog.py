from __future__ import annotations

import argparse
import json
from typing import Any, List

import yaml
from pydantic import BaseModel

from .registry import registry

# Ensure built-in operators are imported/registered when generating a catalog.
from . import operators as _builtin_operators  # noqa: F401


class OperatorCatalogEntry(BaseModel):
    name: str
    family: str
    description: str = ""
    requires_value: bool = True
    contextual: bool = False

    module: str
    phrase: str


def build_catalog() -> List[OperatorCatalogEntry]:
    entries = [
        OperatorCatalogEntry(
            name=op.name,
            family=op.family,
            description=op.description,
            requires_value=op.requires_value,
            contextual=op.contextual,
            module=getattr(op.func, "__module__", ""),
            phrase=op.phrase,
        )
        for op in registry
    ]
    entries.sort(key=lambda e: (e.family, e.name))
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate an operator catalog from the registry.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument(
        "--family",
        default=None,
        help="Only list operators from one family (e.g. comparison, temporal, geospatial).",
    )
    args = parser.parse_args(argv)

    entries = build_catalog()
    if args.family:
        entries = [e for e in entries if e.family == args.family]
    catalog = [e.model_dump() for e in entries]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
