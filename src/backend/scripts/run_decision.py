from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


logger = logging.getLogger(__name__)


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _load_json(path: Path):
    with path.open() as handle:
        return json.load(handle)


def _write_markdown(decision, out_path: Path) -> None:
    lines = [
        f"# Decision: {decision.decision}",
        "",
        f"- Confidence: {decision.confidence:.2f}",
        f"- Scoring strategy: {decision.audit_payload.get('scoring_strategy', '')}",
        f"- Audit hash: `{decision.audit_payload.get('deterministic_hash', '')}`",
        "",
        "## Explanations",
        "",
    ]
    lines.extend(f"- {line.strip()}" for line in decision.explanations)

    because = decision.because()
    if because:
        lines.extend(["", "## Because", ""])
        lines.extend(f"- {item}" for item in because)

    failed = decision.failed_conditions()
    if failed:
        lines.extend(["", "## Failed conditions", ""])
        lines.extend(f"- {item}" for item in failed)

    if decision.evaluations:
        lines.extend(["", "## Evaluations", "", "| Evaluator | Decision | Weight | Rule |", "| --- | --- | --- | --- |"])
        for evaluation in decision.evaluations:
            rule_id = evaluation.metadata.get("rule_id", "")
            lines.append(
                f"| {evaluation.evaluator_name} | {evaluation.decision} | {evaluation.weight} | {rule_id} |"
            )

    out_path.write_text("\n".join(lines) + "\n")


def main(argv: list[str] | None = None) -> int:
    _ensure_backend_on_path()

    from common.decision_engine import Agent, JsonRuleEvaluator, LoggerAuditSink, RuleSetValidationError, load_rule_set
    from common.decision_engine.config import build_scoring_strategy, get_engine_settings

    parser = argparse.ArgumentParser(
        description="Evaluate a context against one or more rule sets and write JSON/MD decision files."
    )
    parser.add_argument(
        "--rules",
        action="append",
        required=True,
        help="Path to a JSON or YAML rule set. Repeat for several evaluators.",
    )
    parser.add_argument(
        "--context",
        required=True,
        help="Path to a JSON file holding the context to evaluate.",
    )
    parser.add_argument(
        "--feedback",
        default=None,
        help="Optional JSON file with feedback recorded in the audit payload.",
    )
    parser.add_argument(
        "--strategy",
        default=None,
        help="Scoring strategy (defaults to DECISION_ENGINE_SCORING_STRATEGY or weighted_average).",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Output directory for decision files (defaults to the current directory).",
    )
    parser.add_argument(
        "--audit-log",
        action="store_true",
        help="Also write one JSON audit line per decision to the log.",
    )
    args = parser.parse_args(argv)

    settings = get_engine_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        evaluators = [JsonRuleEvaluator(load_rule_set(Path(path))) for path in args.rules]
    except RuleSetValidationError as exc:
        logger.error("Rule set failed validation with %d error(s)", len(exc.errors))
        print(str(exc), file=sys.stderr)
        return 2
    except FileNotFoundError as exc:
        logger.error("Rule set file is missing: %s", exc)
        print(str(exc), file=sys.stderr)
        return 2

    try:
        strategy = build_scoring_strategy(args.strategy, settings)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    context = _load_json(Path(args.context))
    feedback = _load_json(Path(args.feedback)) if args.feedback else None

    agent = Agent(
        evaluators,
        scoring_strategy=strategy,
        audit_sink=LoggerAuditSink() if args.audit_log else None,
    )
    decision = agent.decide(context, feedback)

    output_dir = Path(args.output_dir).resolve() if args.output_dir else Path(".").resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    base_name = f"decision_{decision.audit_payload['deterministic_hash'][:12]}"
    out_json = output_dir / f"{base_name}.json"
    out_md = output_dir / f"{base_name}.md"

    out_json.write_text(json.dumps(decision.model_dump(mode="json"), indent=2))
    _write_markdown(decision, out_md)

    print(f"Decision: {decision.decision} (confidence: {decision.confidence:.2f})")
    print(f"Wrote {out_json}")
    print(f"Wrote {out_md}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
