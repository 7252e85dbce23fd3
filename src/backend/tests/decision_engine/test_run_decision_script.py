import json

import pytest

from scripts.run_decision import main

RULES_YAML = """\
version: "1.0"
ruleset: orders
rules:
  - id: big_order
    if:
      all:
        - {field: order.total, op: gt, value: 1000}
        - {field: customer.tier, op: in, value: [gold, platinum]}
    then: {decision: fast_track, weight: 0.7, reason: High value loyal customer}
  - id: default
    if: {all: []}
    then: {decision: standard, weight: 0.3}
"""


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.delenv("DECISION_ENGINE_SCORING_STRATEGY", raising=False)
    rules = tmp_path / "orders.yaml"
    rules.write_text(RULES_YAML)
    context = tmp_path / "context.json"
    context.write_text(json.dumps({"order": {"total": 2500}, "customer": {"tier": "gold"}}))
    return tmp_path, rules, context


def test_cli_writes_json_and_markdown(workspace, capsys):
    tmp_path, rules, context = workspace
    out_dir = tmp_path / "out"
    code = main(["--rules", str(rules), "--context", str(context), "--output-dir", str(out_dir)])
    assert code == 0

    out = capsys.readouterr().out
    assert "Decision: fast_track (confidence: 1.00)" in out

    (json_path,) = out_dir.glob("decision_*.json")
    (md_path,) = out_dir.glob("decision_*.md")
    data = json.loads(json_path.read_text())
    assert data["decision"] == "fast_track"
    md = md_path.read_text()
    assert md.startswith("# Decision: fast_track")
    assert "- order.total > 1000" in md
    assert "| JsonRuleEvaluator(orders) | fast_track | 0.7 | big_order |" in md


def test_cli_reports_invalid_rules(tmp_path, capsys):
    rules = tmp_path / "bad.json"
    rules.write_text(json.dumps({"version": "1", "rules": [{"id": "x"}]}))
    context = tmp_path / "context.json"
    context.write_text("{}")
    assert main(["--rules", str(rules), "--context", str(context), "--output-dir", str(tmp_path)]) == 2
    assert "Rule set validation failed with 2 errors" in capsys.readouterr().err


def test_cli_reports_missing_rules_file(tmp_path, capsys):
    context = tmp_path / "context.json"
    context.write_text("{}")
    missing = tmp_path / "nope.yaml"
    assert main(["--rules", str(missing), "--context", str(context), "--output-dir", str(tmp_path)]) == 2
    assert f"Rule set file not found: {missing}" in capsys.readouterr().err
    assert not list(tmp_path.glob("decision_*"))
