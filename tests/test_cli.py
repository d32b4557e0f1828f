"""Tests for the click command-line interface."""

from __future__ import annotations

import json

import pytest
import yaml
from click.testing import CliRunner

from ipsmonitor.cli.main import cli


@pytest.fixture
def config_file(tmp_path):
    """Config pointing the database into tmp_path."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"database": {"path": str(tmp_path / "ips.db")}}))
    return path


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, config_file, *args, **kwargs):
    return runner.invoke(cli, ["--config", str(config_file), *args], **kwargs)


class TestInit:
    def test_init_seeds_portfolio(self, runner, config_file, tmp_path):
        result = invoke(runner, config_file, "init")
        assert result.exit_code == 0, result.output
        assert "Seeded 4 strategic allocations" in result.output
        assert (tmp_path / "ips.db").exists()

    def test_init_keeps_existing(self, runner, config_file):
        invoke(runner, config_file, "init")
        result = invoke(runner, config_file, "init")
        assert result.exit_code == 0
        assert "already stored" in result.output


class TestConfigCommands:
    def test_show_yaml(self, runner, config_file):
        result = invoke(runner, config_file, "config", "show")
        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["ips"]["single_security"] == 10.0

    def test_show_json(self, runner, config_file):
        result = invoke(runner, config_file, "config", "show", "--json")
        assert result.exit_code == 0
        assert json.loads(result.output)["liquidity"]["cash_min"] == 10.0

    def test_validate(self, runner, config_file):
        result = invoke(runner, config_file, "config", "validate")
        assert result.exit_code == 0
        assert "Config is valid." in result.output
        assert "Volatility band: 5%-7%" in result.output

    def test_validate_rejects_bad_config(self, runner, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text(yaml.dump({"liquidity": {"cash_min": 20, "cash_max": 5}}))
        result = invoke(runner, bad, "config", "validate")
        assert result.exit_code == 1
        assert "Config validation failed" in result.output


class TestSnapshotCommands:
    def test_export_after_init(self, runner, config_file):
        invoke(runner, config_file, "init")
        result = invoke(runner, config_file, "snapshot", "export")
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert len(payload["allocations"]) == 4
        assert payload["totalValue"] == 100_000_000

    def test_import_then_export(self, runner, config_file, tmp_path, populated_snapshot):
        source = tmp_path / "book.json"
        source.write_text(json.dumps(populated_snapshot.to_dict()))

        result = invoke(runner, config_file, "snapshot", "import", str(source))
        assert result.exit_code == 0, result.output
        assert "5 securities" in result.output

        out = tmp_path / "out.json"
        invoke(runner, config_file, "snapshot", "export", str(out))
        assert json.loads(out.read_text())["date"] == populated_snapshot.date

    def test_import_rejects_malformed(self, runner, config_file, tmp_path):
        source = tmp_path / "bad.json"
        source.write_text('{"securities": 3}')
        result = invoke(runner, config_file, "snapshot", "import", str(source))
        assert result.exit_code == 1
        assert "Invalid snapshot file" in result.output

    def test_import_rejects_mistyped_weight(self, runner, config_file, tmp_path):
        source = tmp_path / "bad.json"
        source.write_text('{"securities": [{"ticker": "CRDB", "currentWeight": "12"}]}')
        result = invoke(runner, config_file, "snapshot", "import", str(source))
        assert result.exit_code == 1
        assert "currentWeight" in result.output

    def test_reset(self, runner, config_file):
        invoke(runner, config_file, "init")
        result = invoke(runner, config_file, "snapshot", "reset", "--yes")
        assert result.exit_code == 0
        assert "deleted" in result.output

        exported = json.loads(invoke(runner, config_file, "snapshot", "export").output)
        assert exported["allocations"] == []

    def test_reconcile_from_holdings(self, runner, config_file, tmp_path, populated_snapshot):
        source = tmp_path / "book.json"
        source.write_text(json.dumps(populated_snapshot.to_dict()))
        invoke(runner, config_file, "snapshot", "import", str(source))

        result = invoke(runner, config_file, "snapshot", "reconcile")
        assert result.exit_code == 0, result.output
        assert result.output.count("REBALANCE") == 4

        exported = json.loads(invoke(runner, config_file, "snapshot", "export").output)
        current = {a["assetClass"]: a["current"] for a in exported["allocations"]}
        assert current == {
            "Fixed Income": pytest.approx(9.0),
            "Domestic Equities": 0.0,
            "Regional (EAC/SADC) Equities": pytest.approx(30.0),
            "Cash & Cash Equivalents": 0.0,
        }


class TestReport:
    def test_report_on_seed(self, runner, config_file):
        invoke(runner, config_file, "init")
        result = invoke(runner, config_file, "report")
        assert result.exit_code == 0, result.output
        assert "IPS exposure limits: COMPLIANT" in result.output
        assert "REBALANCING REQUIRED (4)" in result.output
        assert "No return series supplied" in result.output

    def test_report_with_returns(self, runner, config_file, tmp_path, populated_snapshot):
        populated_snapshot.securities[0].current_weight = 14.0
        source = tmp_path / "book.json"
        source.write_text(json.dumps(populated_snapshot.to_dict()))
        invoke(runner, config_file, "snapshot", "import", str(source))

        returns = tmp_path / "returns.csv"
        returns.write_text("month,return\n2025-01,0.02\n2025-02,-0.01\n2025-03,0.015\n")

        result = invoke(runner, config_file, "report", "--returns", str(returns))
        assert result.exit_code == 0, result.output
        assert "Observations: 3" in result.output
        assert "Single security limit breached: TB91 (14.00%)" in result.output
        assert "[CRITICAL] Cash & Cash Equivalents" in result.output
        assert "Tactical adjustments: 1" in result.output

    def test_report_missing_column(self, runner, config_file, tmp_path):
        returns = tmp_path / "returns.csv"
        returns.write_text("month,value\n2025-01,1.0\n")
        result = invoke(runner, config_file, "report", "--returns", str(returns),
                        "--column", "ret")
        assert result.exit_code != 0
