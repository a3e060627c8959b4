"""Tests for the salary-calc CLI commands.

Invokes the click group with CliRunner against an isolated config
directory (conftest.isolated_config).
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from salarycalc.cli.__main__ import cli
from salarycalc.sdk.config import get_default_rates_path


@pytest.fixture
def runner():
    return CliRunner()


PF_ARGS = [
    "compute",
    "--salary", "50000",
    "--pf", "--pf-rate", "12",
    "--pf-number", "DLDLI12345671231234567",
]


class TestCompute:

    def test_json_output(self, runner):
        result = runner.invoke(cli, PF_ARGS + ["--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["pf_result"]["employee_contribution"] == "6000.00"
        assert data["pf_result"]["employer_contribution"] == "6000.00"
        assert data["pf_result"]["total_contribution"] == "12000.00"
        assert data["pf_result"]["is_compliant"] is True
        assert data["analytics"]["net_salary"] == "44000.00"
        assert data["errors"] == []
        assert data["summary"]["overall_status"] == "success"

    def test_table_output(self, runner):
        result = runner.invoke(cli, PF_ARGS)

        assert result.exit_code == 0, result.output
        assert "Statutory Contributions" in result.output
        assert "Salary Breakdown" in result.output
        assert "compliant" in result.output

    def test_findings_reported_not_fatal(self, runner):
        result = runner.invoke(cli, [
            "compute", "--salary", "25000",
            "--esi", "--esi-rate", "0.75", "--esi-number", "1234567890",
            "--json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [e["field"] for e in data["errors"]] == ["esi_contribution"]
        assert data["errors"][0]["category"] == "BusinessRule"
        assert data["esi_result"]["is_eligible"] is False

    def test_invalid_rates_file(self, runner, tmp_path):
        bad = tmp_path / "rates.yaml"
        bad.write_text("pf: {}\n")

        result = runner.invoke(cli, PF_ARGS + ["--rates", str(bad)])

        assert result.exit_code != 0
        assert "Invalid rates file" in result.output


class TestValidate:

    def write_form(self, tmp_path, values):
        path = tmp_path / "form.yaml"
        path.write_text(yaml.safe_dump(values))
        return path

    def test_valid_form(self, runner, tmp_path, pf_form):
        result = runner.invoke(cli, ["validate", str(self.write_form(tmp_path, pf_form))])

        assert result.exit_code == 0, result.output
        assert "No validation errors" in result.output

    def test_missing_pf_number_exits_1(self, runner, tmp_path, pf_form):
        pf_form["pf_number"] = ""
        path = self.write_form(tmp_path, pf_form)

        result = runner.invoke(cli, ["validate", str(path), "--json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert [e["field"] for e in data["errors"]] == ["pf_number"]
        assert data["errors"][0]["category"] == "Required"
        assert data["summary"]["critical"] == 1

    def test_json_form_file(self, runner, tmp_path, esi_form):
        path = tmp_path / "form.json"
        path.write_text(json.dumps(esi_form))

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 0, result.output

    def test_form_must_be_mapping(self, runner, tmp_path):
        path = tmp_path / "form.yaml"
        path.write_text("- salary_amount\n")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code != 0
        assert "mapping" in result.output


class TestRatesShow:

    def test_json(self, runner):
        result = runner.invoke(cli, ["rates", "show", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["pf"]["employer_rate"] == "12"
        assert data["esi"]["salary_threshold"] == "21000"

    def test_single_scheme(self, runner):
        result = runner.invoke(cli, ["rates", "show", "--scheme", "esi", "--json"])

        assert list(json.loads(result.stdout)) == ["esi"]

    def test_table(self, runner):
        result = runner.invoke(cli, ["rates", "show"])

        assert result.exit_code == 0, result.output
        assert "Statutory Rates" in result.output


class TestSettingsCommands:

    def test_show_defaults(self, runner):
        result = runner.invoke(cli, ["settings", "show"])

        assert result.exit_code == 0, result.output
        assert "No settings configured" in result.output
        assert "debounce_ms: 300" in result.output

    def test_set_debounce(self, runner):
        runner.invoke(cli, ["settings", "debounce", "150"])

        result = runner.invoke(cli, ["settings", "debounce"])

        assert "debounce_ms: 150" in result.output

    def test_set_and_clear_rates(self, runner, tmp_path):
        custom = tmp_path / "custom.yaml"
        custom.write_text(get_default_rates_path().read_text())

        result = runner.invoke(cli, ["settings", "rates", str(custom)])
        assert result.exit_code == 0, result.output
        assert "Set rates" in result.output

        result = runner.invoke(cli, ["settings", "rates", "--clear"])
        assert "Cleared rates setting" in result.output

    def test_rejects_invalid_rates(self, runner, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("nonsense: true\n")

        result = runner.invoke(cli, ["settings", "rates", str(bad)])

        assert result.exit_code != 0
        assert "Invalid rates file" in result.output
