"""Tests for the impot-sim CLI.

Each test runs against an isolated settings directory.
"""

import json

import pytest
from click.testing import CliRunner

from impotsim.cli.__main__ import cli


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point IMPOT_SIM_CONFIG_PATH at an empty temp directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("IMPOT_SIM_CONFIG_PATH", str(config_dir))
    return config_dir


@pytest.fixture
def runner():
    return CliRunner()


COUPLE_ARGS = [
    "--situation", "married", "--dependents", "1",
    "--salary1", "45000", "--salary2", "35000",
]


class TestSimulate:
    """impot-sim simulate"""

    def test_json_output(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", *COUPLE_ARGS, "--year", "2025", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["year"] == 2025
        assert data["fiscal_parts"] == 2.5
        assert data["final_tax"] == 6139

    def test_text_output_default(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", "--salary1", "24000"])

        assert result.exit_code == 0, result.output
        assert "INCOME TAX SIMULATION" in result.output
        assert "725" in result.output

    def test_rich_output(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", *COUPLE_ARGS, "--format", "rich"])

        assert result.exit_code == 0, result.output
        assert "Quotient capping" in result.output

    def test_rich_output_with_trace(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", *COUPLE_ARGS, "--format", "rich", "--trace"])

        assert result.exit_code == 0, result.output
        assert "capping reference" in result.output
        assert "--- Trace ---" not in result.output

    def test_rich_output_without_trace(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", *COUPLE_ARGS, "--format", "rich"])

        assert "capping reference" not in result.output

    def test_csv_output(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", "--salary1", "24000", "--format", "csv"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[0] == "section,item,value"
        assert "tax,final_tax,725.00" in result.output

    def test_inputs_file_with_override(self, runner, isolated_config, tmp_path):
        inputs_file = tmp_path / "household.yaml"
        inputs_file.write_text("situation: married\nsalary1: 45000\nsalary2: 35000\n")

        result = runner.invoke(cli, [
            "simulate", "--inputs", str(inputs_file), "--dependents", "1", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["situation"] == "married"
        assert data["fiscal_parts"] == 2.5

    def test_invalid_inputs_file(self, runner, isolated_config, tmp_path):
        inputs_file = tmp_path / "bad.yaml"
        inputs_file.write_text("salary9: 1000\n")

        result = runner.invoke(cli, ["simulate", "--inputs", str(inputs_file)])

        assert result.exit_code != 0
        assert "Invalid inputs file" in result.output

    def test_gross_is_taxable_flag(self, runner, isolated_config):
        result = runner.invoke(cli, [
            "simulate", "--salary1", "24000", "--gross-is-taxable1", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["taxable_income"] == 24000

    def test_trace(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", "--salary1", "24000", "--trace"])

        assert result.exit_code == 0, result.output
        assert "--- Trace ---" in result.output
        assert "Net taxable income" in result.output

    def test_unknown_year(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", "--salary1", "24000", "--year", "1999"])

        assert result.exit_code != 0
        assert "1999" in result.output

    def test_negative_salary_rejected(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", "--salary1", "-1"])

        assert result.exit_code != 0

    def test_infinite_salary_rejected(self, runner, isolated_config):
        result = runner.invoke(cli, ["simulate", "--salary1", "inf"])

        assert result.exit_code == 1
        assert "Invalid inputs" in result.output
        assert not isinstance(result.exception, OverflowError)

    def test_settings_output_format(self, runner, isolated_config):
        runner.invoke(cli, ["settings", "output-format", "json"])

        result = runner.invoke(cli, ["simulate", "--salary1", "24000"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["final_tax"] == 725


class TestOptimize:
    """impot-sim optimize"""

    def test_suggestion(self, runner, isolated_config):
        result = runner.invoke(cli, ["optimize", *COUPLE_ARGS])

        assert result.exit_code == 0, result.output
        assert "Marginal rate:     30%" in result.output
        assert "7,270" in result.output
        assert "2,181" in result.output
        assert "Rate after:        11%" in result.output

    def test_lowest_bracket(self, runner, isolated_config):
        result = runner.invoke(cli, ["optimize", "--salary1", "24000"])

        assert result.exit_code == 0, result.output
        assert "Already in the lowest taxed bracket" in result.output


class TestRules:
    """impot-sim rules list / show"""

    def test_list_marks_default(self, runner, isolated_config):
        result = runner.invoke(cli, ["rules", "list"])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "2025 (default)"
        assert "2024" in lines

    def test_show_yaml(self, runner, isolated_config):
        result = runner.invoke(cli, ["rules", "show", "2025"])

        assert result.exit_code == 0, result.output
        assert "year: 2025" in result.output
        assert "quotient_cap_per_half_part: 1791" in result.output

    def test_show_json(self, runner, isolated_config):
        result = runner.invoke(cli, ["rules", "show", "2024", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["widow_relief_cap"] == 1958

    def test_show_unknown_year(self, runner, isolated_config):
        result = runner.invoke(cli, ["rules", "show", "1999"])

        assert result.exit_code != 0
        assert "not found" in result.output


class TestSettings:
    """impot-sim settings"""

    def test_default_year_changes_simulation(self, runner, isolated_config):
        result = runner.invoke(cli, ["settings", "default-year", "2024"])
        assert result.exit_code == 0, result.output
        assert json.loads((isolated_config / "settings.json").read_text()) == {"default_year": 2024}

        result = runner.invoke(cli, ["simulate", "--salary1", "24000", "--format", "json"])

        assert json.loads(result.output)["year"] == 2024
        assert json.loads(result.output)["final_tax"] == 773

    def test_default_year_rejects_unknown(self, runner, isolated_config):
        result = runner.invoke(cli, ["settings", "default-year", "1999"])

        assert result.exit_code != 0
        assert "No tax rules for 1999" in result.output
        assert not (isolated_config / "settings.json").exists()

    def test_clear_default_year(self, runner, isolated_config):
        runner.invoke(cli, ["settings", "default-year", "2024"])

        result = runner.invoke(cli, ["settings", "default-year", "--clear"])

        assert result.exit_code == 0, result.output
        assert "Cleared default_year setting." in result.output
        assert "Default year is now: 2025" in result.output

    def test_show(self, runner, isolated_config):
        result = runner.invoke(cli, ["settings", "show"])

        assert result.exit_code == 0, result.output
        assert "No settings configured" in result.output
        assert "year: 2025" in result.output


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "impot-sim" in result.output
