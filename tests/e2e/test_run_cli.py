"""E2E tests: drive the stepcheck CLI against a project on disk."""

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from stepcheck.cli import cli
from stepcheck.reporter import UNDEFINED_HEADER

pytestmark = pytest.mark.e2e

PASSING = """\
Scenario: Deposit money
  Given I have an account with $10.00
  When I deposit $50.00
  Then my balance is $60.00
"""


class TestInit:
    def test_init_creates_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["init"])
        assert result.exit_code == 0
        assert (tmp_path / ".stepcheck" / "config.json").exists()
        assert (tmp_path / "specs").is_dir()

    def test_init_twice_keeps_config(
        self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(initialized_project)
        result = CliRunner().invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "already initialized" in result.output


class TestRun:
    def test_report(self, bank_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(bank_project)
        result = CliRunner().invoke(cli, ["run", "--steps", "bank_steps.py"])
        assert result.exit_code == 1
        output = result.output
        assert "Scenario: Deposit money" in output
        assert "  When I deposit $50.00" in output
        assert "! When I withdraw $20.00" in output
        assert '? Then I see the message "Insufficient funds"' in output
        assert "- And my balance is $10.00" in output
        assert "Insufficient funds\n" in output
        assert UNDEFINED_HEADER in output
        assert "def then_i_see_the_message_arg1(arg1: str):" in output

    def test_passing_run(self, bank_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(bank_project)
        spec = bank_project / "deposit.feature"
        spec.write_text(PASSING)
        result = CliRunner().invoke(cli, ["run", str(spec), "-s", "bank_steps.py"])
        assert result.exit_code == 0
        assert UNDEFINED_HEADER not in result.output

    def test_step_modules_from_config(
        self, bank_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(bank_project)
        config_path = bank_project / ".stepcheck" / "config.json"
        config = json.loads(config_path.read_text())
        config["step_modules"] = ["bank_steps.py"]
        config_path.write_text(json.dumps(config))
        (bank_project / "specs" / "bank.feature").write_text(PASSING)
        result = CliRunner().invoke(cli, ["run"])
        assert result.exit_code == 0

    def test_json_output_file(self, bank_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(bank_project)
        result = CliRunner().invoke(
            cli, ["run", "-s", "bank_steps.py", "--format", "json", "-o", "results.json"]
        )
        assert result.exit_code == 1
        data = json.loads((bank_project / "results.json").read_text())
        assert data[0]["name"] == "Bank account"
        assert [s["result"] for s in data[0]["scenarios"]] == ["passed", "failed"]

    def test_yaml_output_file(self, bank_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(bank_project)
        CliRunner().invoke(
            cli, ["run", "-s", "bank_steps.py", "--format", "yaml", "-o", "results.yaml"]
        )
        data = yaml.safe_load((bank_project / "results.yaml").read_text())
        assert len(data[0]["undefined_steps"]) == 1

    def test_no_spec_files(self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(initialized_project)
        result = CliRunner().invoke(cli, ["run"])
        assert result.exit_code == 1
        assert "No spec files found" in result.output

    def test_missing_step_module(self, bank_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(bank_project)
        result = CliRunner().invoke(cli, ["run", "-s", "no_such_steps_module"])
        assert result.exit_code == 1
        assert "Could not load step definitions" in result.output

    def test_without_config(
        self, tmp_path: Path, bank_spec: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        spec = tmp_path / "bank.feature"
        spec.write_text(bank_spec)
        result = CliRunner().invoke(cli, ["run", str(spec)])
        assert result.exit_code == 1
        assert "def given_i_have_an_account_with_arg1(arg1: Decimal):" in result.output


class TestStubs:
    def test_prints_only_stubs(self, bank_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(bank_project)
        result = CliRunner().invoke(cli, ["stubs", "-s", "bank_steps.py"])
        assert result.exit_code == 0
        assert "Scenario:" not in result.output
        assert "def then_i_see_the_message_arg1(arg1: str):" in result.output

    def test_pasted_stub_makes_step_pending(
        self, bank_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(bank_project)
        stubs = CliRunner().invoke(cli, ["stubs", "-s", "bank_steps.py"]).output
        stub = stubs[stubs.index("def "):].strip()
        steps = bank_project / "bank_steps.py"
        steps.write_text(steps.read_text() + "\n\n" + stub + "\n")

        result = CliRunner().invoke(cli, ["run", "-s", "bank_steps.py"])
        assert UNDEFINED_HEADER not in result.output

        again = CliRunner().invoke(cli, ["stubs", "-s", "bank_steps.py"])
        assert "No undefined steps." in again.output


class TestFullDocumentReport:
    def test_divider_after_each_scenario(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        spec = tmp_path / "a.feature"
        spec.write_text("Scenario: A\nGiven x\n\nScenario: B\nGiven y\n")
        result = CliRunner().invoke(cli, ["run", str(spec)])
        lines = result.output.splitlines()
        assert lines.count("---") == 2
        assert lines.index("---") < lines.index("Scenario: B")
        assert max(i for i, line in enumerate(lines) if line == "---") < lines.index(
            UNDEFINED_HEADER
        )

    def test_files_are_separated(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        first = tmp_path / "first.feature"
        second = tmp_path / "second.feature"
        first.write_text("Scenario: One\nGiven x\n")
        second.write_text("Scenario: Two\nGiven y\n")
        result = CliRunner().invoke(cli, ["run", str(first), str(second)])
        lines = result.output.splitlines()
        assert lines.count("---") == 2
        assert lines.count(UNDEFINED_HEADER) == 2
        assert lines.index("---") < lines.index("Scenario: Two")
