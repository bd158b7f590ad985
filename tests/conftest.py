"""Shared test fixtures for stepcheck."""

import json
from pathlib import Path

import pytest

from stepcheck.registry import StepRegistry


@pytest.fixture
def initialized_project(tmp_path: Path) -> Path:
    """Create a temporary project with stepcheck initialized."""
    stepcheck_dir = tmp_path / ".stepcheck"
    stepcheck_dir.mkdir()
    (tmp_path / "specs").mkdir()
    config = {
        "version": "0.1.0",
        "step_modules": [],
        "spec_dir": "specs",
        "pattern": "*.feature",
        "output_format": "text",
    }
    (stepcheck_dir / "config.json").write_text(json.dumps(config, indent=2))
    return tmp_path


@pytest.fixture
def bank_spec() -> str:
    """Return a step file with two scenarios."""
    return """\
Feature: Bank account

  # Deposits and withdrawals
  Accounts hold money.

Scenario: Deposit money
  Given I have an account with $10.00
  When I deposit $50.00
  Then my balance is $60.00

Scenario: Withdraw too much
  Given I have an account with $10.00
  When I withdraw $20.00
  Then I see the message "Insufficient funds"
  And my balance is $10.00
"""


@pytest.fixture
def bank_steps() -> str:
    """Return a step module implementing most of the bank spec."""
    return '''\
from decimal import Decimal

from stepcheck.registry import then

ACCOUNT = {}


def given_i_have_an_account_with_arg1(arg1: Decimal):
    ACCOUNT["balance"] = arg1


def when_i_deposit_arg1(arg1: Decimal):
    ACCOUNT["balance"] += arg1


def when_i_withdraw_arg1(arg1: Decimal):
    if arg1 > ACCOUNT["balance"]:
        raise ValueError("Insufficient funds")
    ACCOUNT["balance"] -= arg1


@then(r"my balance is \\$(\\d+\\.\\d+)")
def balance_is(amount: Decimal):
    assert ACCOUNT["balance"] == amount, ACCOUNT["balance"]
'''


@pytest.fixture
def bank_project(initialized_project: Path, bank_spec: str, bank_steps: str) -> Path:
    """An initialized project with the bank spec and step module on disk."""
    (initialized_project / "specs" / "bank.feature").write_text(bank_spec)
    (initialized_project / "bank_steps.py").write_text(bank_steps)
    return initialized_project


@pytest.fixture
def registry() -> StepRegistry:
    return StepRegistry()
