"""Scenario verification."""

from __future__ import annotations

import logging

from stepcheck.models import FailureDetail, Scenario, Step, StepOutcome, StepResult
from stepcheck.registry import StepRegistry

logger = logging.getLogger(__name__)


def execute_step(step: Step, registry: StepRegistry) -> StepOutcome:
    """Resolve and run one step. Exceptions are returned, not raised."""
    bound = registry.resolve(step)
    if bound is None:
        return StepOutcome(StepResult.UNDEFINED)
    try:
        bound.invoke()
    except NotImplementedError:
        return StepOutcome(StepResult.PENDING)
    except Exception as exc:
        logger.debug("Step failed: %s", step.text, exc_info=True)
        return StepOutcome(StepResult.FAILED, FailureDetail.from_exception(exc))
    return StepOutcome(StepResult.PASSED)


def verify_scenario(scenario: Scenario) -> bool:
    """Run the steps of a scenario in order and record their results.

    Execution stops at the first step that is not PASSED. The steps after
    it are SKIPPED, or UNDEFINED if nothing would match them.
    """
    registry = scenario.registry
    if registry is None:
        raise RuntimeError(f"Scenario is not bound to a step registry: {scenario.name!r}")

    halted = False
    for step in scenario.steps:
        if halted:
            if registry.resolve(step) is None:
                step.record(StepOutcome(StepResult.UNDEFINED))
            else:
                step.record(StepOutcome(StepResult.SKIPPED))
            continue

        outcome = execute_step(step, registry)
        step.record(outcome)
        if outcome.result != StepResult.PASSED:
            halted = True
            if outcome.detail is not None:
                scenario.failure = outcome.detail

    passed = all(step.result == StepResult.PASSED for step in scenario.steps)
    scenario.result = StepResult.PASSED if passed else StepResult.FAILED
    logger.debug("Scenario %r: %s", scenario.name, scenario.result.value)
    return passed
