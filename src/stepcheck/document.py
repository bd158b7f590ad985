"""The specification document: load, verify and report one step file."""

from __future__ import annotations

import logging
from pathlib import Path

from stepcheck.models import ParseError, Scenario, Step, StepResult
from stepcheck.parser import parse_step_text
from stepcheck.registry import StepRegistry
from stepcheck.reporter import PlainTextReporter, Reporter
from stepcheck.runner import verify_scenario

logger = logging.getLogger(__name__)


class SpecificationDocument:
    """Owns a step registry and the scenarios bound to it."""

    def __init__(
        self,
        name: str = "",
        registry: StepRegistry | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self.name = name
        self.registry = registry if registry is not None else StepRegistry()
        self.scenarios: list[Scenario] = []
        self.parse_errors: list[ParseError] = []
        self.passed = False
        self._reporter = reporter
        self._verified = False

    @property
    def reporter(self) -> Reporter:
        if self._reporter is None:
            self._reporter = PlainTextReporter()
        return self._reporter

    @reporter.setter
    def reporter(self, reporter: Reporter) -> None:
        self._reporter = reporter

    def load(self, text: str | None, source_file: str | None = None) -> None:
        """Parse ``text``, replacing any previously loaded scenarios."""
        result = parse_step_text(text, source_file)
        if result.name:
            self.name = result.name
        self.scenarios = result.scenarios
        self.parse_errors = result.errors
        for scenario in self.scenarios:
            scenario.registry = self.registry
        self.passed = False
        self._verified = False
        logger.debug("Loaded %d scenario(s) into %r", len(self.scenarios), self.name)

    def load_file(self, path: Path) -> None:
        if not self.name:
            self.name = path.stem
        self.load(path.read_text(), source_file=str(path))

    def verify(self) -> bool:
        """Verify every scenario. All scenarios run even after a failure."""
        if self._verified:
            raise RuntimeError("Document already verified; load it again to re-run")
        results = [verify_scenario(scenario) for scenario in self.scenarios]
        self.passed = all(results)
        self._verified = True
        return self.passed

    def undefined_steps(self) -> list[Step]:
        """Undefined steps across all scenarios, first occurrence per text."""
        seen: set[str] = set()
        steps: list[Step] = []
        for scenario in self.scenarios:
            for step in scenario.steps:
                if step.result == StepResult.UNDEFINED and step.key not in seen:
                    seen.add(step.key)
                    steps.append(step)
        return steps

    def report(self) -> None:
        if not self._verified:
            raise RuntimeError("Document must be verified before it is reported")
        reporter = self.reporter
        reporter.begin_document(self)
        for scenario in self.scenarios:
            reporter.report_scenario(scenario)
        reporter.report_undefined_steps(self.undefined_steps())
        reporter.end_document(self)
