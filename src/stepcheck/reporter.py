"""Plain text reporting of verified scenarios."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol, TextIO

import click

from stepcheck.models import FailureDetail, Scenario, Step, StepKind, StepResult
from stepcheck.stubs import render_stub

if TYPE_CHECKING:
    from stepcheck.document import SpecificationDocument

UNDEFINED_HEADER = "Your undefined steps can be defined with the following code:"
DIVIDER = "---"

SYMBOLS: dict[StepResult, str] = {
    StepResult.UNDEFINED: "?",
    StepResult.PENDING: "*",
    StepResult.PASSED: " ",
    StepResult.FAILED: "!",
    StepResult.SKIPPED: "-",
}

_FRAME_PATTERNS = (
    (re.compile(r"  at (.+) in (.+):line (\d+)"), r"\2(\3): \1"),
    (re.compile(r'  File "(.+)", line (\d+), in (.+)'), r"\1(\2): \3"),
)


def clickable_trace(trace: str) -> str:
    """Rewrite stack frames as ``file(line): frame`` so editors can jump to them."""
    for pattern, replacement in _FRAME_PATTERNS:
        trace = pattern.sub(replacement, trace)
    return trace


class Reporter(Protocol):
    def begin_document(self, document: SpecificationDocument) -> None: ...

    def report_scenario(self, scenario: Scenario) -> None: ...

    def report_undefined_steps(self, steps: list[Step]) -> None: ...

    def end_document(self, document: SpecificationDocument) -> None: ...


class PlainTextReporter:
    """Writes scenarios line by line, one status symbol per step.

    A blank line separates steps whose kind differs from the step written
    just before, across scenario boundaries too. Create a new reporter (or
    call ``reset``) to start grouping afresh.
    """

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out
        self.last_kind = StepKind.UNKNOWN

    def reset(self) -> None:
        self.last_kind = StepKind.UNKNOWN

    def _write(self, text: str = "", nl: bool = True) -> None:
        click.echo(text, file=self._out, nl=nl)

    def begin_document(self, document: SpecificationDocument) -> None:
        pass

    def end_document(self, document: SpecificationDocument) -> None:
        pass

    def report_document(self, document: SpecificationDocument) -> None:
        """Report every scenario with dividers, then the undefined steps."""
        for scenario in document.scenarios:
            self.report_scenario(scenario)
            self._write(DIVIDER)
            self._write()
        self.report_undefined_steps(document.undefined_steps())

    def report_scenario(self, scenario: Scenario) -> None:
        self._write(f"Scenario: {scenario.name}")
        self._write()
        for step in scenario.steps:
            self._report_status(step)
            if step.block is not None:
                self._write(step.block.render_text(), nl=False)
        self._write()
        if scenario.failure is not None:
            self._report_failure(scenario.failure)

    def _report_status(self, step: Step) -> None:
        if self.last_kind != StepKind.UNKNOWN and step.kind != self.last_kind:
            self._write()
        if step.result is None:
            raise ValueError(f"Step has not been verified: {step.text!r}")
        symbol = SYMBOLS[step.result]
        self._write(f"{symbol} {step.text}")
        self.last_kind = step.kind

    def _report_failure(self, failure: FailureDetail) -> None:
        self._write(failure.message)
        if failure.trace:
            self._write()
            self._write(clickable_trace(failure.trace).rstrip("\n"))
        self._write()

    def report_undefined_steps(self, steps: list[Step]) -> None:
        if not steps:
            return
        self._write(UNDEFINED_HEADER)
        self._write()
        for step in steps:
            self._write(render_stub(step))
            self._write()
