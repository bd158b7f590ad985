"""Core data models for stepcheck."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from stepcheck.registry import StepRegistry


class StepKind(Enum):
    """The kind of a step. UNKNOWN marks "no step seen yet"."""

    GIVEN = "given"
    WHEN = "when"
    THEN = "then"
    UNKNOWN = "unknown"


class StepResult(Enum):
    """Result of verifying a step (or a whole scenario)."""

    PASSED = "passed"
    FAILED = "failed"
    UNDEFINED = "undefined"
    PENDING = "pending"
    SKIPPED = "skipped"


class Block(Protocol):
    """Data attached to a step, such as a table or a fenced text blob."""

    def render_text(self) -> str: ...

    def suggested_parameter_type(self) -> str: ...

    def suggested_parameter_name(self) -> str: ...


@dataclass(frozen=True)
class FailureDetail:
    """What went wrong when a step raised."""

    message: str
    trace: str = ""
    exception_type: str = ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> FailureDetail:
        message = str(exc) or type(exc).__name__
        trace = "".join(traceback.format_tb(exc.__traceback__))
        return cls(message=message, trace=trace, exception_type=type(exc).__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Result of executing a single step, passed around by value."""

    result: StepResult
    detail: FailureDetail | None = None

    def __post_init__(self) -> None:
        if self.result == StepResult.FAILED and self.detail is None:
            raise ValueError("A failed outcome needs a failure detail")


@dataclass
class Step:
    """A single Given/When/Then line of a scenario."""

    text: str
    kind: StepKind
    line_number: int = 0
    block: Block | None = None
    result: StepResult | None = None
    failure: FailureDetail | None = None

    @property
    def key(self) -> str:
        """Identity used to deduplicate steps (case-insensitive text)."""
        return self.text.casefold()

    def record(self, outcome: StepOutcome) -> None:
        if self.result is not None:
            raise ValueError(f"Step already has a result: {self.text!r}")
        self.result = outcome.result
        self.failure = outcome.detail


@dataclass
class Scenario:
    """A named, ordered sequence of steps."""

    name: str
    steps: list[Step] = field(default_factory=list)
    line_number: int = 0
    registry: StepRegistry | None = None
    result: StepResult | None = None
    failure: FailureDetail | None = None

    @property
    def passed(self) -> bool:
        return self.result == StepResult.PASSED


@dataclass
class ParseError:
    """An anomaly encountered during parsing. Never fatal."""

    message: str
    line_number: int
    source_file: str | None = None


@dataclass
class ParseResult:
    """Result of parsing one step file."""

    name: str = ""
    scenarios: list[Scenario] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return len(self.errors) == 0


@dataclass
class StubCandidate:
    """Suggested definition for an undefined step."""

    identifier: str
    parameters: list[tuple[str, str]] = field(default_factory=list)  # (type, name)

    @property
    def signature(self) -> str:
        return ", ".join(f"{name}: {type_name}" for type_name, name in self.parameters)

    def render(self) -> str:
        return f"def {self.identifier}({self.signature}):\n    raise NotImplementedError"
