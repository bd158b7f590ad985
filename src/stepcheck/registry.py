"""Step definition registry.

A step definition is a plain function. Its pattern is either an explicit
regular expression or is derived from the function name, so that a pasted
stub works as-is::

    def when_i_deposit_arg1(arg1: Decimal):
        ...

matches ``When I deposit $50.00`` and is called with ``Decimal("50.00")``.
Patterns are matched against the step text without its leading keyword.
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import re
import sys
import typing
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

from stepcheck.analyzer import CURRENCY, TokenKind, classify, unquote
from stepcheck.models import Step, StepKind

logger = logging.getLogger(__name__)

MARK_ATTR = "_stepcheck_definitions"
ARG_PATTERN = r'("[^"]*"|\S+)'

_ARG_PART_RE = re.compile(r"arg\d+")
_NAME_KINDS = {
    "given": StepKind.GIVEN,
    "when": StepKind.WHEN,
    "then": StepKind.THEN,
}

StepFunction = Callable[..., Any]


def pattern_from_name(name: str) -> tuple[StepKind, str]:
    """Derive (kind, regex) from a function name like ``given_i_have_arg1``."""
    parts = name.split("_")
    kind = _NAME_KINDS.get(parts[0].lower())
    if kind is None:
        raise ValueError(f"Step function name must start with given_, when_ or then_: {name}")
    pieces = [
        ARG_PATTERN if _ARG_PART_RE.fullmatch(part) else re.escape(part)
        for part in parts[1:]
        if part
    ]
    return kind, r"\s+".join(pieces)


def step_body(text: str) -> str:
    """Return step text without its leading keyword."""
    parts = text.split(None, 1)
    return parts[1].strip() if len(parts) > 1 else ""


def _mark(kind: StepKind | None, pattern: str | StepFunction | None) -> Any:
    def wrapper(func: StepFunction) -> StepFunction:
        marks = func.__dict__.setdefault(MARK_ATTR, [])
        marks.append((kind, pattern if isinstance(pattern, str) else None))
        return func

    if callable(pattern):
        return wrapper(pattern)
    return wrapper


def given(pattern: str | StepFunction | None = None) -> Any:
    """Mark a function in a step module as a Given definition."""
    return _mark(StepKind.GIVEN, pattern)


def when(pattern: str | StepFunction | None = None) -> Any:
    """Mark a function in a step module as a When definition."""
    return _mark(StepKind.WHEN, pattern)


def then(pattern: str | StepFunction | None = None) -> Any:
    """Mark a function in a step module as a Then definition."""
    return _mark(StepKind.THEN, pattern)


def step(pattern: str | StepFunction | None = None) -> Any:
    """Mark a function that matches steps of any kind."""
    return _mark(None, pattern)


def _convert(raw: str | None, hint: Any) -> Any:
    if raw is None:
        return None
    if hint is int:
        return int(raw)
    if hint in (Decimal, float):
        number = raw[1:] if raw.startswith(CURRENCY) else raw
        return hint(number)
    if hint is str:
        return unquote(raw)
    if hint is not None:
        return raw

    kind = classify(raw)
    if kind == TokenKind.INTEGER:
        return int(raw)
    if kind == TokenKind.DECIMAL:
        return Decimal(raw)
    if kind == TokenKind.CURRENCY_DECIMAL:
        return Decimal(raw[1:])
    return unquote(raw)


def _parameter_hints(func: StepFunction) -> list[Any]:
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        hints = {}
    try:
        params = inspect.signature(func).parameters
    except (TypeError, ValueError):
        return []
    return [hints.get(name) for name in params]


@dataclass
class StepDefinition:
    """A function plus the pattern it answers to."""

    func: StepFunction
    regex: re.Pattern[str]
    kind: StepKind | None = None  # None matches any kind

    @property
    def name(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))

    def match(self, body: str) -> re.Match[str] | None:
        return self.regex.fullmatch(body)


@dataclass
class BoundStep:
    """A step resolved to a definition, with its raw captured arguments."""

    definition: StepDefinition
    step: Step
    arguments: list[str | None] = field(default_factory=list)

    def converted_arguments(self) -> list[Any]:
        hints = _parameter_hints(self.definition.func)
        values = [
            _convert(raw, hints[i] if i < len(hints) else None)
            for i, raw in enumerate(self.arguments)
        ]
        if self.step.block is not None:
            values.append(self.step.block)
        return values

    def invoke(self) -> Any:
        return self.definition.func(*self.converted_arguments())


class StepRegistry:
    """Ordered collection of step definitions, grouped by step kind."""

    def __init__(self) -> None:
        self._definitions: dict[StepKind | None, list[StepDefinition]] = {
            StepKind.GIVEN: [],
            StepKind.WHEN: [],
            StepKind.THEN: [],
            None: [],
        }

    def __len__(self) -> int:
        return sum(len(defs) for defs in self._definitions.values())

    def add(
        self,
        func: StepFunction,
        pattern: str | None = None,
        kind: StepKind | None = StepKind.UNKNOWN,
    ) -> StepDefinition:
        """Register ``func``. Without a pattern, the function name is the pattern.

        ``kind=None`` matches steps of any kind. UNKNOWN takes the kind from
        the function name, or means any kind when a pattern is given.
        """
        if pattern is None:
            name_kind, pattern = pattern_from_name(func.__name__)
            if kind == StepKind.UNKNOWN:
                kind = name_kind
        if kind == StepKind.UNKNOWN:
            kind = None
        definition = StepDefinition(
            func=func,
            regex=re.compile(pattern, re.IGNORECASE),
            kind=kind,
        )
        self._definitions[kind].append(definition)
        logger.debug("Registered %s for /%s/", definition.name, pattern)
        return definition

    def make_decorator(self, kind: StepKind | None) -> Callable[..., Any]:
        def decorator(pattern: str | None = None) -> Callable[[StepFunction], StepFunction]:
            def wrapper(func: StepFunction) -> StepFunction:
                self.add(func, pattern, kind)
                return func
            return wrapper
        return decorator

    def given(self, pattern: str | None = None) -> Callable[[StepFunction], StepFunction]:
        return self.make_decorator(StepKind.GIVEN)(pattern)

    def when(self, pattern: str | None = None) -> Callable[[StepFunction], StepFunction]:
        return self.make_decorator(StepKind.WHEN)(pattern)

    def then(self, pattern: str | None = None) -> Callable[[StepFunction], StepFunction]:
        return self.make_decorator(StepKind.THEN)(pattern)

    def step(self, pattern: str | None = None) -> Callable[[StepFunction], StepFunction]:
        return self.make_decorator(None)(pattern)

    def add_module(self, module: ModuleType) -> int:
        """Register the step functions defined in ``module``. Returns the count."""
        count = 0
        for name, obj in vars(module).items():
            if not inspect.isfunction(obj) or obj.__module__ != module.__name__:
                continue
            count += self._add_candidate(name, obj)
        logger.debug("Loaded %d step definition(s) from %s", count, module.__name__)
        return count

    def add_object(self, obj: object) -> int:
        """Register step methods of an instance, in definition order."""
        count = 0
        for name in vars(type(obj)):
            if name.startswith("_"):
                continue
            member = getattr(obj, name)
            if inspect.ismethod(member):
                count += self._add_candidate(name, member)
        return count

    def _add_candidate(self, name: str, func: StepFunction) -> int:
        marks = getattr(func, MARK_ATTR, None)
        if marks:
            for kind, pattern in marks:
                self.add(func, pattern, kind)
            return len(marks)
        if name.split("_", 1)[0].lower() in _NAME_KINDS:
            self.add(func)
            return 1
        return 0

    def resolve(self, step: Step) -> BoundStep | None:
        """Find the first definition matching ``step``, or None."""
        body = step_body(step.text)
        candidates = self._definitions.get(step.kind, []) + self._definitions[None]
        for definition in candidates:
            match = definition.match(body)
            if match:
                return BoundStep(definition=definition, step=step, arguments=list(match.groups()))
        logger.debug("No definition for %r", step.text)
        return None


def load_step_module(ref: str) -> ModuleType:
    """Import a step module by dotted name or by ``.py`` file path."""
    path = Path(ref)
    if path.suffix == ".py" or path.is_file():
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load step module from {path}")
        module = importlib.util.module_from_spec(spec)
        # Dataclasses and typing look the module up by name while it executes.
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(spec.name, None)
            raise
        return module
    return importlib.import_module(ref)
