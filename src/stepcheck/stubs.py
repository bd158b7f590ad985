"""Stub code suggestions for undefined steps."""

from __future__ import annotations

from stepcheck.analyzer import TokenKind, classify, is_argument, tokenize
from stepcheck.models import Step, StubCandidate

PARAMETER_TYPES: dict[TokenKind, str] = {
    TokenKind.INTEGER: "int",
    TokenKind.DECIMAL: "Decimal",
    TokenKind.CURRENCY_DECIMAL: "Decimal",
    TokenKind.QUOTED_STRING: "str",
}


def stub_identifier(step: Step) -> str:
    """Build a function name from the step text.

    Arguments become ``argN`` and the leading keyword is replaced by the
    step kind, so ``And I pay $5`` under a When becomes ``when_i_pay_arg1``.
    """
    parts: list[str] = []
    arg = 1
    for i, token in enumerate(tokenize(step.text)):
        if is_argument(classify(token)):
            parts.append(f"arg{arg}")
            arg += 1
        elif i == 0:
            parts.append(step.kind.value)
        else:
            parts.append(token)
    return "_".join(parts).lower()


def stub_parameters(step: Step) -> list[tuple[str, str]]:
    """Return (type, name) pairs for each argument, then the block if any."""
    parameters: list[tuple[str, str]] = []
    arg = 1
    for token in tokenize(step.text):
        kind = classify(token)
        if is_argument(kind):
            parameters.append((PARAMETER_TYPES[kind], f"arg{arg}"))
            arg += 1
    if step.block is not None:
        parameters.append((
            step.block.suggested_parameter_type(),
            step.block.suggested_parameter_name(),
        ))
    return parameters


def synthesize(step: Step) -> StubCandidate:
    return StubCandidate(identifier=stub_identifier(step), parameters=stub_parameters(step))


def render_stub(step: Step) -> str:
    return synthesize(step).render()
