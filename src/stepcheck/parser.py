"""Step file parser.

Grammar (informal EBNF), over normalized lines:
    file       := FEATURE? narrative* scenario* EOF
    scenario   := SCENARIO? step+
    step       := STEP block?
    block      := TABLE_ROW+ | FENCE TEXT* FENCE
    STEP       := ('Given' | 'When' | 'Then' | 'And' | 'But') text

Blank lines and lines starting with '#' are dropped before lexing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from stepcheck.blocks import FENCE, Table, TextBlock
from stepcheck.models import ParseError, ParseResult, Scenario, Step, StepKind

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"
UNTITLED = "Untitled scenario"

_HEADER_RE = re.compile(r"^(feature|scenario)\s*:\s*(.*)$", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_STEP_RE = re.compile(r"^(given|when|then|and|but)(?:\s|$)", re.IGNORECASE)

_KEYWORD_KINDS = {
    "given": StepKind.GIVEN,
    "when": StepKind.WHEN,
    "then": StepKind.THEN,
}


def _numbered_lines(text: str | None) -> list[tuple[int, str]]:
    if not text:
        return []
    numbered: list[tuple[int, str]] = []
    for i, raw in enumerate(_LINE_BREAK_RE.split(text), 1):
        line = raw.strip()
        if line and not line.startswith(COMMENT_MARKER):
            numbered.append((i, line))
    return numbered


def normalize_lines(text: str | None) -> list[str]:
    """Return the trimmed, non-blank, non-comment lines of ``text`` in order."""
    return [line for _, line in _numbered_lines(text)]


class TokenType(Enum):
    FEATURE = auto()     # Feature: name
    SCENARIO = auto()    # Scenario: name
    STEP = auto()        # Given/When/Then/And/But ...
    TABLE_ROW = auto()   # | a | b |
    FENCE = auto()       # """
    TEXT = auto()        # anything else
    EOF = auto()


@dataclass
class Token:
    type: TokenType
    text: str
    line_number: int


class Lexer:
    """Turns step file text into a token stream, one token per kept line."""

    def __init__(self, content: str | None) -> None:
        self.lines = _numbered_lines(content)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        in_fence = False
        for line_num, line in self.lines:
            if line == FENCE:
                in_fence = not in_fence
                tokens.append(Token(TokenType.FENCE, line, line_num))
                continue
            if in_fence:
                tokens.append(Token(TokenType.TEXT, line, line_num))
                continue
            tokens.append(self._classify(line, line_num))
        last = self.lines[-1][0] + 1 if self.lines else 1
        tokens.append(Token(TokenType.EOF, "", last))
        return tokens

    def _classify(self, line: str, line_num: int) -> Token:
        header = _HEADER_RE.match(line)
        if header:
            token_type = (
                TokenType.FEATURE if header.group(1).lower() == "feature"
                else TokenType.SCENARIO
            )
            return Token(token_type, header.group(2).strip(), line_num)
        if _STEP_RE.match(line):
            return Token(TokenType.STEP, line, line_num)
        if line.startswith("|"):
            return Token(TokenType.TABLE_ROW, line, line_num)
        return Token(TokenType.TEXT, line, line_num)


class Parser:
    """Builds scenarios from a token stream."""

    def __init__(self, tokens: list[Token], source_file: str | None = None) -> None:
        self.tokens = tokens
        self.source_file = source_file
        self.pos = 0
        self.name = ""
        self.scenarios: list[Scenario] = []
        self.errors: list[ParseError] = []

    def parse(self) -> ParseResult:
        if self._peek().type == TokenType.FEATURE:
            self.name = self._advance().text

        # Narrative before the first scenario is not part of any scenario.
        while not self._at_end() and self._peek().type not in (
            TokenType.SCENARIO, TokenType.STEP
        ):
            self._advance()

        while not self._at_end():
            token = self._peek()
            if token.type == TokenType.SCENARIO:
                self._advance()
                self._parse_scenario(token.text or UNTITLED, token.line_number)
            elif token.type == TokenType.STEP:
                self._parse_scenario(UNTITLED, token.line_number)
            else:
                self._anomaly(f"Unexpected line: {token.text!r}", token)
                self._advance()

        return ParseResult(name=self.name, scenarios=self.scenarios, errors=self.errors)

    def _parse_scenario(self, name: str, start_line: int) -> None:
        scenario = Scenario(name=name, line_number=start_line)
        previous = StepKind.UNKNOWN
        while not self._at_end() and self._peek().type not in (
            TokenType.SCENARIO, TokenType.FEATURE
        ):
            token = self._peek()
            if token.type == TokenType.STEP:
                self._advance()
                step = Step(
                    text=token.text,
                    kind=self._step_kind(token.text, previous),
                    line_number=token.line_number,
                )
                previous = step.kind
                scenario.steps.append(step)
            elif token.type == TokenType.TABLE_ROW:
                self._parse_table(scenario)
            elif token.type == TokenType.FENCE:
                self._parse_text_block(scenario)
            else:
                self._anomaly(f"Unexpected line: {token.text!r}", token)
                self._advance()

        if not scenario.steps:
            self._anomaly(
                f"Scenario has no steps: {name!r}",
                Token(TokenType.SCENARIO, name, start_line),
            )
            return
        self.scenarios.append(scenario)

    def _step_kind(self, text: str, previous: StepKind) -> StepKind:
        keyword = text.split(None, 1)[0].lower()
        if keyword in _KEYWORD_KINDS:
            return _KEYWORD_KINDS[keyword]
        # And/But continue the previous kind; leading ones count as Given.
        if previous == StepKind.UNKNOWN:
            return StepKind.GIVEN
        return previous

    def _parse_table(self, scenario: Scenario) -> None:
        first = self._peek()
        table = Table()
        while not self._at_end() and self._peek().type == TokenType.TABLE_ROW:
            table.add_row(self._advance().text)
        self._attach(scenario, table, first)

    def _parse_text_block(self, scenario: Scenario) -> None:
        first = self._advance()  # opening fence
        block = TextBlock()
        while not self._at_end() and self._peek().type == TokenType.TEXT:
            block.lines.append(self._advance().text)
        if self._peek().type == TokenType.FENCE:
            self._advance()
        else:
            self._anomaly("Unterminated text block", first)
        self._attach(scenario, block, first)

    def _attach(self, scenario: Scenario, block: Table | TextBlock, token: Token) -> None:
        if not scenario.steps:
            self._anomaly("Block has no step to attach to", token)
            return
        step = scenario.steps[-1]
        if step.block is not None:
            self._anomaly(f"Step already has a block: {step.text!r}", token)
            return
        step.block = block

    def _anomaly(self, message: str, token: Token) -> None:
        logger.warning("%s (line %d)", message, token.line_number)
        self.errors.append(ParseError(
            message=message,
            line_number=token.line_number,
            source_file=self.source_file,
        ))

    def _peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token(TokenType.EOF, "", -1)

    def _advance(self) -> Token:
        token = self._peek()
        self.pos += 1
        return token

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF


def parse_step_text(content: str | None, source_file: str | None = None) -> ParseResult:
    """Parse step file text into a ParseResult."""
    tokens = Lexer(content).tokenize()
    return Parser(tokens, source_file).parse()


def parse_step_file(path: Path) -> ParseResult:
    """Parse a step file into a ParseResult."""
    return parse_step_text(path.read_text(), source_file=str(path))
