"""Blocks that can be attached to a step: tables and fenced text."""

from __future__ import annotations

from dataclasses import dataclass, field

INDENT = "  "
FENCE = '"""'


@dataclass
class Table:
    """A pipe-delimited table. The first row is the header."""

    rows: list[list[str]] = field(default_factory=list)

    @classmethod
    def parse_row(cls, line: str) -> list[str]:
        inner = line.strip()
        if inner.startswith("|"):
            inner = inner[1:]
        if inner.endswith("|"):
            inner = inner[:-1]
        return [cell.strip() for cell in inner.split("|")]

    def add_row(self, line: str) -> None:
        self.rows.append(self.parse_row(line))

    @property
    def header(self) -> list[str]:
        return self.rows[0] if self.rows else []

    def as_dicts(self) -> list[dict[str, str]]:
        """Map header cells to values for every data row."""
        return [dict(zip(self.header, row)) for row in self.rows[1:]]

    def render_text(self) -> str:
        if not self.rows:
            return ""
        width = max(len(row) for row in self.rows)
        widths = [0] * width
        for row in self.rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))
        lines = []
        for row in self.rows:
            cells = [
                (row[i] if i < len(row) else "").ljust(widths[i])
                for i in range(width)
            ]
            lines.append(f"{INDENT}| " + " | ".join(cells) + " |")
        return "\n".join(lines) + "\n"

    def suggested_parameter_type(self) -> str:
        return "Table"

    def suggested_parameter_name(self) -> str:
        return "table"


@dataclass
class TextBlock:
    """Free text between two fence lines."""

    lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def render_text(self) -> str:
        body = [FENCE, *self.lines, FENCE]
        return "\n".join(f"{INDENT}{line}" for line in body) + "\n"

    def suggested_parameter_type(self) -> str:
        return "str"

    def suggested_parameter_name(self) -> str:
        return "text"
