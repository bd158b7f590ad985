"""JSON export of verification results."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from stepcheck.stubs import render_stub

if TYPE_CHECKING:
    from stepcheck.document import SpecificationDocument


def results_to_dict(document: SpecificationDocument) -> dict[str, Any]:
    """Convert a verified document into plain data."""
    scenarios = []
    for scenario in document.scenarios:
        scenarios.append({
            "name": scenario.name,
            "line": scenario.line_number,
            "result": scenario.result.value if scenario.result else None,
            "failure": scenario.failure.message if scenario.failure else None,
            "steps": [
                {
                    "text": step.text,
                    "kind": step.kind.value,
                    "line": step.line_number,
                    "result": step.result.value if step.result else None,
                }
                for step in scenario.steps
            ],
        })
    return {
        "name": document.name,
        "passed": document.passed,
        "scenarios": scenarios,
        "undefined_steps": [
            {"text": step.text, "stub": render_stub(step)}
            for step in document.undefined_steps()
        ],
    }


def export_json(documents: list[SpecificationDocument], indent: int = 2) -> str:
    """Export verified documents as a JSON array."""
    return json.dumps([results_to_dict(d) for d in documents], indent=indent)
