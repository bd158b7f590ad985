"""YAML export of verification results."""

from __future__ import annotations

from typing import TYPE_CHECKING

import yaml

from stepcheck.exporters.json_export import results_to_dict

if TYPE_CHECKING:
    from stepcheck.document import SpecificationDocument


def export_yaml(documents: list[SpecificationDocument]) -> str:
    """Export verified documents as a YAML list."""
    return yaml.safe_dump([results_to_dict(d) for d in documents], sort_keys=False)
