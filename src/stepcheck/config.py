"""Configuration management for stepcheck projects."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

STEPCHECK_DIR = ".stepcheck"
CONFIG_FILE = "config.json"
OUTPUT_FORMATS = ("text", "json", "yaml")


@dataclass
class RunnerConfig:
    """Project configuration for stepcheck."""

    version: str = "0.1.0"
    step_modules: list[str] = field(default_factory=list)
    spec_dir: str = "specs"
    pattern: str = "*.feature"
    output_format: str = "text"


def _config_path(project_root: Path) -> Path:
    return project_root / STEPCHECK_DIR / CONFIG_FILE


def save_config(config: RunnerConfig, project_root: Path) -> Path:
    """Save project config to .stepcheck/config.json. Returns the config path."""
    stepcheck_dir = project_root / STEPCHECK_DIR
    stepcheck_dir.mkdir(parents=True, exist_ok=True)
    path = _config_path(project_root)
    data = {
        "version": config.version,
        "step_modules": config.step_modules,
        "spec_dir": config.spec_dir,
        "pattern": config.pattern,
        "output_format": config.output_format,
    }
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


def load_config(project_root: Path) -> RunnerConfig:
    """Load project config from .stepcheck/config.json."""
    path = _config_path(project_root)
    if not path.exists():
        raise FileNotFoundError(f"No config found at {path}")
    data = json.loads(path.read_text())
    output_format = data.get("output_format", "text")
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format in {path}: {output_format}")
    return RunnerConfig(
        version=data.get("version", "0.1.0"),
        step_modules=data.get("step_modules", []),
        spec_dir=data.get("spec_dir", "specs"),
        pattern=data.get("pattern", "*.feature"),
        output_format=output_format,
    )


def is_initialized(project_root: Path) -> bool:
    """Check if the project has a stepcheck config."""
    return _config_path(project_root).exists()


def load_or_default(project_root: Path) -> RunnerConfig:
    """Load the project config, falling back to defaults when there is none."""
    if not is_initialized(project_root):
        return RunnerConfig()
    return load_config(project_root)
