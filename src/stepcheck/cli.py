"""Click CLI entry point for stepcheck."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from stepcheck import __version__
from stepcheck.config import (
    OUTPUT_FORMATS,
    RunnerConfig,
    is_initialized,
    load_or_default,
    save_config,
)
from stepcheck.document import SpecificationDocument
from stepcheck.logging import configure_logging
from stepcheck.registry import StepRegistry, load_step_module
from stepcheck.reporter import PlainTextReporter

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="stepcheck")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity")
@click.option("--quiet", is_flag=True, default=False, help="Only log errors")
@click.option("--no-color", is_flag=True, default=False, help="Disable colored logs")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool, no_color: bool) -> None:
    """Run plain-text Given/When/Then scenarios against step definitions."""
    ctx.ensure_object(dict)
    configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color, stream=sys.stderr)


@cli.command()
def init() -> None:
    """Initialize a project for stepcheck."""
    project_root = Path.cwd()
    if is_initialized(project_root):
        click.echo("Warning: Project is already initialized. Existing config preserved.")
        return

    config = RunnerConfig()
    specs_dir = project_root / config.spec_dir
    specs_dir.mkdir(exist_ok=True)
    path = save_config(config, project_root)
    click.echo("Initialized stepcheck project.")
    click.echo(f"  Created: {specs_dir}/")
    click.echo(f"  Config:  {path}")


def _collect_spec_files(paths: tuple[str, ...], config: RunnerConfig) -> list[Path]:
    roots = [Path(p) for p in paths] or [Path.cwd() / config.spec_dir]
    files: list[Path] = []
    for root in roots:
        if root.is_dir():
            files.extend(sorted(root.glob(config.pattern)))
        elif root.is_file():
            files.append(root)
    return files


def _build_registry(modules: list[str]) -> StepRegistry:
    registry = StepRegistry()
    for ref in modules:
        registry.add_module(load_step_module(ref))
    logger.info("Loaded %d step definition(s)", len(registry))
    return registry


def _verify_files(
    ctx: click.Context, paths: tuple[str, ...], steps: tuple[str, ...]
) -> tuple[list[SpecificationDocument], RunnerConfig]:
    """Load, bind and verify each spec file. Exits on usage errors."""
    project_root = Path.cwd()
    try:
        config = load_or_default(project_root)
    except ValueError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    files = _collect_spec_files(paths, config)
    if not files:
        click.echo("Error: No spec files found.")
        ctx.exit(1)

    try:
        registry = _build_registry([*config.step_modules, *steps])
    except (ImportError, ValueError) as e:
        click.echo(f"Error: Could not load step definitions: {e}")
        ctx.exit(1)

    documents: list[SpecificationDocument] = []
    for spec_file in files:
        document = SpecificationDocument(registry=registry)
        document.load_file(spec_file)
        document.verify()
        logger.info("%s: %s", spec_file, "passed" if document.passed else "failed")
        documents.append(document)
    return documents, config


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
@click.option("--steps", "-s", multiple=True, help="Step module (dotted name or .py path)")
@click.option("--format", "fmt", type=click.Choice(OUTPUT_FORMATS), default=None)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None)
@click.pass_context
def run(
    ctx: click.Context,
    paths: tuple[str, ...],
    steps: tuple[str, ...],
    fmt: str | None,
    output: str | None,
) -> None:
    """Verify spec files and report the results."""
    from stepcheck.exporters.json_export import export_json
    from stepcheck.exporters.yaml_export import export_yaml

    documents, config = _verify_files(ctx, paths, steps)
    fmt = fmt or config.output_format

    out = open(output, "w") if output else None
    try:
        if fmt == "json":
            click.echo(export_json(documents), file=out)
        elif fmt == "yaml":
            click.echo(export_yaml(documents), file=out, nl=False)
        else:
            reporter = PlainTextReporter(out)
            for document in documents:
                reporter.report_document(document)
    finally:
        if out is not None:
            out.close()

    failed = [d for d in documents if not d.passed]
    if failed:
        click.echo(f"\n{len(failed)} of {len(documents)} spec file(s) failed.", err=True)
        ctx.exit(1)


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True))
@click.option("--steps", "-s", multiple=True, help="Step module (dotted name or .py path)")
@click.pass_context
def stubs(ctx: click.Context, paths: tuple[str, ...], steps: tuple[str, ...]) -> None:
    """Print stub code for every undefined step."""
    documents, _ = _verify_files(ctx, paths, steps)

    seen: set[str] = set()
    undefined = []
    for document in documents:
        for step in document.undefined_steps():
            if step.key not in seen:
                seen.add(step.key)
                undefined.append(step)

    if not undefined:
        click.echo("No undefined steps.")
        return
    PlainTextReporter().report_undefined_steps(undefined)
