"""Design CLI commands: validate and paths."""

import importlib.util
from pathlib import Path

import click

from apiforge.config import DesignConfig
from apiforge.eval.diagnostics import DiagnosticKind
from apiforge.eval.pipeline import DesignFn, DesignResult, run_design


def _load_config(config_path: Path | None) -> DesignConfig:
    try:
        return DesignConfig.load(config_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


def _load_design(design_file: Path, entry: str) -> DesignFn:
    """Import a design file and return its entry callable."""
    module_name = f"apiforge_design_{design_file.stem}"
    spec = importlib.util.spec_from_file_location(module_name, design_file)
    if spec is None or spec.loader is None:
        click.echo(f"Error: cannot import {design_file}", err=True)
        raise SystemExit(1)
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        click.echo(f"Error: failed to import {design_file}: {e}", err=True)
        raise SystemExit(1)

    fn = getattr(module, entry, None)
    if not callable(fn):
        click.echo(f"Error: {design_file} does not define a callable '{entry}'", err=True)
        raise SystemExit(1)
    return fn


def _evaluate(design_file: Path, entry: str, config_path: Path | None) -> DesignResult:
    config = _load_config(config_path)
    return run_design(_load_design(design_file, entry), config=config)


_design_file = click.argument(
    "design_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
_entry = click.option(
    "--entry",
    default="design",
    show_default=True,
    help="Name of the design callable in the file.",
)
_config = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with an 'apiforge' settings section.",
)


@click.group()
def design():
    """Design commands."""
    pass


@design.command()
@_design_file
@_entry
@_config
def validate(design_file: Path, entry: str, config_path: Path | None):
    """Evaluate a design file and report every problem found."""
    result = _evaluate(design_file, entry, config_path)

    for diag in result.diagnostics:
        colour = "yellow" if diag.kind is DiagnosticKind.VALIDATION else "red"
        click.echo(click.style(str(diag), fg=colour))

    if not result.ok:
        click.echo(
            click.style(
                f"\n{len(result.diagnostics)} problem(s) found"
                f" ({len(result.structural)} structural,"
                f" {len(result.validation)} validation)",
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    root = result.root
    click.echo(f"API {root.api.name}: {len(root.services)} service(s)")
    for name, svc in root.http.services.items():
        click.echo(f"  ✓ {name} ({len(svc.endpoints)} endpoints)")

    click.echo(click.style("\nDesign is valid.", fg="green", bold=True))


@design.command("paths")
@_design_file
@_entry
@_config
def paths_cmd(design_file: Path, entry: str, config_path: Path | None):
    """Show the resolved base paths and URI template of each service."""
    result = _evaluate(design_file, entry, config_path)

    if result.structural or result.fatal:
        for diag in result.structural + result.fatal:
            click.echo(click.style(str(diag), fg="red"), err=True)
        raise SystemExit(1)

    services = result.root.http.services
    if not services:
        click.echo("No services defined.")
        return

    for name, svc in services.items():
        click.echo(click.style(name, bold=True))
        for full_path in svc.full_paths():
            click.echo(f"  path: {full_path}")
        template = svc.uri_template()
        if template:
            click.echo(f"  href: {template}")
        schemes = svc.schemes()
        if schemes:
            click.echo(f"  schemes: {', '.join(schemes)}")
