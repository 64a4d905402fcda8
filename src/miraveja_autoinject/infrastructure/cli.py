"""
miraveja-autoinject CLI

Generates the auto-inject registration routine for a source tree.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from miraveja_autoinject.application import AutoInjectGenerator
from miraveja_autoinject.domain import AutoInjectException, GeneratorOptions, SourceParseError
from miraveja_autoinject.infrastructure.config import AutoInjectSettings
from miraveja_autoinject.infrastructure.python_host import Compilation, ProjectLoader
from miraveja_autoinject.infrastructure.writer import SourceWriter

app = typer.Typer(help="miraveja-autoinject: generate registrations for classes marked with Injectable.")

EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2


def _configure_logging(settings: AutoInjectSettings, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_settings(namespace: Optional[str]) -> AutoInjectSettings:
    try:
        settings = AutoInjectSettings()
    except ValidationError as e:
        typer.secho(f"Invalid AUTOINJECT_* settings: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_INVALID_INPUT)
    if namespace is not None:
        settings = settings.model_copy(update={"namespace": namespace})
    return settings


def _generator_options(settings: AutoInjectSettings) -> GeneratorOptions:
    try:
        return settings.to_generator_options()
    except ValidationError as e:
        typer.secho(f"Invalid generator options: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_INVALID_INPUT)


def _load_compilation(source_dir: Path, exclude: List[str]) -> Compilation:
    try:
        return ProjectLoader(source_dir, exclude=exclude).load()
    except (FileNotFoundError, SourceParseError) as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_INVALID_INPUT)


@app.command()
def generate(
    source_dir: Optional[Path] = typer.Argument(None, help="Source root to scan (default: AUTOINJECT_SOURCE_DIR or src)."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Where generated packages are written."),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Package of the generated modules."),
    check: bool = typer.Option(False, "--check", help="Fail if generated files are missing or out of date."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print generated modules instead of writing them."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Generate the marker and registration modules for SOURCE_DIR."""
    settings = _load_settings(namespace)
    _configure_logging(settings, verbose)
    options = _generator_options(settings)

    root = source_dir or settings.source_dir
    compilation = _load_compilation(root, settings.exclude)
    result = AutoInjectGenerator(options).run(compilation)

    for diagnostic in result.diagnostics:
        typer.secho(str(diagnostic), fg=typer.colors.RED, err=True)

    writer = SourceWriter(output_dir or settings.output_dir or root)
    obsolete = [options.registration_module] if result.get_source(options.registration_module) is None else []
    if dry_run:
        for source in result.generated_sources:
            typer.secho(f"# {writer.path_for(source)}", fg=typer.colors.CYAN)
            typer.echo(source.text)
    elif check:
        stale = writer.stale(result.generated_sources, obsolete)
        for path in stale:
            typer.secho(f"Out of date: {path}", fg=typer.colors.YELLOW, err=True)
        if stale:
            raise typer.Exit(EXIT_FAILED)
        typer.echo("Generated files are up to date.")
    else:
        for path in writer.write(result.generated_sources):
            typer.secho(f"Wrote {path}", fg=typer.colors.GREEN)
        for path in writer.remove(obsolete):
            typer.secho(f"Removed {path}", fg=typer.colors.GREEN)

    if result.has_errors:
        raise typer.Exit(EXIT_FAILED)


@app.command()
def inspect(
    source_dir: Optional[Path] = typer.Argument(None, help="Source root to scan (default: AUTOINJECT_SOURCE_DIR or src)."),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Package of the generated modules."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """List the registrations that would be generated for SOURCE_DIR."""
    settings = _load_settings(namespace)
    _configure_logging(settings, verbose)
    options = _generator_options(settings)

    compilation = _load_compilation(source_dir or settings.source_dir, settings.exclude)
    try:
        fragments = AutoInjectGenerator(options).plan(compilation)
    except AutoInjectException as e:
        typer.secho(f"Failed to generate injection code: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_FAILED)

    if not fragments:
        typer.echo("No classes marked with Injectable.")
        return
    for fragment in fragments:
        line = f"{fragment.implementation.qualified_name} ({fragment.lifetime.value})"
        if fragment.abstraction is not None:
            line += f" as {fragment.abstraction.qualified_name}"
        typer.echo(line)


if __name__ == "__main__":
    app()
