"""Click CLI entry point for specsuite."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from specsuite import __version__
from specsuite.config import RunConfig, is_initialized, load_or_default, save_config
from specsuite.errors import ConfigError, SuiteLoadError
from specsuite.exporters.json_export import export_json, summary_to_json
from specsuite.models import IGNORE_TAG
from specsuite.reporters import ConsoleReporter, Reporter
from specsuite.runner import load_suites, run_suites
from specsuite.suite import Suite


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_all(ctx: click.Context, references: tuple[str, ...] | list[str]) -> list[Suite]:
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    suites: list[Suite] = []
    for reference in references:
        try:
            suites.extend(load_suites(reference))
        except SuiteLoadError as e:
            click.echo(f"Error: {e}")
            ctx.exit(1)
    return suites


def _parse_config_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    config: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="-D")
        config[key] = value
    return config


@click.group()
@click.version_option(version=__version__, prog_name="specsuite")
def cli() -> None:
    """specsuite: behavior-driven test suites with nested, named, tagged tests."""


@cli.command()
def init() -> None:
    """Write a default specsuite.yaml in the current directory."""
    project_root = Path.cwd()
    if is_initialized(project_root):
        click.echo("Warning: specsuite.yaml already exists. Leaving it unchanged.")
        return
    path = save_config(RunConfig(), project_root)
    click.echo("Initialized specsuite project.")
    click.echo(f"  Config:  {path}")


@cli.command(name="list")
@click.argument("suites", nargs=-1, required=True)
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text")
@click.pass_context
def list_tests(ctx: click.Context, suites: tuple[str, ...], fmt: str) -> None:
    """List the tests registered by SUITES (``module`` or ``module:Class``)."""
    loaded = _load_all(ctx, suites)
    if fmt == "json":
        click.echo(export_json(loaded))
        return

    def show(suite: Suite, depth: int) -> None:
        pad = "  " * depth
        click.echo(f"{pad}{suite.suite_name}:")
        tags = suite.tags
        for name in suite.test_names:
            test_tags = tags.get(name, frozenset())
            line = f"{pad}  {name}"
            visible = sorted(test_tags - {IGNORE_TAG})
            if visible:
                line += f" [{', '.join(visible)}]"
            if IGNORE_TAG in test_tags:
                line += " (ignored)"
            click.echo(line)
        for nested in suite.nested_suites:
            show(nested, depth + 1)

    for suite in loaded:
        show(suite, 0)


@cli.command()
@click.argument("suites", nargs=-1)
@click.option("-n", "--include", multiple=True, help="Run only tests with one of these tags")
@click.option("-l", "--exclude", multiple=True, help="Skip tests with any of these tags")
@click.option("-t", "--test", "test_name", default=None, help="Run only the test with this name")
@click.option("-D", "config_pairs", multiple=True, help="Config map entry KEY=VALUE")
@click.option("-P", "--parallel", type=click.IntRange(min=0), default=None, help="Suite threads")
@click.option("--no-color", is_flag=True, default=False, help="Plain output")
@click.option("--durations", is_flag=True, default=False, help="Show test durations")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text")
@click.option("--verbose", is_flag=True, default=False, help="Debug logging")
@click.pass_context
def run(
    ctx: click.Context,
    suites: tuple[str, ...],
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    test_name: str | None,
    config_pairs: tuple[str, ...],
    parallel: int | None,
    no_color: bool,
    durations: bool,
    fmt: str,
    verbose: bool,
) -> None:
    """Run SUITES, or the suites listed in specsuite.yaml."""
    _setup_logging(verbose)
    try:
        config = load_or_default(Path.cwd())
    except ConfigError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    references = list(suites) or config.suites
    if not references:
        click.echo("Error: No suites given. Pass SUITE arguments or list them in specsuite.yaml.")
        ctx.exit(1)
    loaded = _load_all(ctx, references)

    if test_name is not None:
        loaded = [s for s in loaded if test_name in s.test_names]
        if not loaded:
            click.echo(f'Error: No test in the given suites has name: "{test_name}"')
            ctx.exit(1)

    config_map = {**config.config, **_parse_config_pairs(config_pairs)}
    reporters: list[Reporter] = []
    if fmt == "text":
        reporters.append(
            ConsoleReporter(color=config.color and not no_color, show_durations=durations)
        )

    summary = run_suites(
        loaded,
        reporters,
        test_name=test_name,
        include=list(include) or config.include,
        exclude=list(exclude) or config.exclude,
        config_map=config_map,
        parallel=config.parallel if parallel is None else parallel,
    )
    if fmt == "json":
        click.echo(json.dumps(summary_to_json(summary), indent=2))
    if not summary.success:
        ctx.exit(1)
