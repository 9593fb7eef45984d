"""
Command-line interface for isolink.

Runs scenario files against a fresh linker and manages configuration.
"""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import ConfigManager, create_default_config_file
from .core.errors import LinkerError
from .engine.linker import Linker
from .reporting import LinkReport
from .scenario import ScenarioError, load_scenario
from .utils.logging_setup import log_operation, setup_logging


console = Console()
logger = logging.getLogger(__name__)


@click.group(name="isolink")
@click.version_option(__version__, prog_name="isolink")
def cli():
    """Isomorphic component linker."""
    pass


@cli.command(name="run")
@click.argument("scenario", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to linker config file"
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Emit the final snapshot as JSON"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging"
)
def run(scenario, config_path, as_json, verbose):
    """Build the components in SCENARIO and apply its operations."""
    linker_config = ConfigManager(Path(config_path) if config_path else None).load()
    errors = linker_config.errors()
    if errors:
        console.print("[red]Invalid configuration, aborting[/red]")
        for error in errors:
            console.print(f"  • {escape(error)}")
        raise click.exceptions.Exit(1)

    setup_logging(level="DEBUG" if verbose else linker_config.log_level)
    log_operation(logger, "run_scenario", scenario=str(scenario))

    try:
        parsed = load_scenario(scenario)
        linker = Linker(linker_config)
        results = parsed.run(linker)
    except ScenarioError as e:
        console.print(f"[red]Invalid scenario: {escape(str(e))}[/red]")
        raise click.exceptions.Exit(2)
    except LinkerError as e:
        console.print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        if e.details:
            console.print(f"[dim]{escape(repr(e.details))}[/dim]")
        raise click.exceptions.Exit(1)

    report = LinkReport(linker.snapshot(), console=console)
    if as_json:
        data = report.to_dict()
        data['operations'] = [result.to_dict() for result in results]
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        report.render(results)


@cli.group(name="config")
def config_group():
    """Manage linker configuration."""
    pass


@config_group.command(name="init")
@click.option(
    "--path",
    type=click.Path(dir_okay=False),
    default=ConfigManager.DEFAULT_CONFIG_FILE,
    help="Path for config file"
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path, force):
    """Write a default configuration file."""
    config_path = Path(path)

    if config_path.exists() and not force:
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return

    create_default_config_file(config_path)
    console.print(f"[green]✓ Created config file at {path}[/green]")


@config_group.command(name="show")
@click.option(
    "--path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
def config_show(path):
    """Display the effective configuration."""
    manager = ConfigManager(Path(path) if path else None)
    manager.display(manager.load())


@config_group.command(name="validate")
@click.option(
    "--path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config file"
)
def config_validate(path):
    """Validate a configuration file."""
    config = ConfigManager(Path(path) if path else None).load()
    errors = config.errors()

    if not errors:
        console.print("[green]✓ Configuration is valid[/green]")
        return

    console.print("[red]✗ Configuration has validation errors[/red]")
    for error in errors:
        console.print(f"  • {escape(error)}")
    raise click.exceptions.Exit(1)


def main():
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
