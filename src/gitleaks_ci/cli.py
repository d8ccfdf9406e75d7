"""Command-line interface for gitleaks-ci."""

from __future__ import annotations

import logging
import traceback
from typing import Annotated

import typer
from pydantic import ValidationError

from gitleaks_ci.config import load_settings
from gitleaks_ci.errors import GitleaksCIError
from gitleaks_ci.log import console, setup_logging
from gitleaks_ci.runner import main

logger = logging.getLogger("gitleaks_ci.cli")

app = typer.Typer(
    name="gitleaks-ci",
    help="Scan pushes and pull requests for secrets with gitleaks in GitHub Actions.",
    no_args_is_help=True,
)


@app.command()
def run(
    debug: Annotated[
        bool, typer.Option("--debug", help="Show debug logs when running outside Actions")
    ] = False,
) -> None:
    """Install gitleaks, scan the triggering commits and report findings.

    \b
    Exit codes:
      0 - No leaks detected
      1 - Leaks detected, or the run failed
      * - Any other gitleaks exit code is passed through
    """
    try:
        settings = load_settings()
    except ValidationError as e:
        console.print("[red]Error:[/red] Invalid configuration:")
        console.print(str(e), markup=False)
        raise typer.Exit(code=1) from e

    setup_logging(github_actions=settings.github_actions, debug=debug)

    try:
        exit_code = main(settings, console=console)
    except GitleaksCIError as e:
        logger.error("ERROR: %s", e)
        logger.debug(traceback.format_exc())
        raise typer.Exit(code=1) from e
    except Exception as e:
        logger.error("Unexpected error: %s", e)
        logger.debug(traceback.format_exc())
        raise typer.Exit(code=1) from e

    if exit_code != 0:
        raise typer.Exit(code=exit_code)


@app.command()
def version() -> None:
    """Show gitleaks-ci version."""
    from gitleaks_ci import __version__

    console.print(f"gitleaks-ci [bold green]{__version__}[/bold green]")


if __name__ == "__main__":
    app()
