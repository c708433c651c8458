"""gitwizard command line: run a git wizard interactively or with a partial state."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from commands import build_registry
from commands.context import GitWizardHost
from commands.git import discover_repositories
from wizard.deferred import Deferred
from wizard.driver import WizardDriver, WizardRun
from wizard.errors import InvalidStateError, UnknownCommandError, WizardCancelledError
from wizard.logging_config import setup_logging
from wizard.registry import WizardInvocation
from wizard.render import QuestionaryRenderer, QuestionaryUI
from wizard.settings import get_config_dir, load_settings

logger = logging.getLogger(__name__)

EXIT_COMPLETED = 0  # Terminal action ran
EXIT_CANCELLED = 1  # User cancelled or the wizard aborted
EXIT_INVALID = 2  # Unknown command, bad --state, no repository

app = typer.Typer(
    name="gitwizard",
    help="Guided, multi-step git operations",
    no_args_is_help=True,
)


class InvocationArgs(BaseModel):
    """Validated `run` arguments."""

    command: str | None = None
    state: dict[str, Any] = Field(default_factory=dict)
    confirm: bool | None = None


def _parse_args(command: str | None, state: str | None, confirm: bool | None) -> InvocationArgs:
    try:
        raw_state = json.loads(state) if state else {}
        return InvocationArgs(command=command, state=raw_state, confirm=confirm)
    except (json.JSONDecodeError, ValidationError) as exc:
        typer.echo(f"Invalid --state: {exc}", err=True)
        raise typer.Exit(EXIT_INVALID) from exc


async def _run(args: InvocationArgs, repo_paths: list[Path], settings: dict[str, Any]) -> int:
    repos = await discover_repositories(repo_paths)
    if not repos:
        typer.echo("No git repository found.", err=True)
        return EXIT_INVALID

    host = GitWizardHost(registry=build_registry(), settings=settings, ui=QuestionaryUI(), repos=repos)
    driver = WizardDriver(host, QuestionaryRenderer())

    result: Deferred[Any] = Deferred()
    invocation = None
    if args.command is not None:
        invocation = WizardInvocation(args.command, state=args.state, confirm=args.confirm, result=result)

    try:
        run: WizardRun | None = await driver.execute(invocation)
    except (UnknownCommandError, InvalidStateError) as exc:
        typer.echo(str(exc), err=True)
        return EXIT_INVALID

    if run is None or not run.completed:
        typer.echo("Cancelled." if run is None or run.cancelled else "Nothing was done.")
        return EXIT_CANCELLED

    if invocation is not None and not result.pending:
        try:
            value = await result.wait()
        except WizardCancelledError:
            return EXIT_CANCELLED
        if isinstance(value, BaseModel):
            typer.echo(value.model_dump_json())
        elif value is not None:
            typer.echo(json.dumps(value, default=str))
    return EXIT_COMPLETED


@app.command("run")
def run_cmd(
    command: str | None = typer.Argument(None, help="Command key or label; omit to pick from a menu."),
    repo: list[Path] | None = typer.Option(
        None,
        "--repo",
        help="Repository path; repeat for several (defaults to current working directory).",
    ),
    state: str | None = typer.Option(None, "--state", help="JSON object with known state fields."),
    confirm: bool | None = typer.Option(None, "--confirm/--no-confirm", help="Force or skip the confirmation step."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log to stderr at DEBUG level."),
) -> None:
    """Run a wizard."""
    load_dotenv()
    settings = load_settings()
    log_path = setup_logging(get_config_dir(), settings, verbose=verbose)
    logger.debug("Logging to %s", log_path)

    args = _parse_args(command, state, confirm)
    try:
        code = asyncio.run(_run(args, repo or [Path.cwd()], settings))
    except KeyboardInterrupt:
        typer.echo("\nCancelled.")
        code = EXIT_CANCELLED
    raise typer.Exit(code)


@app.command("list")
def list_cmd() -> None:
    """List the available wizards."""
    for command in build_registry():
        typer.echo(f"{command.key:<18} {command.title:<18} {command.description}")


def main() -> None:
    app()
