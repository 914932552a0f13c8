"""entrylaunch CLI: ``entrylaunch <module[:object]> [args...]``."""

from __future__ import annotations

import sys
from typing import NoReturn

import typer
from pydantic import ValidationError

from entrylaunch.config import load_settings
from entrylaunch.errors import UsageError
from entrylaunch.invoker import USAGE, EntryInvoker, flush_std_streams
from entrylaunch.logging_utils import configure_logging
from entrylaunch.stdin_notify import install_notifying_stdin
from entrylaunch.types import InvocationRequest, OutcomeKind, exit_code_for

app = typer.Typer(
    name="entrylaunch",
    help="Call main(argv) of a named module and report blocking stdin reads on stderr.",
    add_completion=False,
)

_PASSTHROUGH = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}


def _usage_exit() -> NoReturn:
    typer.echo(USAGE, err=True)
    flush_std_streams()
    raise typer.Exit(exit_code_for(OutcomeKind.USAGE))


@app.command(context_settings=_PASSTHROUGH)
def launch(
    ctx: typer.Context,
    entry: str | None = typer.Argument(
        None,
        help="Module name, module:object or path/to/file.py; remaining arguments go to the entry function",
        show_default=False,
    ),
) -> None:
    """Launch one entry function and exit with its status."""

    argv = [] if entry is None else [entry, *ctx.args]
    try:
        request = InvocationRequest.from_argv(argv)
    except UsageError:
        request = None
    if request is None:
        _usage_exit()

    try:
        settings = load_settings()
    except ValidationError as exc:
        typer.echo(f"Error: invalid launcher configuration:\n{exc}", err=True)
        flush_std_streams()
        raise typer.Exit(exit_code_for(OutcomeKind.USAGE)) from exc
    configure_logging(settings.log_level, profile=settings.log_profile)

    if settings.notify_stdin:
        install_notifying_stdin(sys.stderr, interval_ms=settings.notify_interval_ms)

    outcome = EntryInvoker(settings).launch(request)
    if not outcome.ok:
        raise typer.Exit(outcome.exit_code)
