"""Resolve and call one entry function, classifying every way it can end."""

from __future__ import annotations

import sys
import traceback

import typer
from loguru import logger

from entrylaunch.config import Settings
from entrylaunch.errors import (
    EntryAccessError,
    EntryFunctionNotFoundError,
    EntryShapeError,
    UnitNotFoundError,
)
from entrylaunch.resolver import ResolvedEntryPoint, activate_scope, resolve_entry
from entrylaunch.types import InvocationOutcome, InvocationRequest, OutcomeKind

USAGE = "Usage: entrylaunch <module[:object]> [args...]"


class EntryInvoker:
    """Performs exactly one resolution and one call per launch."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    def launch(self, request: InvocationRequest) -> InvocationOutcome:
        """Resolve ``request.entry_name`` and call its entry function with the user arguments.

        Diagnostics for failures are written to stderr and both standard
        streams are flushed before returning.
        ``SystemExit`` and ``KeyboardInterrupt`` raised by user code propagate.
        """

        outcome = self._resolve_and_invoke(request)
        if not outcome.ok:
            flush_std_streams()
        logger.debug("launch.finished entry={} outcome={}", request.entry_name, outcome.kind)
        return outcome

    def _resolve_and_invoke(self, request: InvocationRequest) -> InvocationOutcome:
        name = request.entry_name
        function_name = self.settings.entry_function
        try:
            entry = resolve_entry(
                name,
                entry_function=function_name,
                search_path=self.settings.search_path,
            )
            activate_scope(entry, request.user_args)
        except UnitNotFoundError as exc:
            _echo(f"Error: Could not find class '{name}'.")
            _print_cause(exc)
            return InvocationOutcome(OutcomeKind.RESOLUTION_FAILURE, cause=exc, detail=str(exc))
        except EntryFunctionNotFoundError as exc:
            _echo(f"Error: '{name}' does not declare a method:")
            _echo(f"  def {function_name}(argv: list[str]) -> None")
            _print_cause(exc)
            return InvocationOutcome(OutcomeKind.RESOLUTION_FAILURE, cause=exc, detail=str(exc))
        except EntryShapeError as exc:
            _echo(f"Error: {name}.{function_name}(argv) must be static.")
            return InvocationOutcome(OutcomeKind.SHAPE_MISMATCH, cause=exc, detail=str(exc))
        except EntryAccessError as exc:
            _echo(f"Unable to call {function_name}(argv) on {name}: {exc}")
            _print_traceback(exc.__cause__ or exc)
            return InvocationOutcome(OutcomeKind.ACCESS_FAILURE, cause=exc, detail=str(exc))
        except Exception as exc:
            _echo(f"Unexpected error while launching {name}:")
            _print_traceback(exc)
            return InvocationOutcome(OutcomeKind.UNEXPECTED_FAILURE, cause=exc, detail=str(exc))

        return self._invoke(entry, request)

    def _invoke(self, entry: ResolvedEntryPoint, request: InvocationRequest) -> InvocationOutcome:
        logger.debug("launch.invoke entry={} args={}", entry.entry_name, len(request.user_args))
        try:
            result = entry.function(list(request.user_args))
        except (SystemExit, KeyboardInterrupt):
            raise
        except BaseException as exc:
            # skip this frame so the trace starts in user code
            tb = exc.__traceback__.tb_next if exc.__traceback__ is not None else None
            traceback.print_exception(type(exc), exc, tb, file=sys.stderr)
            return InvocationOutcome(OutcomeKind.USER_CODE_FAILURE, cause=exc, detail=str(exc))

        if result is not None:
            logger.debug("launch.return_ignored entry={} type={}", entry.entry_name, type(result).__name__)
        return InvocationOutcome(OutcomeKind.SUCCESS)


def _echo(message: str) -> None:
    typer.echo(message, err=True)


def _print_cause(exc: BaseException) -> None:
    cause = exc.__cause__ or exc
    for line in traceback.format_exception_only(type(cause), cause):
        _echo(f"  {line.rstrip()}")


def _print_traceback(exc: BaseException) -> None:
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)


def flush_std_streams() -> None:
    """Flush stdout and stderr so nothing buffered is lost on exit."""
    for stream in (sys.stdout, sys.stderr):
        if stream is None:
            continue
        try:
            stream.flush()
        except (OSError, ValueError):
            logger.debug("launch.flush_failed stream={!r}", stream)
