"""entrylaunch - call a named entry function, announce stdin reads to a supervisor."""

from .invoker import EntryInvoker
from .stdin_notify import CONTROL_MARKER, NotifyingInputChannel, install_notifying_stdin
from .types import InvocationOutcome, InvocationRequest, OutcomeKind, exit_code_for

__version__ = "0.1.0"

__all__ = [
    "CONTROL_MARKER",
    "EntryInvoker",
    "InvocationOutcome",
    "InvocationRequest",
    "NotifyingInputChannel",
    "OutcomeKind",
    "exit_code_for",
    "install_notifying_stdin",
]
