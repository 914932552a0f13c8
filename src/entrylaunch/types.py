"""Launch request and outcome types."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from entrylaunch.errors import UsageError


class OutcomeKind(StrEnum):
    """Every way one launch can end."""

    SUCCESS = "success"
    USAGE = "usage"
    USER_CODE_FAILURE = "user_code_failure"
    RESOLUTION_FAILURE = "resolution_failure"
    SHAPE_MISMATCH = "shape_mismatch"
    ACCESS_FAILURE = "access_failure"
    UNEXPECTED_FAILURE = "unexpected_failure"


_EXIT_CODES: dict[OutcomeKind, int] = {
    OutcomeKind.SUCCESS: 0,
    OutcomeKind.USER_CODE_FAILURE: 1,
    OutcomeKind.ACCESS_FAILURE: 1,
    OutcomeKind.UNEXPECTED_FAILURE: 1,
    OutcomeKind.USAGE: 2,
    OutcomeKind.RESOLUTION_FAILURE: 2,
    OutcomeKind.SHAPE_MISMATCH: 2,
}


def exit_code_for(kind: OutcomeKind) -> int:
    """Map an outcome kind to the process exit status."""
    return _EXIT_CODES[kind]


@dataclass(frozen=True)
class InvocationRequest:
    """Entry name plus the arguments forwarded verbatim to the entry function."""

    entry_name: str
    user_args: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.entry_name.strip():
            raise UsageError(self.entry_name, "entry name must not be empty")

    @classmethod
    def from_argv(cls, argv: Sequence[str]) -> InvocationRequest | None:
        """Split launch arguments; returns None when nothing was given."""
        if not argv:
            return None
        return cls(entry_name=argv[0], user_args=tuple(argv[1:]))


@dataclass(frozen=True)
class InvocationOutcome:
    """Result of one launch, produced exactly once per process run."""

    kind: OutcomeKind
    cause: BaseException | None = None
    detail: str | None = None

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.kind)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS
