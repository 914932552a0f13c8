"""Standard input decorator that announces blocking reads on a control stream."""

from __future__ import annotations

import builtins
import io
import os
import sys
import threading
import time
from collections.abc import Callable
from typing import Any, BinaryIO, TextIO

from loguru import logger

CONTROL_MARKER = "[[CTRL]]:stdin_req"
DEFAULT_INTERVAL_MS = 100


class NotifyingInputChannel(io.BufferedIOBase):
    """Binary reader that writes a throttled control marker before every read.

    Payload bytes, end-of-stream and errors come from the wrapped reader
    unchanged. The marker goes to ``control`` and is flushed before the read
    is issued, since the read may block indefinitely.
    """

    def __init__(
        self,
        raw: BinaryIO,
        control: TextIO,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        super().__init__()
        self._raw = raw
        self._control = control
        self._interval_ns = interval_ms * 1_000_000
        self._clock = clock
        self._last_emission_ns: int | None = None
        self._lock = threading.Lock()
        self.retained: object | None = None

    @property
    def raw(self) -> BinaryIO:
        return self._raw

    @property
    def name(self) -> Any:
        return getattr(self._raw, "name", "<stdin>")

    @property
    def closed(self) -> bool:
        return self._raw.closed

    def readable(self) -> bool:
        return self._raw.readable()

    def seekable(self) -> bool:
        return False

    def fileno(self) -> int:
        return self._raw.fileno()

    def isatty(self) -> bool:
        return self._raw.isatty()

    def read(self, size: int | None = -1) -> bytes:
        self.notify()
        return self._raw.read(size)

    def read1(self, size: int = -1) -> bytes:
        self.notify()
        read1 = getattr(self._raw, "read1", None)
        if read1 is None:
            return self._raw.read(size)
        return read1(size)

    def readinto(self, buffer: Any) -> int:
        self.notify()
        return self._raw.readinto(buffer)

    def readinto1(self, buffer: Any) -> int:
        self.notify()
        readinto1 = getattr(self._raw, "readinto1", None)
        if readinto1 is None:
            return self._raw.readinto(buffer)
        return readinto1(buffer)

    def readline(self, size: int | None = -1) -> bytes:
        self.notify()
        return self._raw.readline(size)

    def peek(self, size: int = 0) -> bytes:
        peek = getattr(self._raw, "peek", None)
        if peek is None:
            raise io.UnsupportedOperation("peek")
        self.notify()
        return peek(size)

    def close(self) -> None:
        if not self._raw.closed:
            self._raw.close()

    def notify(self) -> None:
        """Write the control marker unless one went out within the interval."""
        with self._lock:
            now = self._clock()
            last = self._last_emission_ns
            if last is not None and now - last <= self._interval_ns:
                return
            self._last_emission_ns = now
        try:
            self._control.write(f"{CONTROL_MARKER}\n")
            self._control.flush()
        except (OSError, ValueError):
            logger.debug("stdin.marker_write_failed")


def install_notifying_stdin(
    control: TextIO | None = None,
    *,
    interval_ms: int = DEFAULT_INTERVAL_MS,
) -> TextIO | None:
    """Replace ``sys.stdin`` with a text stream over a NotifyingInputChannel.

    Returns the previous ``sys.stdin`` so callers can restore it. The
    previous stream stays referenced by the channel: collecting it would
    close the binary buffer both streams share.

    On a terminal, ``input()`` reads through GNU readline on the file
    descriptor and never reaches ``sys.stdin``; ``builtins.input`` is then
    wrapped to send the marker itself.
    """

    previous = sys.stdin
    if previous is None:
        logger.debug("stdin.notify_skipped reason=no_stdin")
        return None
    buffer = getattr(previous, "buffer", None)
    if buffer is None:
        logger.debug("stdin.notify_skipped reason=text_only stream={!r}", previous)
        return previous

    channel = NotifyingInputChannel(
        buffer,
        control if control is not None else sys.stderr,
        interval_ms=interval_ms,
    )
    channel.retained = previous
    sys.stdin = io.TextIOWrapper(
        channel,
        encoding=getattr(previous, "encoding", None),
        errors=getattr(previous, "errors", None),
        # same newline handling CPython gives sys.stdin: untranslated on POSIX
        newline=None if os.name == "nt" else "\n",
        line_buffering=getattr(previous, "line_buffering", False),
    )
    if channel.isatty():
        _instrument_terminal_input(channel)
    logger.debug("stdin.notify_installed interval_ms={}", interval_ms)
    return previous


def _instrument_terminal_input(channel: NotifyingInputChannel) -> None:
    original_input = builtins.input

    def notifying_input(prompt: object = "") -> str:
        channel.notify()
        return original_input(prompt)

    builtins.input = notifying_input
    logger.debug("stdin.terminal_input_wrapped")
