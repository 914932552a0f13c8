from __future__ import annotations

import importlib
import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from typing import TypeAlias

ModuleWriter: TypeAlias = Callable[[str, str], Path]


@pytest.fixture(autouse=True)
def _isolate_interpreter_state(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.setattr(sys, "argv", list(sys.argv))
    for name in ("ENTRYLAUNCH_ENTRY_FUNCTION", "ENTRYLAUNCH_NOTIFY_STDIN", "ENTRYLAUNCH_NOTIFY_INTERVAL_MS"):
        monkeypatch.delenv(name, raising=False)
    yield
    for name, module in list(sys.modules.items()):
        module_file = getattr(module, "__dict__", {}).get("__file__")
        if module_file and Path(module_file).resolve().is_relative_to(tmp_path.resolve()):
            sys.modules.pop(name, None)


@pytest.fixture
def write_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ModuleWriter:
    """Write ``<name>.py`` under tmp_path and make it importable."""

    monkeypatch.syspath_prepend(str(tmp_path))

    def _write(name: str, source: str) -> Path:
        path = tmp_path / f"{name}.py"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        importlib.invalidate_caches()
        return path

    return _write
