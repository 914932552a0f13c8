"""Entry unit resolution: find the named module or object and its entry function."""

from __future__ import annotations

import hashlib
import importlib
import inspect
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from importlib import util as importlib_util
from pathlib import Path
from types import ModuleType
from typing import Any, TypeAlias

from loguru import logger

from entrylaunch.errors import (
    EntryAccessError,
    EntryFunctionNotFoundError,
    EntryShapeError,
    UnitNotFoundError,
)

DEFAULT_ENTRY_FUNCTION = "main"
SOURCE_SUFFIX = ".py"

EntryFunction: TypeAlias = Callable[[list[str]], Any]


@dataclass(frozen=True)
class ResolvedEntryPoint:
    """A located unit and the entry function discovered on it."""

    entry_name: str
    module: ModuleType
    unit: object
    function: EntryFunction
    function_name: str

    @property
    def origin(self) -> Path | None:
        module_file = getattr(self.module, "__file__", None)
        if not module_file:
            return None
        return Path(module_file).resolve()


def split_entry_name(entry_name: str) -> tuple[str, str | None]:
    """Split ``target[:attr.path]``; a trailing part that is not a dotted name stays in the target."""

    target, sep, attr_path = entry_name.rpartition(":")
    if not sep or not target or not _is_dotted_name(attr_path):
        return entry_name, None
    return target, attr_path


def resolve_entry(
    entry_name: str,
    *,
    entry_function: str = DEFAULT_ENTRY_FUNCTION,
    search_path: Iterable[Path] = (),
) -> ResolvedEntryPoint:
    """Locate the unit named by ``entry_name`` and validate its entry function."""

    prepend_search_path(search_path)
    target, attr_path = split_entry_name(entry_name)
    module = _load_target(entry_name, target)
    owner: object = None
    unit: object = module
    if attr_path is not None:
        owner, unit = _walk_attributes(entry_name, module, attr_path.split("."))

    if attr_path is not None and inspect.isroutine(unit):
        function_name = attr_path.rsplit(".", 1)[-1]
        _check_no_receiver(entry_name, owner, function_name)
        function = unit
    else:
        function = _lookup_entry_function(entry_name, unit, entry_function)
        function_name = entry_function

    _check_signature(entry_name, function, function_name)
    logger.debug("resolver.resolved entry={} module={} function={}", entry_name, module.__name__, function_name)
    return ResolvedEntryPoint(
        entry_name=entry_name,
        module=module,
        unit=unit,
        function=function,
        function_name=function_name,
    )


def activate_scope(entry: ResolvedEntryPoint, user_args: Sequence[str]) -> None:
    """Point ``sys.argv`` and the import path at the user's code."""

    origin = entry.origin
    sys.argv = [str(origin) if origin is not None else entry.entry_name, *user_args]
    if origin is not None and _is_file_target(split_entry_name(entry.entry_name)[0]):
        _prepend_path(origin.parent)


def prepend_search_path(paths: Iterable[Path]) -> None:
    for path in reversed(list(paths)):
        _prepend_path(path)


def _prepend_path(path: Path) -> None:
    location = str(path.resolve())
    if location not in sys.path:
        sys.path.insert(0, location)


def _load_target(entry_name: str, target: str) -> ModuleType:
    if _is_file_target(target):
        return _load_module_from_file(entry_name, Path(target))
    if target.startswith(".") or not _is_dotted_name(target):
        raise UnitNotFoundError(entry_name, f"{target!r} is not an importable module name")
    try:
        return importlib.import_module(target)
    except ModuleNotFoundError as exc:
        # only the target (or one of its parents) missing counts as not found
        if exc.name and (target == exc.name or target.startswith(f"{exc.name}.")):
            raise UnitNotFoundError(entry_name, str(exc)) from exc
        raise


def _load_module_from_file(entry_name: str, source_file: Path) -> ModuleType:
    if not source_file.is_file():
        raise UnitNotFoundError(entry_name, f"no such file: {source_file}")

    source_file = source_file.resolve()
    module_name = _module_name_for_file(source_file)
    spec = importlib_util.spec_from_file_location(module_name, source_file)
    if spec is None or spec.loader is None:
        raise UnitNotFoundError(entry_name, f"cannot load {source_file} as a python module")

    # sibling imports at module top level resolve against the user's directory
    _prepend_path(source_file.parent)
    module = importlib_util.module_from_spec(spec)
    sys.modules.pop(module_name, None)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


def _module_name_for_file(source_file: Path) -> str:
    digest = hashlib.sha256(str(source_file).encode("utf-8")).hexdigest()[:12]
    normalized_name = "".join(ch if ch.isalnum() else "_" for ch in source_file.stem.lower())
    return f"entrylaunch_unit_{normalized_name}_{digest}"


def _walk_attributes(entry_name: str, module: ModuleType, parts: list[str]) -> tuple[object, object]:
    owner: object = module
    current: object = module
    for index, part in enumerate(parts):
        owner = current
        try:
            current = getattr(current, part)
        except AttributeError as exc:
            owner_name = ".".join([module.__name__, *parts[:index]])
            raise UnitNotFoundError(entry_name, f"{owner_name} has no attribute {part!r}") from exc
    return owner, current


def _lookup_entry_function(entry_name: str, unit: object, function_name: str) -> EntryFunction:
    try:
        candidate = getattr(unit, function_name)
    except AttributeError as exc:
        raise EntryFunctionNotFoundError(entry_name, f"{_describe(unit)} has no attribute {function_name!r}") from exc
    except Exception as exc:
        raise EntryAccessError(entry_name, f"looking up {function_name!r} failed: {exc}") from exc

    _check_no_receiver(entry_name, unit, function_name)
    if not callable(candidate):
        raise EntryFunctionNotFoundError(entry_name, f"{_describe(unit)}.{function_name} is not callable")
    return candidate


def _check_no_receiver(entry_name: str, owner: object, function_name: str) -> None:
    """Plain functions on a class need an instance; static and class methods do not."""

    if inspect.isclass(owner) and inspect.isfunction(inspect.getattr_static(owner, function_name, None)):
        raise EntryShapeError(entry_name, f"{_describe(owner)}.{function_name} is an instance method")


def _check_signature(entry_name: str, function: EntryFunction, function_name: str) -> None:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        # builtins without introspectable signatures are taken as-is
        return
    try:
        signature.bind([])
    except TypeError as exc:
        raise EntryFunctionNotFoundError(
            entry_name, f"{function_name}{signature} does not take a single argument list: {exc}"
        ) from exc


def _describe(unit: object) -> str:
    if isinstance(unit, ModuleType):
        return f"module {unit.__name__!r}"
    return getattr(unit, "__qualname__", None) or type(unit).__qualname__


def _is_file_target(target: str) -> bool:
    return target.endswith(SOURCE_SUFFIX) or "/" in target or "\\" in target


def _is_dotted_name(value: str) -> bool:
    return bool(value) and all(part.isidentifier() for part in value.split("."))
