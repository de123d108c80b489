# app/routing/loader.py
"""
Load route definition units from a directory.

Each ``*.py`` file in the directory is one unit. A unit exposes ``method``,
``path`` and ``process`` at module level, or a module-level ``route`` object
carrying those three attributes. Hidden files (leading dot) and anything
without the ``.py`` suffix are skipped.

Outcomes per file:

- skipped by naming convention: INFO log, never an error
- loaded but missing a field: ERROR log, dropped, scan continues
- import failed, including ``SystemExit``: fatal; ``load_route_definitions``
  raises ``RouteLoadError`` unless called with ``strict=False``

Units are imported once per file modification time and cached in
``sys.modules``, so loading an unchanged directory again returns the same
definitions without re-running unit code.
"""
from __future__ import annotations

import importlib.util
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import List, Optional, Union

from app.observability.metrics import inc_route_definition
from app.routing.definition import (
    RouteCollection,
    RouteDefinition,
    is_valid_route,
    missing_fields,
)

log = logging.getLogger(__name__)

ROUTE_SUFFIX = ".py"


class RouteLoadError(RuntimeError):
    """A route definition file could not be imported."""

    def __init__(self, file: Path, message: str) -> None:
        super().__init__(f"{file}: {message}")
        self.file = file


@dataclass(frozen=True)
class Loaded:
    file: Path
    definition: RouteDefinition


@dataclass(frozen=True)
class Skipped:
    file: Path
    reason: str


@dataclass(frozen=True)
class Rejected:
    file: Path
    reason: str


@dataclass(frozen=True)
class FatalLoadError:
    file: Path
    cause: BaseException


ScanResult = Union[Loaded, Skipped, Rejected, FatalLoadError]


def _skip_reason(entry: Path) -> Optional[str]:
    if entry.name.startswith("."):
        return "hidden file"
    if not entry.name.endswith(ROUTE_SUFFIX):
        return f"not a {ROUTE_SUFFIX} file"
    if not entry.is_file():
        return "not a regular file"
    return None


def _module_name(file: Path) -> str:
    return "_route_" + re.sub(r"\W", "_", str(file.resolve()))


def _import_unit(file: Path) -> ModuleType:
    """Import ``file`` once per modification time.

    Units are registered in ``sys.modules`` under a path-derived name so that
    repeated scans reuse the same module objects.
    """
    module_name = _module_name(file)
    mtime = file.stat().st_mtime_ns
    cached = sys.modules.get(module_name)
    if cached is not None and getattr(cached, "__route_mtime__", None) == mtime:
        return cached

    spec = importlib.util.spec_from_file_location(module_name, file)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot build an import spec for {file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    module.__route_mtime__ = mtime
    return module


def _scan_entry(entry: Path) -> ScanResult:
    reason = _skip_reason(entry)
    if reason is not None:
        return Skipped(entry, reason)

    # A unit calling sys.exit() at import is a load failure, not a shutdown.
    try:
        module = _import_unit(entry)
    except (Exception, SystemExit) as exc:
        return FatalLoadError(entry, exc)

    unit = getattr(module, "route", module)
    if not is_valid_route(unit):
        fields = ", ".join(missing_fields(unit))
        return Rejected(entry, f"missing or empty: {fields}")
    return Loaded(entry, RouteDefinition.from_unit(unit))


def scan_route_directory(routes_path: Union[str, Path]) -> List[ScanResult]:
    """Classify every entry of ``routes_path`` in sorted filename order.

    Import failures are returned as ``FatalLoadError`` rather than raised so
    callers can decide whether they abort startup.
    """
    root = Path(routes_path)
    if not root.is_dir():
        raise RouteLoadError(root, "routes directory not found")
    return [_scan_entry(entry) for entry in sorted(root.iterdir(), key=lambda p: p.name)]


def load_route_definitions(
    routes_path: Union[str, Path], *, strict: bool = True
) -> RouteCollection:
    routes: List[RouteDefinition] = []
    fatal: Optional[FatalLoadError] = None

    for result in scan_route_directory(routes_path):
        name = result.file.name
        if isinstance(result, Skipped):
            inc_route_definition("skipped")
            log.info("route definition not loaded: %s", name, extra={"reason": result.reason})
        elif isinstance(result, Rejected):
            inc_route_definition("rejected")
            log.error("route definition invalid: %s", name, extra={"reason": result.reason})
        elif isinstance(result, FatalLoadError):
            inc_route_definition("failed")
            log.error(
                "route definition failed to load: %s",
                name,
                exc_info=(type(result.cause), result.cause, result.cause.__traceback__),
            )
            if fatal is None:
                fatal = result
        else:
            inc_route_definition("loaded")
            log.debug("route definition loaded: %s", name)
            routes.append(result.definition)

    if strict and fatal is not None:
        raise RouteLoadError(fatal.file, f"failed to load: {fatal.cause!r}") from fatal.cause

    return tuple(routes)
