"""List the route table the server would compose at startup.

Run with:  python -m cli.routes [--routes-dir DIR] [--scan] [--env development]
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.config import Settings
from app.routing.loader import (
    FatalLoadError,
    Loaded,
    Rejected,
    RouteLoadError,
    Skipped,
    scan_route_directory,
)


def _scan_rows(routes_dir: str) -> List[Tuple[str, str, str]]:
    rows: List[Tuple[str, str, str]] = []
    for result in scan_route_directory(routes_dir):
        if isinstance(result, Loaded):
            path = result.definition.path
            shown = path if isinstance(path, str) else f"~{path.pattern}"
            rows.append(("loaded", result.file.name, f"{result.definition.method.upper()} {shown}"))
        elif isinstance(result, Skipped):
            rows.append(("skipped", result.file.name, result.reason))
        elif isinstance(result, Rejected):
            rows.append(("rejected", result.file.name, result.reason))
        elif isinstance(result, FatalLoadError):
            rows.append(("failed", result.file.name, repr(result.cause)))
    return rows


def _table_rows(settings: Settings) -> List[Tuple[str, str, str]]:
    from app.main import create_app

    app = create_app(settings)
    rows: List[Tuple[str, str, str]] = []
    for route in app.router.routes:
        methods = ", ".join(sorted(getattr(route, "methods", None) or []))
        endpoint = getattr(route, "endpoint", None)
        handler = getattr(endpoint, "__qualname__", None) or type(endpoint).__name__
        rows.append((methods, str(getattr(route, "path", "")), handler))
    return rows


def _print_table(header: Tuple[str, str, str], rows: Sequence[Tuple[str, str, str]]) -> None:
    widths = [max(len(header[i]), *(len(r[i]) for r in rows)) for i in range(2)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{}}"
    print(fmt.format(*header))
    print("-" * min(sum(widths) + 4 + len(header[2]), 80))
    for row in rows:
        print(fmt.format(*row))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--routes-dir", help="directory of route definition files")
    parser.add_argument("--env", help="environment name, e.g. development")
    parser.add_argument(
        "--scan",
        action="store_true",
        help="report how each file in the routes directory was classified",
    )
    args = parser.parse_args(argv)

    overrides: Dict[str, Any] = {"LOG_JSON": False}
    if args.routes_dir:
        overrides["ROUTES_DIR"] = args.routes_dir
    if args.env:
        overrides["env"] = args.env
    settings = Settings(**overrides)

    try:
        if args.scan:
            rows = _scan_rows(settings.ROUTES_DIR)
            header = ("OUTCOME", "FILE", "DETAIL")
        else:
            rows = _table_rows(settings)
            header = ("METHOD", "PATH", "HANDLER")
    except RouteLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not rows:
        print("No routes found.")
        return 0
    _print_table(header, rows)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
