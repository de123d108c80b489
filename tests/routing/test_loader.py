from __future__ import annotations

import logging
import os
import re
import sys
from pathlib import Path

import pytest

from app.routing.loader import (
    FatalLoadError,
    Loaded,
    Rejected,
    RouteLoadError,
    Skipped,
    load_route_definitions,
    scan_route_directory,
)

GET_A = """
method = "get"
path = "/a"

def process(request):
    return None
"""

POST_B = """
method = "post"
path = "/b"

async def process(request):
    return None
"""


def test_loads_valid_units_in_filename_order(routes_dir, write_route) -> None:
    write_route("b_route.py", POST_B)
    write_route("a_route.py", GET_A)

    routes = load_route_definitions(routes_dir)

    assert isinstance(routes, tuple)
    assert [(r.method, r.path) for r in routes] == [("get", "/a"), ("post", "/b")]
    assert all(callable(r.process) for r in routes)


def test_skips_hidden_and_non_python_files(routes_dir, write_route, caplog) -> None:
    caplog.set_level(logging.INFO, logger="app.routing.loader")
    # Would fail to import if the loader ever tried.
    write_route(".hidden.py", "raise RuntimeError('must not load')\n")
    write_route("notes.txt", "raise RuntimeError('must not load')\n")
    write_route("route.py.bak", "raise RuntimeError('must not load')\n")
    write_route("a.py", GET_A)
    (routes_dir / "__pycache__").mkdir()

    routes = load_route_definitions(routes_dir)

    assert [r.path for r in routes] == ["/a"]
    skipped = {
        rec.getMessage()
        for rec in caplog.records
        if rec.levelno == logging.INFO and "not loaded" in rec.getMessage()
    }
    assert skipped == {
        "route definition not loaded: .hidden.py",
        "route definition not loaded: notes.txt",
        "route definition not loaded: route.py.bak",
        "route definition not loaded: __pycache__",
    }
    assert not [rec for rec in caplog.records if rec.levelno >= logging.ERROR]


def test_directory_named_like_a_unit_is_skipped(routes_dir) -> None:
    (routes_dir / "nested.py").mkdir()
    results = scan_route_directory(routes_dir)
    assert results == [Skipped(routes_dir / "nested.py", "not a regular file")]


def test_invalid_unit_is_logged_and_scan_continues(routes_dir, write_route, caplog) -> None:
    caplog.set_level(logging.INFO, logger="app.routing.loader")
    write_route("a_missing_process.py", 'method = "get"\npath = "/nope"\n')
    write_route("b_empty_method.py", 'method = ""\npath = "/x"\nprocess = print\n')
    write_route("c_valid.py", GET_A)

    routes = load_route_definitions(routes_dir)

    assert [r.path for r in routes] == ["/a"]
    errors = [rec.getMessage() for rec in caplog.records if rec.levelno == logging.ERROR]
    assert errors == [
        "route definition invalid: a_missing_process.py",
        "route definition invalid: b_empty_method.py",
    ]


def test_rejection_reason_names_missing_fields(routes_dir, write_route) -> None:
    write_route("half.py", 'method = "get"\n')
    [result] = scan_route_directory(routes_dir)
    assert isinstance(result, Rejected)
    assert result.reason == "missing or empty: path, process"


def test_route_attribute_takes_precedence(routes_dir, write_route) -> None:
    write_route(
        "explicit.py",
        """
        import re
        from app.routing.definition import RouteDefinition

        def handle(request):
            return None

        method = "ignored"
        route = RouteDefinition(method="GET", path=re.compile(r"^/items/(\\d+)$"), process=handle)
        """,
    )

    [route] = load_route_definitions(routes_dir)

    assert route.method == "GET"
    assert isinstance(route.path, re.Pattern)
    assert route.path.pattern == r"^/items/(\d+)$"


def test_load_failure_aborts_by_default(routes_dir, write_route) -> None:
    write_route("a_valid.py", GET_A)
    write_route("b_broken.py", "def process(:\n")

    with pytest.raises(RouteLoadError) as excinfo:
        load_route_definitions(routes_dir)

    assert excinfo.value.file.name == "b_broken.py"
    assert isinstance(excinfo.value.__cause__, SyntaxError)


def test_import_error_in_unit_aborts(routes_dir, write_route) -> None:
    write_route("needs_missing_lib.py", "import definitely_not_installed_module\n")
    with pytest.raises(RouteLoadError) as excinfo:
        load_route_definitions(routes_dir)
    assert isinstance(excinfo.value.__cause__, ImportError)


def test_non_strict_skips_load_failures(routes_dir, write_route, caplog) -> None:
    caplog.set_level(logging.INFO, logger="app.routing.loader")
    write_route("a_broken.py", "raise RuntimeError('bad unit')\n")
    write_route("b_valid.py", GET_A)

    routes = load_route_definitions(routes_dir, strict=False)

    assert [r.path for r in routes] == ["/a"]
    assert "route definition failed to load: a_broken.py" in caplog.messages


def test_scan_reports_every_outcome(routes_dir, write_route) -> None:
    write_route("a_ok.py", GET_A)
    write_route("b_bad.py", "x = 1\n")
    write_route("c_broken.py", "1/0\n")
    write_route("d.json", "{}")

    results = scan_route_directory(routes_dir)

    assert [type(r) for r in results] == [Loaded, Rejected, FatalLoadError, Skipped]
    assert isinstance(results[2].cause, ZeroDivisionError)


def test_loading_twice_is_idempotent(routes_dir, write_route) -> None:
    write_route("a.py", GET_A)
    write_route("b.py", POST_B)

    first = load_route_definitions(routes_dir)
    second = load_route_definitions(routes_dir)

    assert first == second


def test_unit_code_runs_once_across_loads(routes_dir, write_route, tmp_path: Path) -> None:
    marker = tmp_path / "imports.log"
    side_effect = f"with open({str(marker)!r}, 'a') as fh:\n    fh.write('imported\\n')\n"
    write_route("a.py", side_effect + GET_A)

    load_route_definitions(routes_dir)
    load_route_definitions(routes_dir)

    assert marker.read_text().splitlines() == ["imported"]


def test_edited_unit_is_reloaded(routes_dir, write_route) -> None:
    target = write_route("a.py", GET_A)
    [before] = load_route_definitions(routes_dir)

    write_route("a.py", GET_A.replace('"/a"', '"/a2"'))
    stat = target.stat()
    os.utime(target, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
    [after] = load_route_definitions(routes_dir)

    assert before.path == "/a"
    assert after.path == "/a2"


def test_unit_with_dataclass_and_postponed_annotations_loads(routes_dir, write_route) -> None:
    write_route(
        "items.py",
        """
        from __future__ import annotations

        from dataclasses import dataclass


        @dataclass
        class Item:
            id: int


        method = "get"
        path = "/items"


        def process(request):
            return Item(1)
        """,
    )

    [result] = scan_route_directory(routes_dir)

    assert isinstance(result, Loaded)
    assert result.definition.path == "/items"


def test_failed_unit_is_not_left_in_sys_modules(routes_dir, write_route) -> None:
    write_route("broken.py", "1/0\n")

    [result] = scan_route_directory(routes_dir)

    assert isinstance(result, FatalLoadError)
    assert not [name for name in sys.modules if name.startswith("_route_") and "broken" in name]


def test_sys_exit_in_unit_is_a_load_failure(routes_dir, write_route) -> None:
    write_route("a_exits.py", "import sys\nsys.exit(3)\n")
    write_route("b_valid.py", GET_A)

    routes = load_route_definitions(routes_dir, strict=False)
    assert [r.path for r in routes] == ["/a"]

    with pytest.raises(RouteLoadError) as excinfo:
        load_route_definitions(routes_dir)
    assert isinstance(excinfo.value.__cause__, SystemExit)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(RouteLoadError):
        load_route_definitions(tmp_path / "does-not-exist")


def test_empty_directory_gives_empty_collection(routes_dir) -> None:
    assert load_route_definitions(routes_dir) == ()
