# tests/conftest.py
from __future__ import annotations

import os
import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("LOG_JSON", "false")

from app.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402
from app.routing import RouteCollection  # noqa: E402


@pytest.fixture()
def routes_dir(tmp_path: Path) -> Path:
    d = tmp_path / "routes"
    d.mkdir()
    return d


@pytest.fixture()
def write_route(routes_dir: Path) -> Callable[[str, str], Path]:
    """Write a route definition file into ``routes_dir``."""

    def _write(name: str, source: str) -> Path:
        target = routes_dir / name
        target.write_text(textwrap.dedent(source), encoding="utf-8")
        return target

    return _write


@pytest.fixture()
def settings(routes_dir: Path) -> Settings:
    return Settings(
        env="production",
        fxaccount_url="https://accounts.example.com",
        i18n="en-US",
        ROUTES_DIR=str(routes_dir),
        LOG_JSON=False,
    )


@pytest.fixture()
def dev_settings(settings: Settings) -> Settings:
    return settings.model_copy(update={"env": "development"})


@pytest.fixture()
def make_client() -> Callable[..., TestClient]:
    def _make(settings: Settings, routes: RouteCollection = ()) -> TestClient:
        app: FastAPI = create_app(settings, routes=routes)
        return TestClient(app, follow_redirects=False)

    return _make


@pytest.fixture()
def client(settings: Settings, make_client: Callable[..., TestClient]) -> TestClient:
    return make_client(settings)
