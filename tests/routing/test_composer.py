from __future__ import annotations

import re

from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.routing import Route

from app.routing.composer import compose
from app.routing.definition import RouteDefinition
from app.routing.patterns import PatternRoute
from app.routing.static import StaticRoute


async def _static(request: Request) -> PlainTextResponse:
    return PlainTextResponse("static")


def _first(request: Request) -> PlainTextResponse:
    return PlainTextResponse("first")


def _second(request: Request) -> PlainTextResponse:
    return PlainTextResponse("second")


def _item(request: Request) -> JSONResponse:
    return JSONResponse({"id": request.path_params["id"]})


def test_static_routes_come_before_dynamic_ones() -> None:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    static = [StaticRoute("GET", "/", _static, "index")]
    dynamic = (
        RouteDefinition("get", "/ver.json", _first),
        RouteDefinition("POST", re.compile(r"^/items/(?P<id>\d+)$"), _item),
    )

    count = compose(app, static, dynamic)

    assert count == 3
    kinds = [(type(r).__name__, getattr(r, "path", None)) for r in app.router.routes]
    assert kinds == [
        ("Route", "/"),
        ("Route", "/ver.json"),
        ("PatternRoute", r"^/items/(?P<id>\d+)$"),
    ]
    assert isinstance(app.router.routes[1], Route)
    assert app.router.routes[1].methods == {"GET", "HEAD"}
    assert isinstance(app.router.routes[2], PatternRoute)


def test_method_is_upper_cased_and_dispatched() -> None:
    app = FastAPI()
    compose(
        app,
        [],
        (RouteDefinition("post", re.compile(r"^/items/(?P<id>\d+)$"), _item),),
    )
    client = TestClient(app)

    assert client.post("/items/42").json() == {"id": "42"}
    assert client.get("/items/42").status_code == 405


def test_duplicate_paths_are_both_registered_first_wins() -> None:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    compose(
        app,
        [],
        (
            RouteDefinition("GET", "/dup", _first),
            RouteDefinition("GET", "/dup", _second),
        ),
    )

    assert [getattr(r, "path", None) for r in app.router.routes] == ["/dup", "/dup"]
    assert TestClient(app).get("/dup").text == "first"


def test_dynamic_route_cannot_shadow_static_route() -> None:
    app = FastAPI()
    compose(
        app,
        [StaticRoute("GET", "/config", _static, "config")],
        (RouteDefinition("GET", "/config", _second),),
    )
    assert TestClient(app).get("/config").text == "static"
