# app/routing/composer.py
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import FastAPI

from app.routing.definition import RouteCollection
from app.routing.patterns import PatternRoute, as_endpoint
from app.routing.static import StaticRoute

log = logging.getLogger(__name__)


def _handler_name(process: object) -> str:
    return getattr(process, "__qualname__", None) or type(process).__name__


def compose(
    app: FastAPI,
    static_routes: Iterable[StaticRoute],
    dynamic_routes: RouteCollection,
) -> int:
    """Register static routes, then discovered route definitions, on ``app``.

    Definitions are trusted as-is; they were validated when loaded. Returns
    the number of registrations made.
    """
    count = 0
    for route in static_routes:
        app.add_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            name=route.name,
            include_in_schema=False,
        )
        count += 1

    for definition in dynamic_routes:
        method = definition.method.upper()
        endpoint = as_endpoint(definition.process)
        if isinstance(definition.path, str):
            app.add_route(definition.path, endpoint, methods=[method], include_in_schema=False)
            shown = definition.path
        else:
            app.router.routes.append(PatternRoute(definition.path, endpoint, methods=[method]))
            shown = f"~{definition.path.pattern}"
        log.debug("route registered: %s %s -> %s", method, shown, _handler_name(definition.process))
        count += 1

    log.info("routes composed", extra={"routes": count})
    return count
