# app/routing/__init__.py
"""
Startup-time route composition.

Route definition units are discovered from a directory by
``load_route_definitions`` and registered after the static table by
``compose``. Nothing here runs per request.
"""
from __future__ import annotations

from app.routing.composer import compose
from app.routing.definition import RouteCollection, RouteDefinition, is_valid_route
from app.routing.loader import RouteLoadError, load_route_definitions, scan_route_directory
from app.routing.static import FRONTEND_ROUTES, StaticRoute, build_static_routes

__all__ = [
    "FRONTEND_ROUTES",
    "RouteCollection",
    "RouteDefinition",
    "RouteLoadError",
    "StaticRoute",
    "build_static_routes",
    "compose",
    "is_valid_route",
    "load_route_definitions",
    "scan_route_directory",
]
