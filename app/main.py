# app/main.py
from __future__ import annotations

import functools
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from app.config import Settings, get_settings
from app.middleware.request_id import RequestIDMiddleware
from app.routing import RouteCollection, build_static_routes, compose, load_route_definitions
from app.routing.static import auth_server_host
from app.services.templates import TemplateResolver
from app.telemetry.errors import register_error_handlers
from app.telemetry.logging import configure_root_logging, install_access_log

log = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def discovered_routes(routes_dir: str, strict: bool = True) -> RouteCollection:
    """Route definitions found in ``routes_dir``, loaded once per process."""
    return load_route_definitions(routes_dir, strict=strict)


def create_app(
    settings: Optional[Settings] = None,
    routes: Optional[RouteCollection] = None,
) -> FastAPI:
    settings = settings or get_settings()
    if settings.LOG_JSON:
        configure_root_logging(settings.LOG_LEVEL)

    if routes is None:
        routes = discovered_routes(settings.ROUTES_DIR, settings.ROUTES_STRICT)

    # The HTTP surface is exactly the composed table: no generated docs routes.
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    templates = TemplateResolver(settings.EMAIL_TEMPLATES_DIR, default_lang=settings.DEFAULT_LANG)
    views = Jinja2Templates(directory=settings.VIEWS_DIR)

    app.state.settings = settings
    app.state.views = views
    app.state.templates = templates
    app.state.auth_server_host = auth_server_host(settings)
    app.state.route_definitions = routes

    register_error_handlers(app)
    # Access log first so it runs inside the request id scope.
    install_access_log(app)
    app.add_middleware(RequestIDMiddleware)

    count = compose(app, build_static_routes(settings, templates, views), routes)
    log.info(
        "application ready",
        extra={
            "env": settings.env,
            "auth_server_host": app.state.auth_server_host,
            "routes": count,
            "route_definitions": len(routes),
        },
    )
    return app


build_app = create_app
app = create_app()
