# app/routing/static.py
"""
Hard-coded endpoints registered ahead of the discovered route units.

Every handler is produced by a factory that receives its dependencies
(settings, template resolver, views) as arguments, so each one can be
mounted and tested on its own.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional
from urllib.parse import urlparse

from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import Response

from app.config import Settings
from app.services.templates import TemplateNotFound, TemplateResolver

log = logging.getLogger(__name__)

Endpoint = Callable[[Request], Awaitable[Response]]

# One route per entry; a single regexp covering all of them became unreadable.
FRONTEND_ROUTES = (
    "/signin",
    "/signin_complete",
    "/signup",
    "/signup_complete",
    "/confirm",
    "/settings",
    "/change_password",
    "/legal",
    "/legal/terms",
    "/legal/privacy",
    "/cannot_create_account",
    "/verify_email",
    "/reset_password",
    "/confirm_reset_password",
    "/complete_reset_password",
    "/reset_password_complete",
    "/delete_account",
    "/force_auth",
)

# Length of the "/v1" prefix carried by links in outbound emails.
_VERSION_PREFIX_LEN = 3


@dataclass(frozen=True)
class StaticRoute:
    method: str
    path: str
    endpoint: Endpoint
    name: Optional[str] = None


def original_url(request: Request) -> str:
    """Path plus query string exactly as the client sent them."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


def auth_server_host(settings: Settings) -> Optional[str]:
    return urlparse(settings.fxaccount_url).hostname


# ------------------------------- Handlers -------------------------------------


def strip_version_redirect() -> Endpoint:
    async def redirect_without_version(request: Request) -> Response:
        return RedirectResponse(original_url(request)[_VERSION_PREFIX_LEN:], status_code=302)

    return redirect_without_version


def config_endpoint(settings: Settings) -> Endpoint:
    payload = {
        "fxaccountUrl": settings.fxaccount_url,
        "i18n": settings.i18n,
    }

    async def client_config(request: Request) -> Response:
        return JSONResponse(payload)

    return client_config


def template_endpoint(templates: TemplateResolver) -> Endpoint:
    async def email_template(request: Request) -> Response:
        lang = request.path_params["lang"]
        template_type = request.path_params["type"]
        try:
            body = templates(lang, template_type)
        except TemplateNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return JSONResponse(body)

    return email_template


def mocha_endpoint(views: Jinja2Templates) -> Endpoint:
    async def mocha_tests(request: Request) -> Response:
        query = request.query_params
        check_coverage = "coverage" in query and query["coverage"] != "false"
        return views.TemplateResponse(request, "mocha.html", {"check_coverage": check_coverage})

    return mocha_tests


def index_endpoint(views: Jinja2Templates, settings: Settings) -> Endpoint:
    async def index(request: Request) -> Response:
        return views.TemplateResponse(
            request,
            "index.html",
            {"env": settings.env, "fxaccount_url": settings.fxaccount_url},
        )

    return index


def spa_rewrite(index: Endpoint) -> Endpoint:
    async def rewrite_to_index(request: Request) -> Response:
        # Every frontend path is served by the same index document.
        request.scope["path"] = "/"
        request.scope["raw_path"] = b"/"
        return await index(request)

    return rewrite_to_index


# ------------------------------- Table ----------------------------------------


def build_static_routes(
    settings: Settings,
    templates: TemplateResolver,
    views: Jinja2Templates,
) -> List[StaticRoute]:
    """Static routes in registration order.

    Order: email-link redirects and config, template lookup, the development
    test harness, SPA rewrites, then the index document.
    """
    redirect = strip_version_redirect()
    index = index_endpoint(views, settings)

    routes: List[StaticRoute] = [
        StaticRoute("GET", "/v1/complete_reset_password", redirect, "complete_reset_password_v1"),
        StaticRoute("GET", "/config", config_endpoint(settings), "config"),
        StaticRoute("GET", "/v1/verify_email", redirect, "verify_email_v1"),
        StaticRoute("GET", "/template/{lang}/{type}", template_endpoint(templates), "template"),
    ]

    if settings.is_development:
        log.info("development mode: serving front-end tests at /tests/index.html")
        routes.append(
            StaticRoute("GET", "/tests/index.html", mocha_endpoint(views), "mocha_tests")
        )

    rewrite = spa_rewrite(index)
    for path in FRONTEND_ROUTES:
        routes.append(StaticRoute("GET", path, rewrite, f"spa:{path}"))

    routes.append(StaticRoute("GET", "/", index, "index"))
    return routes

