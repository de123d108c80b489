"""Load balancer heartbeat: answers as long as the process serves requests."""
from __future__ import annotations

from fastapi.responses import JSONResponse
from starlette.requests import Request

from app.routing.definition import RouteDefinition


async def heartbeat(request: Request) -> JSONResponse:
    return JSONResponse({})


route = RouteDefinition(method="GET", path="/__lbheartbeat__", process=heartbeat)
