# Prometheus exposition for this process.
# - Hidden (404) when METRICS_ROUTE_ENABLED is an explicit "off" value.
# - Optional API key via METRICS_API_KEY (X-API-KEY or Bearer).
# - Forces Prometheus text exposition v0.0.4 content type regardless of library defaults.

from __future__ import annotations

import os
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import Response
from prometheus_client import REGISTRY, generate_latest

# Force the classic Prometheus text exposition content type.
TEXT_EXPO_V004 = "text/plain; version=0.0.4; charset=utf-8"

_OFF_VALUES = {"0", "false", "no", "off"}

method = "GET"
path = "/metrics"


def _enabled() -> bool:
    raw = (os.getenv("METRICS_ROUTE_ENABLED", "") or "").strip().lower()
    return raw not in _OFF_VALUES


def _expected_key() -> Optional[str]:
    val = (os.getenv("METRICS_API_KEY", "") or "").strip()
    return val or None


def _auth_ok(request: Request, required: str) -> bool:
    hdr_key = request.headers.get("x-api-key")
    if hdr_key and hdr_key == required:
        return True
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() == required
    return False


async def process(request: Request) -> Response:
    if not _enabled():
        raise HTTPException(status_code=404, detail="Not Found")

    required = _expected_key()
    if required is not None and not _auth_ok(request, required):
        raise HTTPException(status_code=401, detail="Unauthorized")

    resp = Response(content=generate_latest(REGISTRY))
    resp.headers["Content-Type"] = TEXT_EXPO_V004
    return resp
