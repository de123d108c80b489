"""
Front-end clients report timing and event data here. Each event type is
counted in Prometheus and the batch is written to the ``client.metrics`` log.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from app.observability.metrics import inc_client_event

log = logging.getLogger("client.metrics")

method = "post"
path = "/metrics"


def _events(payload: Dict[str, Any]) -> List[str]:
    events = payload.get("events") or []
    if not isinstance(events, list):
        return []
    names = []
    for event in events:
        if isinstance(event, dict) and event.get("type"):
            names.append(str(event["type"]))
        elif isinstance(event, str) and event:
            names.append(event)
    return names


async def process(request: Request) -> JSONResponse:
    try:
        payload = json.loads(await request.body() or b"{}")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="metrics must be a JSON object")

    names = _events(payload)
    for name in names:
        inc_client_event(name)

    log.info(
        "client metrics",
        extra={
            "events": names,
            "duration": payload.get("duration"),
            "context": payload.get("context"),
            "agent": request.headers.get("user-agent", ""),
        },
    )
    return JSONResponse({})
