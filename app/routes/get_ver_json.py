from __future__ import annotations

import platform
import sys

from fastapi.responses import JSONResponse
from starlette.requests import Request

method = "get"
path = "/ver.json"


def process(request: Request) -> JSONResponse:
    settings = request.app.state.settings
    return JSONResponse(
        {
            "version": settings.APP_VERSION,
            "commit": settings.GIT_SHA or "unknown",
            "source": settings.SOURCE_URL,
            "runtime": {
                "python": sys.version.split(" ")[0],
                "platform": platform.platform(),
            },
        }
    )
