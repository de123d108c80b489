"""
Localized legal documents: /<lang>/legal/terms and /<lang>/legal/privacy.

Renders ``legal/<lang>/<page>.html`` from the views directory when it
exists; otherwise redirects to the unprefixed page served by the front end.
Requests without a language prefix never get here: the SPA table registers
/legal/terms and /legal/privacy first.
"""
from __future__ import annotations

import re

from fastapi.responses import RedirectResponse
from jinja2 import TemplateNotFound
from starlette.requests import Request
from starlette.responses import Response

method = "GET"
path = re.compile(r"^/(?:(?P<lang>[A-Za-z_-]+)/)?legal/(?P<page>terms|privacy)$")


def process(request: Request) -> Response:
    page = request.path_params["page"]
    lang = request.path_params.get("lang")
    views = request.app.state.views

    if lang:
        name = f"legal/{lang}/{page}.html"
        try:
            views.get_template(name)
        except TemplateNotFound:
            pass
        else:
            return views.TemplateResponse(request, name, {"lang": lang, "page": page})

    return RedirectResponse(f"/legal/{page}", status_code=302)
