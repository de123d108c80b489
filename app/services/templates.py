# app/services/templates.py
"""
Localized email templates served to the front end via /template/{lang}/{type}.

Layout on disk::

    <root>/<lang>/<type>.html
    <root>/<lang>/<type>.txt

A language without the requested template falls back to the default
language. Both files are rendered through Jinja2 so shared blocks can be
extended from ``<root>/_base.html``.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape
from jinja2 import TemplateNotFound as _JinjaNotFound

log = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class TemplateNotFound(LookupError):
    def __init__(self, lang: str, template_type: str) -> None:
        super().__init__(f"no template {template_type!r} for language {lang!r}")
        self.lang = lang
        self.template_type = template_type


class TemplateResolver:
    def __init__(self, root: Union[str, Path], default_lang: str = "en-US") -> None:
        self.root = Path(root)
        self.default_lang = default_lang
        self._env = Environment(
            loader=FileSystemLoader(str(self.root)),
            autoescape=select_autoescape(enabled_extensions=("html",)),
            keep_trailing_newline=True,
        )

    def languages(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if p.is_dir() and not p.name.startswith("_")
        )

    def _candidates(self, lang: str) -> List[str]:
        langs = [lang]
        if "-" in lang:
            langs.append(lang.split("-", 1)[0])
        if self.default_lang not in langs:
            langs.append(self.default_lang)
        return langs

    def _render(self, lang: str, template_type: str, ext: str) -> Optional[str]:
        try:
            template = self._env.get_template(f"{lang}/{template_type}.{ext}")
        except _JinjaNotFound:
            return None
        return template.render(lang=lang, template_type=template_type)

    def __call__(self, lang: str, template_type: str) -> Dict[str, Any]:
        if not (_SEGMENT_RE.match(lang or "") and _SEGMENT_RE.match(template_type or "")):
            raise TemplateNotFound(lang, template_type)

        for candidate in self._candidates(lang):
            html = self._render(candidate, template_type, "html")
            text = self._render(candidate, template_type, "txt")
            if html is None and text is None:
                continue
            if candidate != lang:
                log.debug("template %s/%s served from %s", lang, template_type, candidate)
            return {
                "lang": candidate,
                "type": template_type,
                "html": html or "",
                "text": text or "",
            }
        raise TemplateNotFound(lang, template_type)
