# app/routing/patterns.py
from __future__ import annotations

import functools
import inspect
import re
from typing import Any, Callable, Dict, Iterable, Optional, Pattern, Set, Tuple

from starlette._utils import get_route_path
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import URLPath
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import BaseRoute, Match, NoMatchFound, request_response
from starlette.types import Receive, Scope, Send

Endpoint = Callable[[Request], Any]


def as_endpoint(process: Callable[..., Any]) -> Endpoint:
    """
    Adapt any ``process(request)`` callable into an async Starlette endpoint.

    Route units may export plain functions, coroutines or callable objects;
    Starlette only wraps real functions, so everything goes through here.
    Sync callables run in the threadpool.
    """
    is_async = inspect.iscoroutinefunction(process) or inspect.iscoroutinefunction(
        getattr(process, "__call__", None)
    )

    @functools.wraps(process)
    async def endpoint(request: Request) -> Response:
        if is_async:
            result = await process(request)
        else:
            result = await run_in_threadpool(process, request)
        if inspect.isawaitable(result):
            result = await result
        return result

    return endpoint


class PatternRoute(BaseRoute):
    """
    A route whose path is a compiled regular expression.

    The pattern must match the whole request path below any mount prefix.
    Named groups become path params; without named groups, positional groups
    are exposed as "0", "1", and so on.
    """

    def __init__(
        self,
        pattern: Pattern[str],
        endpoint: Callable[..., Any],
        *,
        methods: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        self.pattern = pattern
        self.path = pattern.pattern
        self.endpoint = endpoint
        self.name = name or getattr(endpoint, "__name__", "pattern_route")
        self.include_in_schema = False
        self.methods: Optional[Set[str]] = None
        if methods is not None:
            self.methods = {m.upper() for m in methods}
            if "GET" in self.methods:
                self.methods.add("HEAD")
        self.app = request_response(endpoint)

    def _params(self, match: re.Match[str]) -> Dict[str, Any]:
        named = match.groupdict()
        if named:
            return {k: v for k, v in named.items() if v is not None}
        return {str(i): v for i, v in enumerate(match.groups()) if v is not None}

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        if scope["type"] != "http":
            return Match.NONE, {}
        match = self.pattern.fullmatch(get_route_path(scope))
        if match is None:
            return Match.NONE, {}
        path_params = dict(scope.get("path_params", {}))
        path_params.update(self._params(match))
        child_scope = {"endpoint": self.endpoint, "path_params": path_params}
        if self.methods and scope["method"] not in self.methods:
            return Match.PARTIAL, child_scope
        return Match.FULL, child_scope

    def url_path_for(self, name: str, /, **path_params: Any) -> URLPath:
        # Patterns cannot be reversed into a URL.
        raise NoMatchFound(name, path_params)

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self.methods and scope["method"] not in self.methods:
            headers = {"Allow": ", ".join(sorted(self.methods))}
            if "app" in scope:
                raise HTTPException(status_code=405, headers=headers)
            response = PlainTextResponse("Method Not Allowed", status_code=405, headers=headers)
            await response(scope, receive, send)
            return
        await self.app(scope, receive, send)

    def __repr__(self) -> str:
        methods = sorted(self.methods or [])
        name = self.__class__.__name__
        return f"{name}(pattern={self.path!r}, name={self.name!r}, methods={methods!r})"
