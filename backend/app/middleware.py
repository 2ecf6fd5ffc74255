"""
app/middleware.py
─────────────────
Hide development-only routes in production.

Requests whose path starts with one of ``DISABLED_ROUTE_PREFIXES`` are
rewritten to ``/api/not-found`` before routing, so every method on those
paths answers 404 instead of reaching the real handler.
"""

import logging
from typing import Iterable

from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

NOT_FOUND_PATH = "/api/not-found"


class DisabledRouteMiddleware:
    """
    Pure ASGI middleware rewriting disabled paths.

    Args:
        app:      Downstream ASGI app.
        prefixes: Path prefixes to disable.
        enabled:  When false the middleware is a pass-through.
    """

    def __init__(self, app: ASGIApp, prefixes: Iterable[str] = (), enabled: bool = True) -> None:
        self.app = app
        self.prefixes = tuple(p.rstrip("/") for p in prefixes if p)
        self.enabled = enabled

    def is_disabled(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self.prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self.enabled and scope["type"] == "http" and self.is_disabled(scope["path"]):
            logger.info("Blocked disabled route %s %s", scope.get("method"), scope["path"])
            scope = dict(scope, path=NOT_FOUND_PATH, raw_path=NOT_FOUND_PATH.encode())
        await self.app(scope, receive, send)
