"""Middleware for the HTTP API server."""

from __future__ import annotations

from typing import Any

from aiohttp import web

from llm_security_core.logging import get_logger

log = get_logger("llm_security_core.api.middleware")


def create_error_middleware() -> Any:
    """Create middleware that answers unknown routes with a JSON 404.

    Wrong methods on known paths are reported the same way.
    """

    @web.middleware
    async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
        try:
            return await handler(request)  # type: ignore[no-any-return]
        except (web.HTTPNotFound, web.HTTPMethodNotAllowed):
            log.debug("route_not_found", method=request.method, path=request.path)
            return web.json_response({"error": "Not found"}, status=404)

    return error_middleware
