"""Security check endpoint.

Parses a JSON ``SecurityRequest``, runs it through the app's orchestrator
and returns the ``SecurityResult``. Bad input and adapter failures are
reported as 400 with an ``error`` body.
"""

from __future__ import annotations

from aiohttp import web

from llm_security_core.errors import AdapterError
from llm_security_core.logging import get_logger
from llm_security_core.models import SecurityRequest
from llm_security_core.orchestrator import SecurityOrchestrator

log = get_logger("llm_security_core.api.routes.check")


async def handle_check(request: web.Request) -> web.Response:
    """POST /check — process one security request."""
    orchestrator: SecurityOrchestrator = request.app["orchestrator"]

    try:
        data = await request.json()
    except ValueError:
        return web.json_response({"error": "Invalid JSON body"}, status=400)

    try:
        security_request = SecurityRequest.from_dict(data)
    except ValueError as e:
        return web.json_response({"error": f"Invalid request: {e}"}, status=400)

    try:
        result = await orchestrator.process(security_request)
    except AdapterError as e:
        log.warning("check_failed", request_id=security_request.id, error=str(e))
        return web.json_response({"error": str(e)}, status=400)

    return web.json_response(result.to_dict(), status=200)
