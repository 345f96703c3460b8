"""Health check endpoint."""

from aiohttp import web


async def handle_health(request: web.Request) -> web.Response:
    """GET /health — liveness for the container platform."""
    return web.json_response(
        {
            "status": "healthy",
            "service": request.app["service_name"],
            "version": request.app["version"],
        }
    )
