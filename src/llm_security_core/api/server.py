"""HTTP server for Cloud Run deployment.

Runs one aiohttp application around a single orchestrator instance that
the server owns for its whole lifetime.
"""

from __future__ import annotations

import asyncio

from aiohttp import web

from llm_security_core import __version__
from llm_security_core.api.middleware import create_error_middleware
from llm_security_core.api.routes.check import handle_check
from llm_security_core.api.routes.health import handle_health
from llm_security_core.logging import get_logger
from llm_security_core.orchestrator import SecurityOrchestrator

log = get_logger("llm_security_core.api.server")


class SecurityAPIServer:
    """REST API server exposing the orchestrator."""

    def __init__(
        self,
        orchestrator: SecurityOrchestrator,
        *,
        host: str = "0.0.0.0",  # nosec B104 - Intentional for Docker container
        port: int = 8080,
        service_name: str = "security-core",
        version: str = __version__,
    ) -> None:
        self._orchestrator = orchestrator
        self._host = host
        self._port = port
        self._service_name = service_name
        self._version = version
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

        log.info("security_api_initialized", host=host, port=port)

    def create_app(self) -> web.Application:
        """Create and configure the aiohttp application."""
        app = web.Application(middlewares=[create_error_middleware()])

        app["orchestrator"] = self._orchestrator
        app["service_name"] = self._service_name
        app["version"] = self._version

        app.router.add_get("/health", handle_health)
        app.router.add_post("/check", handle_check)

        self._app = app
        return app

    async def start(self) -> None:
        """Start the server."""
        if self._app is None:
            self.create_app()

        if self._app is None:  # pragma: no cover
            raise RuntimeError("create_app() must be called first")

        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()

        log.info("security_api_started", host=self._host, port=self._port)

    async def stop(self) -> None:
        """Stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            log.info("security_api_stopped")


async def run_server(
    orchestrator: SecurityOrchestrator,
    host: str = "0.0.0.0",  # nosec B104 - Intentional for Docker container
    port: int = 8080,
    service_name: str = "security-core",
    version: str = __version__,
) -> None:
    """Serve until cancelled, then stop the server and close the orchestrator."""
    server = SecurityAPIServer(
        orchestrator,
        host=host,
        port=port,
        service_name=service_name,
        version=version,
    )
    await server.start()

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await server.stop()
        await orchestrator.close()


def main() -> None:
    """Main entry point for the HTTP service."""
    from llm_security_core.config import get_settings
    from llm_security_core.factory import create_orchestrator_from_settings
    from llm_security_core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings)

    orchestrator = create_orchestrator_from_settings(settings)

    try:
        asyncio.run(
            run_server(
                orchestrator,
                host=settings.host,
                port=settings.port,
                service_name=settings.service_name,
                version=settings.version,
            )
        )
    except KeyboardInterrupt:
        log.info("security_api_shutdown")


if __name__ == "__main__":
    main()
