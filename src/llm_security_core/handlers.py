"""Security request and event handlers.

:class:`SecurityHandler` is the stateful wrapper used by event-driven
hosts: it is created empty, initialised once with an adapter set, and then
routes requests and bus events to its orchestrator. Each host owns its own
handler instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from llm_security_core.errors import UninitializedError
from llm_security_core.logging import get_logger
from llm_security_core.models import SecurityRequest, SecurityResult
from llm_security_core.orchestrator import OrchestratorAdapters, SecurityOrchestrator

log = get_logger("llm_security_core.handlers")

EVENT_SECURITY_REQUEST = "security.request"
EVENT_CONFIG_RELOAD = "security.config.reload"


class SecurityHandler:
    """Route security requests and events to an owned orchestrator."""

    def __init__(self, orchestrator: SecurityOrchestrator | None = None) -> None:
        self._orchestrator = orchestrator

    @property
    def is_initialized(self) -> bool:
        return self._orchestrator is not None

    def initialize(self, adapters: OrchestratorAdapters) -> SecurityOrchestrator:
        """Build the orchestrator from an adapter set."""
        self._orchestrator = SecurityOrchestrator(adapters)
        log.info("security_handler_initialized")
        return self._orchestrator

    def _require_orchestrator(self) -> SecurityOrchestrator:
        if self._orchestrator is None:
            raise UninitializedError(
                "SecurityOrchestrator not initialized. Call initialize() first."
            )
        return self._orchestrator

    async def handle_request(self, request: SecurityRequest) -> SecurityResult:
        """Process a single request.

        Raises:
            UninitializedError: If :meth:`initialize` has not been called.
            AdapterError: If an adapter call fails.
        """
        return await self._require_orchestrator().process(request)

    async def handle_event(self, event: Mapping[str, Any]) -> SecurityResult | None:
        """Route a bus event.

        ``security.request`` payloads are processed and their result
        returned. Config reloads are owned by the config manager and only
        logged. Unknown event types are logged and ignored.

        Raises:
            UninitializedError: If :meth:`initialize` has not been called.
            ValueError: If a ``security.request`` payload is not a valid request.
        """
        orchestrator = self._require_orchestrator()
        event_type = event.get("type")

        if event_type == EVENT_SECURITY_REQUEST:
            request = SecurityRequest.from_dict(event.get("payload"))
            return await orchestrator.process(request)

        if event_type == EVENT_CONFIG_RELOAD:
            log.info("config_reload_event_received")
            return None

        log.debug("unknown_event_ignored", event_type=event_type)
        return None
