"""Adapter for LLM-Incident-Manager (alerting and escalation)."""

from __future__ import annotations

import time
from uuid import uuid4

from llm_security_core.adapters.base import (
    IncidentAdapter,
    IncidentBackend,
    backend_call,
    close_backend,
    expect_mapping,
)
from llm_security_core.logging import get_logger
from llm_security_core.models import IncidentReceipt, IncidentSignal

log = get_logger("llm_security_core.adapters.incident")

SIMULATOR_ID_PREFIX = "sim-incident-"


class SimulatorIncidentAdapter:
    """Generates mock incident IDs when no incident manager is wired in."""

    async def emit(self, signal: IncidentSignal) -> IncidentReceipt:
        incident_id = f"{SIMULATOR_ID_PREFIX}{int(time.time() * 1000)}-{uuid4().hex[:8]}"
        log.debug(
            "simulated_incident",
            incident_id=incident_id,
            severity=signal.severity.value,
            type=signal.type.value,
        )
        return IncidentReceipt(incident_id=incident_id)

    async def close(self) -> None:
        pass


class BoundIncidentAdapter:
    """Forwards incident signals to a real incident manager."""

    def __init__(self, backend: IncidentBackend) -> None:
        self._backend = backend

    async def emit(self, signal: IncidentSignal) -> IncidentReceipt:
        with backend_call("incident", "emit"):
            result = expect_mapping(await self._backend.emit(signal), "emit")
            incident_id = result.get("incidentId")
            if not isinstance(incident_id, str) or not incident_id:
                raise ValueError("incidentId missing from incident manager response")
            return IncidentReceipt(incident_id=incident_id)

    async def close(self) -> None:
        await close_backend(self._backend)


def create_incident_adapter(incident_manager: IncidentBackend | None = None) -> IncidentAdapter:
    """Bind to ``incident_manager``, or fall back to the simulator."""
    if incident_manager is None:
        return SimulatorIncidentAdapter()
    return BoundIncidentAdapter(incident_manager)
