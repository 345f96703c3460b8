"""Adapter for LLM-Config-Manager (centralised configuration and secrets).

The orchestration pipeline does not read configuration itself; this adapter
is part of the adapter set for entry points and policy parameterisation.
"""

from __future__ import annotations

from typing import Any

from llm_security_core.adapters.base import (
    ConfigAdapter,
    ConfigBackend,
    backend_call,
    close_backend,
)


class SimulatorConfigAdapter:
    """Reports every key as absent so callers use built-in defaults."""

    async def get(self, key: str) -> Any:
        return None

    async def get_secret(self, key: str) -> str | None:
        return None

    async def close(self) -> None:
        pass


class BoundConfigAdapter:
    """Forwards lookups to a real config manager."""

    def __init__(self, backend: ConfigBackend) -> None:
        self._backend = backend

    async def get(self, key: str) -> Any:
        with backend_call("config", "get"):
            return await self._backend.get(key)

    async def get_secret(self, key: str) -> str | None:
        with backend_call("config", "get_secret"):
            value = await self._backend.get_secret(key)
            return None if value is None else str(value)

    async def close(self) -> None:
        await close_backend(self._backend)


def create_config_adapter(config_manager: ConfigBackend | None = None) -> ConfigAdapter:
    """Bind to ``config_manager``, or fall back to the simulator."""
    if config_manager is None:
        return SimulatorConfigAdapter()
    return BoundConfigAdapter(config_manager)
