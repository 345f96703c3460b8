"""Adapter for LLM-Shield (prompt and output filtering)."""

from __future__ import annotations

from llm_security_core.adapters.base import (
    ShieldAdapter,
    ShieldBackend,
    backend_call,
    close_backend,
    expect_mapping,
)
from llm_security_core.models import FilterMode, FilterResult, Redaction


class SimulatorShieldAdapter:
    """Pass-through filter used when no shield is wired in."""

    async def filter(self, content: str, mode: FilterMode) -> FilterResult:
        return FilterResult(filtered=content, redactions=[])

    async def close(self) -> None:
        pass


class BoundShieldAdapter:
    """Forwards filtering to a real shield.

    A response without ``filtered`` keeps the original content; one without
    ``redactions`` reports none.
    """

    def __init__(self, backend: ShieldBackend) -> None:
        self._backend = backend

    async def filter(self, content: str, mode: FilterMode) -> FilterResult:
        with backend_call("shield", "filter"):
            result = expect_mapping(await self._backend.filter(content, mode), "filter")
            filtered = result.get("filtered")
            if filtered is None:
                filtered = content
            elif not isinstance(filtered, str):
                raise ValueError("filtered must be a string")
            redactions = [Redaction.from_dict(r) for r in result.get("redactions") or []]
            return FilterResult(filtered=filtered, redactions=redactions)

    async def close(self) -> None:
        await close_backend(self._backend)


def create_shield_adapter(shield: ShieldBackend | None = None) -> ShieldAdapter:
    """Bind to ``shield``, or fall back to the simulator."""
    if shield is None:
        return SimulatorShieldAdapter()
    return BoundShieldAdapter(shield)
