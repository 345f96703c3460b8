"""Adapter for LLM-Edge-Agent (runtime protection enforcement)."""

from __future__ import annotations

from llm_security_core.adapters.base import (
    EdgeAgentAdapter,
    EdgeAgentBackend,
    backend_call,
    close_backend,
    expect_mapping,
)
from llm_security_core.models import (
    EnforcementResult,
    PolicyAction,
    PolicyDecision,
    SecurityRequest,
)


class SimulatorEdgeAgentAdapter:
    """Honours the decision without runtime controls: only ``deny`` is rejected."""

    async def enforce(
        self, request: SecurityRequest, decision: PolicyDecision
    ) -> EnforcementResult:
        return EnforcementResult(enforced=decision.action != PolicyAction.DENY)

    async def close(self) -> None:
        pass


class BoundEdgeAgentAdapter:
    """Forwards enforcement to a real edge agent.

    A response without ``enforced`` counts as enforced.
    """

    def __init__(self, backend: EdgeAgentBackend) -> None:
        self._backend = backend

    async def enforce(
        self, request: SecurityRequest, decision: PolicyDecision
    ) -> EnforcementResult:
        with backend_call("edge_agent", "enforce"):
            result = expect_mapping(await self._backend.enforce(request, decision), "enforce")
            enforced = result.get("enforced")
            modifications = result.get("modifications")
            if modifications is not None and not isinstance(modifications, str):
                raise ValueError("modifications must be a string")
            return EnforcementResult(
                enforced=True if enforced is None else bool(enforced),
                modifications=modifications,
            )

    async def close(self) -> None:
        await close_backend(self._backend)


def create_edge_agent_adapter(edge_agent: EdgeAgentBackend | None = None) -> EdgeAgentAdapter:
    """Bind to ``edge_agent``, or fall back to the simulator."""
    if edge_agent is None:
        return SimulatorEdgeAgentAdapter()
    return BoundEdgeAgentAdapter(edge_agent)
