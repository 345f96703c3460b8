"""Adapter for LLM-Policy-Engine (declarative security policies)."""

from __future__ import annotations

from collections.abc import Mapping

from llm_security_core.adapters.base import (
    PolicyAdapter,
    PolicyBackend,
    backend_call,
    close_backend,
)
from llm_security_core.models import PolicyAction, PolicyDecision, SecurityRequest


class SimulatorPolicyAdapter:
    """Default-allow policy used when no policy engine is wired in."""

    async def evaluate(self, request: SecurityRequest) -> list[PolicyDecision]:
        return [PolicyDecision(policy_id="default", action=PolicyAction.ALLOW)]

    async def close(self) -> None:
        pass


class BoundPolicyAdapter:
    """Forwards evaluation to a real policy engine.

    Decisions are returned in the engine's order. Mappings are parsed as
    wire-format decisions.
    """

    def __init__(self, backend: PolicyBackend) -> None:
        self._backend = backend

    async def evaluate(self, request: SecurityRequest) -> list[PolicyDecision]:
        with backend_call("policy", "evaluate"):
            raw = await self._backend.evaluate(request)
            decisions: list[PolicyDecision] = []
            for item in raw:
                if isinstance(item, PolicyDecision):
                    decisions.append(item)
                elif isinstance(item, Mapping):
                    decisions.append(PolicyDecision.from_dict(item))
                else:
                    raise ValueError(f"unexpected decision type {type(item).__name__}")
            return decisions

    async def close(self) -> None:
        await close_backend(self._backend)


def create_policy_adapter(policy_engine: PolicyBackend | None = None) -> PolicyAdapter:
    """Bind to ``policy_engine``, or fall back to the simulator."""
    if policy_engine is None:
        return SimulatorPolicyAdapter()
    return BoundPolicyAdapter(policy_engine)
