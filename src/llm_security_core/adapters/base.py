"""Adapter and backend contracts for the integrated collaborator systems.

Each capability has two protocols:

- an *adapter* protocol, which is what the orchestrator calls, and
- a *backend* protocol, which is what a real collaborator (in-process
  object or HTTP client) must provide for the bound adapter variant.

Backends answer with JSON-shaped mappings (camelCase keys). The bound
adapters normalise those into the typed models.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Protocol

from llm_security_core.errors import AdapterError
from llm_security_core.logging import get_logger
from llm_security_core.models import (
    EnforcementResult,
    FilterMode,
    FilterResult,
    IncidentReceipt,
    IncidentSignal,
    PolicyDecision,
    SecurityRequest,
)

log = get_logger("llm_security_core.adapters.base")


# ---------------------------------------------------------------------------
# Adapter protocols (consumed by the orchestrator)
# ---------------------------------------------------------------------------


class PolicyAdapter(Protocol):
    """Evaluates declarative security policies for a request."""

    async def evaluate(self, request: SecurityRequest) -> list[PolicyDecision]:
        """Return the ordered decisions for a request."""
        ...

    async def close(self) -> None: ...


class ShieldAdapter(Protocol):
    """Filters and redacts prompt or output content."""

    async def filter(self, content: str, mode: FilterMode) -> FilterResult:
        """Return the filtered content and the redacted spans."""
        ...

    async def close(self) -> None: ...


class EdgeAgentAdapter(Protocol):
    """Applies runtime controls for a policy decision."""

    async def enforce(
        self, request: SecurityRequest, decision: PolicyDecision
    ) -> EnforcementResult:
        """Enforce a decision against a (possibly filtered) request."""
        ...

    async def close(self) -> None: ...


class IncidentAdapter(Protocol):
    """Raises incidents with the incident manager."""

    async def emit(self, signal: IncidentSignal) -> IncidentReceipt:
        """Emit a signal and return the created incident's ID."""
        ...

    async def close(self) -> None: ...


class ConfigAdapter(Protocol):
    """Reads centralised configuration and secrets."""

    async def get(self, key: str) -> Any:
        """Return a configuration value, or None when absent."""
        ...

    async def get_secret(self, key: str) -> str | None:
        """Return a secret value, or None when absent."""
        ...

    async def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Backend protocols (provided by real collaborators)
# ---------------------------------------------------------------------------


class PolicyBackend(Protocol):
    async def evaluate(
        self, request: SecurityRequest
    ) -> Iterable[PolicyDecision | Mapping[str, Any]]: ...


class ShieldBackend(Protocol):
    async def filter(self, content: str, mode: FilterMode) -> Mapping[str, Any]: ...


class EdgeAgentBackend(Protocol):
    async def enforce(
        self, request: SecurityRequest, decision: PolicyDecision
    ) -> Mapping[str, Any]: ...


class IncidentBackend(Protocol):
    async def emit(self, signal: IncidentSignal) -> Mapping[str, Any]: ...


class ConfigBackend(Protocol):
    async def get(self, key: str) -> Any: ...

    async def get_secret(self, key: str) -> str | None: ...


# ---------------------------------------------------------------------------
# Helpers shared by the bound adapters
# ---------------------------------------------------------------------------


@contextmanager
def backend_call(adapter: str, operation: str) -> Iterator[None]:
    """Re-raise any backend failure inside the block as :class:`AdapterError`."""
    try:
        yield
    except AdapterError:
        raise
    except Exception as e:
        log.warning("adapter_call_failed", adapter=adapter, operation=operation, error=str(e))
        raise AdapterError(adapter, str(e)) from e


def expect_mapping(result: Any, operation: str) -> Mapping[str, Any]:
    """Check that a backend answered with a JSON object."""
    if not isinstance(result, Mapping):
        raise ValueError(
            f"{operation} returned {type(result).__name__}, expected a JSON object"
        )
    return result


async def close_backend(backend: Any) -> None:
    """Close a backend if it holds resources."""
    close = getattr(backend, "close", None)
    if close is not None:
        await close()
