"""LLM Security Core: security decision orchestration for LLM traffic.

Coordinates LLM-Shield, LLM-Edge-Agent, LLM-Incident-Manager,
LLM-Policy-Engine and LLM-Config-Manager into one verdict per request.

Public API
----------
- :func:`create_security_core` — orchestrator from optional backends
- :class:`SecurityOrchestrator` — the pipeline (``process``)
- :class:`SecurityHandler` — stateful request/event wrapper
- Request/result models and error types
"""

__version__ = "1.0.0"

from llm_security_core.errors import AdapterError, SecurityCoreError, UninitializedError
from llm_security_core.factory import (
    create_adapters,
    create_orchestrator_from_settings,
    create_security_core,
)
from llm_security_core.handlers import SecurityHandler
from llm_security_core.models import (
    IncidentSignal,
    PolicyAction,
    PolicyDecision,
    RequestKind,
    RequestMetadata,
    SecurityRequest,
    SecurityResult,
    Severity,
)
from llm_security_core.orchestrator import OrchestratorAdapters, SecurityOrchestrator

__all__ = [
    "AdapterError",
    "IncidentSignal",
    "OrchestratorAdapters",
    "PolicyAction",
    "PolicyDecision",
    "RequestKind",
    "RequestMetadata",
    "SecurityCoreError",
    "SecurityHandler",
    "SecurityOrchestrator",
    "SecurityRequest",
    "SecurityResult",
    "Severity",
    "UninitializedError",
    "__version__",
    "create_adapters",
    "create_orchestrator_from_settings",
    "create_security_core",
]
