"""Adapters for the five integrated collaborator systems.

Public API
----------
- ``create_*_adapter`` factories: bind to a backend, or fall back to the
  simulator when none is given
- Adapter protocols consumed by the orchestrator
- HTTP backends for collaborators deployed as services
"""

from llm_security_core.adapters.base import (
    ConfigAdapter,
    EdgeAgentAdapter,
    IncidentAdapter,
    PolicyAdapter,
    ShieldAdapter,
)
from llm_security_core.adapters.config import create_config_adapter
from llm_security_core.adapters.edge_agent import create_edge_agent_adapter
from llm_security_core.adapters.http import (
    BackendError,
    HttpConfigBackend,
    HttpEdgeAgentBackend,
    HttpIncidentBackend,
    HttpPolicyBackend,
    HttpShieldBackend,
)
from llm_security_core.adapters.incident import create_incident_adapter
from llm_security_core.adapters.policy import create_policy_adapter
from llm_security_core.adapters.shield import create_shield_adapter

__all__ = [
    "BackendError",
    "ConfigAdapter",
    "EdgeAgentAdapter",
    "HttpConfigBackend",
    "HttpEdgeAgentBackend",
    "HttpIncidentBackend",
    "HttpPolicyBackend",
    "HttpShieldBackend",
    "IncidentAdapter",
    "PolicyAdapter",
    "ShieldAdapter",
    "create_config_adapter",
    "create_edge_agent_adapter",
    "create_incident_adapter",
    "create_policy_adapter",
    "create_shield_adapter",
]
