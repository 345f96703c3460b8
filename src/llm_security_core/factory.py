"""Factories for fully wired security orchestrators.

Any collaborator that is not supplied gets its simulator adapter, so a
bare ``create_security_core()`` runs standalone.
"""

from __future__ import annotations

from typing import Any

from llm_security_core.adapters.base import (
    ConfigBackend,
    EdgeAgentBackend,
    IncidentBackend,
    PolicyBackend,
    ShieldBackend,
)
from llm_security_core.adapters.config import create_config_adapter
from llm_security_core.adapters.edge_agent import create_edge_agent_adapter
from llm_security_core.adapters.http import (
    HttpConfigBackend,
    HttpEdgeAgentBackend,
    HttpIncidentBackend,
    HttpPolicyBackend,
    HttpShieldBackend,
)
from llm_security_core.adapters.incident import create_incident_adapter
from llm_security_core.adapters.policy import create_policy_adapter
from llm_security_core.adapters.shield import create_shield_adapter
from llm_security_core.config import Settings, get_settings
from llm_security_core.logging import get_logger
from llm_security_core.orchestrator import OrchestratorAdapters, SecurityOrchestrator

log = get_logger("llm_security_core.factory")


def create_adapters(
    *,
    policy_engine: PolicyBackend | None = None,
    shield: ShieldBackend | None = None,
    edge_agent: EdgeAgentBackend | None = None,
    incident_manager: IncidentBackend | None = None,
    config_manager: ConfigBackend | None = None,
) -> OrchestratorAdapters:
    """Build an adapter set, using simulators for missing backends."""
    return OrchestratorAdapters(
        policy=create_policy_adapter(policy_engine),
        shield=create_shield_adapter(shield),
        edge_agent=create_edge_agent_adapter(edge_agent),
        incident=create_incident_adapter(incident_manager),
        config=create_config_adapter(config_manager),
    )


def create_security_core(
    *,
    policy_engine: PolicyBackend | None = None,
    shield: ShieldBackend | None = None,
    edge_agent: EdgeAgentBackend | None = None,
    incident_manager: IncidentBackend | None = None,
    config_manager: ConfigBackend | None = None,
) -> SecurityOrchestrator:
    """Create an orchestrator from optional backends."""
    return SecurityOrchestrator(
        create_adapters(
            policy_engine=policy_engine,
            shield=shield,
            edge_agent=edge_agent,
            incident_manager=incident_manager,
            config_manager=config_manager,
        )
    )


def create_orchestrator_from_settings(settings: Settings | None = None) -> SecurityOrchestrator:
    """Create an orchestrator bound to every collaborator with a configured URL."""
    settings = settings or get_settings()
    secret = (
        settings.backend_api_secret.get_secret_value() if settings.backend_api_secret else None
    )
    timeout = settings.backend_timeout

    def _build(cls: Any, url: str | None) -> Any:
        return cls(url, api_secret=secret, timeout=timeout) if url else None

    orchestrator = create_security_core(
        policy_engine=_build(HttpPolicyBackend, settings.policy_engine_url),
        shield=_build(HttpShieldBackend, settings.shield_url),
        edge_agent=_build(HttpEdgeAgentBackend, settings.edge_agent_url),
        incident_manager=_build(HttpIncidentBackend, settings.incident_manager_url),
        config_manager=_build(HttpConfigBackend, settings.config_manager_url),
    )
    log.info(
        "orchestrator_created",
        mode="simulator" if settings.simulator_mode else "bound",
        policy_engine=bool(settings.policy_engine_url),
        shield=bool(settings.shield_url),
        edge_agent=bool(settings.edge_agent_url),
        incident_manager=bool(settings.incident_manager_url),
        config_manager=bool(settings.config_manager_url),
    )
    return orchestrator
