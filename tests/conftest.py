"""Pytest fixtures for LLM Security Core tests."""

import logging
import os
import sys
from unittest.mock import AsyncMock

import pytest
import structlog

from llm_security_core.models import (
    EnforcementResult,
    FilterResult,
    IncidentReceipt,
    PolicyAction,
    PolicyDecision,
)
from llm_security_core.orchestrator import OrchestratorAdapters, SecurityOrchestrator

_BACKEND_ENV_VARS = (
    "POLICY_ENGINE_URL",
    "SHIELD_URL",
    "EDGE_AGENT_URL",
    "INCIDENT_MANAGER_URL",
    "CONFIG_MANAGER_URL",
    "BACKEND_API_SECRET",
)


def quiet_structlog() -> None:
    """Route structlog to stderr and drop everything below CRITICAL."""
    structlog.reset_defaults()
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Run every test in simulator mode with quiet logging.

    Backend URLs from the developer's environment would otherwise switch
    the settings-driven factory into bound mode.
    """
    for name in _BACKEND_ENV_VARS:
        os.environ.pop(name, None)

    from llm_security_core.config import get_settings

    get_settings.cache_clear()
    quiet_structlog()

    yield

    get_settings.cache_clear()


def _decision(policy_id: str, action: PolicyAction | str) -> PolicyDecision:
    return PolicyDecision(policy_id=policy_id, action=action)


@pytest.fixture
def adapters() -> OrchestratorAdapters:
    """Adapter set of AsyncMocks that behave like the simulators.

    Tests override ``return_value`` / ``side_effect`` on the individual
    methods and inspect the recorded calls.
    """
    policy = AsyncMock()
    policy.evaluate = AsyncMock(return_value=[_decision("default", PolicyAction.ALLOW)])

    shield = AsyncMock()
    shield.filter = AsyncMock(side_effect=lambda content, mode: FilterResult(filtered=content))

    edge_agent = AsyncMock()
    edge_agent.enforce = AsyncMock(
        side_effect=lambda request, d: EnforcementResult(enforced=d.action != PolicyAction.DENY)
    )

    incident = AsyncMock()
    incident.emit = AsyncMock(return_value=IncidentReceipt(incident_id="inc-1"))

    config = AsyncMock()
    config.get = AsyncMock(return_value=None)
    config.get_secret = AsyncMock(return_value=None)

    return OrchestratorAdapters(
        policy=policy,
        shield=shield,
        edge_agent=edge_agent,
        incident=incident,
        config=config,
    )


@pytest.fixture
def orchestrator(adapters: OrchestratorAdapters) -> SecurityOrchestrator:
    """Orchestrator wired to the mock adapter set."""
    return SecurityOrchestrator(adapters)


@pytest.fixture
def restore_logging():
    """Drop the handlers setup_logging() added and restore the quiet test config."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    yield

    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    quiet_structlog()
