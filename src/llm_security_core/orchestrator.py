"""Security orchestration pipeline.

Combines the outputs of the five collaborator systems into one verdict
per request. Steps run strictly in order:

1. Policy evaluation
2. Deny short-circuit (first ``deny`` anywhere in the decisions)
3. Filtering via the shield
4. Primary decision selection (``decisions[0]``)
5. Enforcement via the edge agent
6. Enforcement short-circuit
7. Residual violation accounting
8. Success result

Most restrictive wins: an explicit deny raises a ``high`` incident, an
enforcement rejection a ``medium`` one, and residual non-allow decisions a
single ``low`` one. At most one incident is raised per request.

The pipeline holds no mutable state and never catches adapter failures:
an ``AdapterError`` from any step aborts :meth:`SecurityOrchestrator.process`
without a partial result.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from llm_security_core.adapters.base import (
    ConfigAdapter,
    EdgeAgentAdapter,
    IncidentAdapter,
    PolicyAdapter,
    ShieldAdapter,
)
from llm_security_core.logging import get_logger
from llm_security_core.models import (
    DEFAULT_DECISION,
    FilterMode,
    IncidentReceipt,
    IncidentSignal,
    IncidentType,
    PolicyAction,
    PolicyDecision,
    Redaction,
    RequestKind,
    SecurityRequest,
    SecurityResult,
    Severity,
    Violation,
)

log = get_logger("llm_security_core.orchestrator")

_FILTER_ACTIONS = frozenset({PolicyAction.FILTER, PolicyAction.REDACT})
_FILTERED_KINDS = frozenset({RequestKind.PROMPT, RequestKind.OUTPUT})


@dataclass
class OrchestratorAdapters:
    """The adapter set an orchestrator is built from."""

    policy: PolicyAdapter
    shield: ShieldAdapter
    edge_agent: EdgeAgentAdapter
    incident: IncidentAdapter
    config: ConfigAdapter

    async def close(self) -> None:
        """Release any backend resources held by the adapters."""
        for adapter in (self.policy, self.shield, self.edge_agent, self.incident, self.config):
            await adapter.close()


class SecurityOrchestrator:
    """Mediate one security request through policy, shield, edge agent and incidents."""

    def __init__(self, adapters: OrchestratorAdapters) -> None:
        self._adapters = adapters

    @property
    def adapters(self) -> OrchestratorAdapters:
        return self._adapters

    async def close(self) -> None:
        await self._adapters.close()

    async def process(self, request: SecurityRequest) -> SecurityResult:
        """Produce the security verdict for a request.

        Args:
            request: The request to check. It is never modified.

        Returns:
            Exactly one :class:`SecurityResult`.

        Raises:
            AdapterError: If any adapter call fails.
        """
        start = time.perf_counter()

        decisions = list(await self._adapters.policy.evaluate(request))

        deny = next((d for d in decisions if d.action == PolicyAction.DENY), None)
        if deny is not None:
            return await self._reject(request, deny.policy_id, Severity.HIGH, start)

        filtered = request.content
        redactions: list[Redaction] = []
        if _needs_filtering(request, decisions):
            shield_result = await self._adapters.shield.filter(
                request.content, _filter_mode(request.kind)
            )
            filtered = shield_result.filtered
            redactions = shield_result.redactions

        # Enforcement is keyed on the engine's first decision, unlike the
        # deny scan above which looks at all of them.
        primary = decisions[0] if decisions else DEFAULT_DECISION
        enforcement = await self._adapters.edge_agent.enforce(
            request.with_content(filtered), primary
        )
        if not enforcement.enforced:
            return await self._reject(request, primary.policy_id, Severity.MEDIUM, start)

        violations = [
            Violation(policy=d.policy_id, severity=Severity.LOW)
            for d in decisions
            if d.action != PolicyAction.ALLOW
        ]
        incident_id = None
        if violations:
            receipt = await self._emit_violation(request, violations[0].policy, Severity.LOW)
            incident_id = receipt.incident_id

        result = SecurityResult(
            request_id=request.id,
            allowed=True,
            filtered=(
                enforcement.modifications if enforcement.modifications is not None else filtered
            ),
            redactions=redactions,
            violations=violations or None,
            incident_id=incident_id,
        )
        log.info(
            "request_allowed",
            request_id=request.id,
            request_type=request.kind.value,
            redactions=len(redactions),
            violations=len(violations),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return result

    async def _reject(
        self,
        request: SecurityRequest,
        policy: str,
        severity: Severity,
        start: float,
    ) -> SecurityResult:
        """Raise an incident and build a blocking result."""
        await self._emit_violation(request, policy, severity)
        log.info(
            "request_denied" if severity == Severity.HIGH else "enforcement_rejected",
            request_id=request.id,
            request_type=request.kind.value,
            policy=policy,
            severity=severity.value,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return SecurityResult(
            request_id=request.id,
            allowed=False,
            violations=[Violation(policy=policy, severity=severity)],
        )

    async def _emit_violation(
        self,
        request: SecurityRequest,
        policy: str,
        severity: Severity,
    ) -> IncidentReceipt:
        signal = IncidentSignal(
            type=IncidentType.VIOLATION,
            severity=severity,
            details={
                "requestId": request.id,
                "policy": policy,
                "requestType": request.kind.value,
            },
        )
        receipt = await self._adapters.incident.emit(signal)
        log.info(
            "incident_emitted",
            request_id=request.id,
            incident_id=receipt.incident_id,
            policy=policy,
            severity=severity.value,
        )
        return receipt


def _needs_filtering(request: SecurityRequest, decisions: list[PolicyDecision]) -> bool:
    """Prompts and outputs are always filtered; runtime events only on demand."""
    if request.kind in _FILTERED_KINDS:
        return True
    return any(d.action in _FILTER_ACTIONS for d in decisions)


def _filter_mode(kind: RequestKind) -> FilterMode:
    """The shield has no runtime mode; runtime content is filtered as a prompt."""
    if kind == RequestKind.RUNTIME:
        return FilterMode.PROMPT
    return FilterMode(kind.value)
