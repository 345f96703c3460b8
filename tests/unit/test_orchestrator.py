"""Tests for the security orchestration pipeline."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from llm_security_core.errors import AdapterError
from llm_security_core.factory import create_security_core
from llm_security_core.models import (
    DEFAULT_DECISION,
    INCIDENT_SOURCE,
    EnforcementResult,
    FilterMode,
    FilterResult,
    IncidentType,
    PolicyAction,
    PolicyDecision,
    Redaction,
    RequestKind,
    SecurityRequest,
    Severity,
    Violation,
)


def _request(
    kind: RequestKind = RequestKind.PROMPT,
    content: str = "hello",
    request_id: str = "req-1",
) -> SecurityRequest:
    return SecurityRequest(id=request_id, kind=kind, content=content)


def _decision(policy_id: str, action: PolicyAction) -> PolicyDecision:
    return PolicyDecision(policy_id=policy_id, action=action)


class TestAllowPath:
    """Requests that pass every stage."""

    @pytest.mark.asyncio
    async def test_default_allow(self, orchestrator, adapters):
        result = await orchestrator.process(_request(content="hi", request_id="r1"))

        assert result.request_id == "r1"
        assert result.allowed is True
        assert result.filtered == "hi"
        assert result.redactions == []
        assert result.violations is None
        assert result.incident_id is None
        adapters.incident.emit.assert_not_called()

    @pytest.mark.asyncio
    async def test_prompt_filtered_in_prompt_mode(self, orchestrator, adapters):
        await orchestrator.process(_request(content="secret"))
        adapters.shield.filter.assert_awaited_once_with("secret", FilterMode.PROMPT)

    @pytest.mark.asyncio
    async def test_output_filtered_in_output_mode(self, orchestrator, adapters):
        await orchestrator.process(_request(kind=RequestKind.OUTPUT, content="model says"))
        adapters.shield.filter.assert_awaited_once_with("model says", FilterMode.OUTPUT)

    @pytest.mark.asyncio
    async def test_shield_redactions_are_reported(self, orchestrator, adapters):
        redaction = Redaction(start=8, end=19, reason="pii")
        adapters.shield.filter = AsyncMock(
            return_value=FilterResult(filtered="call me [REDACTED]", redactions=[redaction])
        )

        result = await orchestrator.process(_request(content="call me 555-0100123"))

        assert result.allowed is True
        assert result.filtered == "call me [REDACTED]"
        assert result.redactions == [redaction]

    @pytest.mark.asyncio
    async def test_edge_agent_sees_filtered_content(self, orchestrator, adapters):
        adapters.shield.filter = AsyncMock(return_value=FilterResult(filtered="[REDACTED]"))
        request = _request(content="my password is hunter2")

        await orchestrator.process(request)

        enforced_request, decision = adapters.edge_agent.enforce.await_args.args
        assert enforced_request.content == "[REDACTED]"
        assert enforced_request.id == request.id
        assert enforced_request.kind == request.kind
        assert decision == DEFAULT_DECISION

    @pytest.mark.asyncio
    async def test_request_is_not_mutated(self, orchestrator, adapters):
        adapters.shield.filter = AsyncMock(return_value=FilterResult(filtered="[REDACTED]"))
        request = _request(content="original")

        await orchestrator.process(request)

        assert request.content == "original"

    @pytest.mark.asyncio
    async def test_modifications_replace_filtered_content(self, orchestrator, adapters):
        adapters.edge_agent.enforce = AsyncMock(
            return_value=EnforcementResult(enforced=True, modifications="rewritten")
        )

        result = await orchestrator.process(_request(content="raw"))

        assert result.filtered == "rewritten"

    @pytest.mark.asyncio
    async def test_empty_modifications_still_replace_content(self, orchestrator, adapters):
        adapters.edge_agent.enforce = AsyncMock(
            return_value=EnforcementResult(enforced=True, modifications="")
        )

        result = await orchestrator.process(_request(content="raw"))

        assert result.filtered == ""

    @pytest.mark.asyncio
    async def test_empty_decisions_enforce_default(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[])

        result = await orchestrator.process(_request())

        _, decision = adapters.edge_agent.enforce.await_args.args
        assert decision == DEFAULT_DECISION
        assert result.allowed is True
        assert result.violations is None
        adapters.incident.emit.assert_not_called()


class TestRuntimeRequests:
    """Runtime events are filtered only when a decision asks for it."""

    @pytest.mark.asyncio
    async def test_runtime_not_filtered_by_default(self, orchestrator, adapters):
        result = await orchestrator.process(_request(kind=RequestKind.RUNTIME, content="evt"))

        adapters.shield.filter.assert_not_called()
        assert result.allowed is True
        assert result.filtered == "evt"
        assert result.redactions == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [PolicyAction.FILTER, PolicyAction.REDACT])
    async def test_runtime_filtered_on_demand_in_prompt_mode(self, orchestrator, adapters, action):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p-rt", action)])

        await orchestrator.process(_request(kind=RequestKind.RUNTIME, content="evt"))

        adapters.shield.filter.assert_awaited_once_with("evt", FilterMode.PROMPT)


class TestDenyShortCircuit:
    """Any explicit deny blocks the request before filtering."""

    @pytest.mark.asyncio
    async def test_deny_blocks_with_high_violation(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p1", PolicyAction.DENY)])

        result = await orchestrator.process(_request())

        assert result.allowed is False
        assert result.violations == [Violation(policy="p1", severity=Severity.HIGH)]
        assert result.filtered is None
        assert result.redactions is None
        assert result.incident_id is None
        adapters.incident.emit.assert_awaited_once()
        signal = adapters.incident.emit.await_args.args[0]
        assert signal.severity == Severity.HIGH

    @pytest.mark.asyncio
    async def test_deny_skips_shield_and_edge_agent(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p1", PolicyAction.DENY)])

        await orchestrator.process(_request())

        adapters.shield.filter.assert_not_called()
        adapters.edge_agent.enforce.assert_not_called()

    @pytest.mark.asyncio
    async def test_first_deny_anywhere_wins(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(
            return_value=[
                _decision("allow-a", PolicyAction.ALLOW),
                _decision("filter-b", PolicyAction.FILTER),
                _decision("deny-c", PolicyAction.DENY),
                _decision("deny-d", PolicyAction.DENY),
            ]
        )

        result = await orchestrator.process(_request())

        assert result.violations == [Violation(policy="deny-c", severity=Severity.HIGH)]
        adapters.incident.emit.assert_awaited_once()
        assert adapters.incident.emit.await_args.args[0].details["policy"] == "deny-c"

    @pytest.mark.asyncio
    async def test_deny_on_runtime_request(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("rt", PolicyAction.DENY)])

        result = await orchestrator.process(_request(kind=RequestKind.RUNTIME))

        assert result.allowed is False
        signal = adapters.incident.emit.await_args.args[0]
        assert signal.details["requestType"] == "runtime"


class TestEnforcementShortCircuit:
    """An unenforced primary decision blocks with a medium violation."""

    @pytest.mark.asyncio
    async def test_not_enforced_blocks_with_medium_violation(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p-edge", PolicyAction.FILTER)])
        adapters.edge_agent.enforce = AsyncMock(return_value=EnforcementResult(enforced=False))

        result = await orchestrator.process(_request())

        assert result.allowed is False
        assert result.violations == [Violation(policy="p-edge", severity=Severity.MEDIUM)]
        adapters.incident.emit.assert_awaited_once()
        assert adapters.incident.emit.await_args.args[0].severity == Severity.MEDIUM

    @pytest.mark.asyncio
    async def test_rejection_discards_shield_output(self, orchestrator, adapters):
        adapters.shield.filter = AsyncMock(
            return_value=FilterResult(
                filtered="[REDACTED]", redactions=[Redaction(start=0, end=4, reason="pii")]
            )
        )
        adapters.edge_agent.enforce = AsyncMock(return_value=EnforcementResult(enforced=False))

        result = await orchestrator.process(_request(content="abcd"))

        assert result.filtered is None
        assert result.redactions is None

    @pytest.mark.asyncio
    async def test_primary_is_first_decision_not_first_non_allow(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(
            return_value=[
                _decision("allow-first", PolicyAction.ALLOW),
                _decision("filter-second", PolicyAction.FILTER),
            ]
        )
        adapters.edge_agent.enforce = AsyncMock(return_value=EnforcementResult(enforced=False))

        result = await orchestrator.process(_request())

        _, decision = adapters.edge_agent.enforce.await_args.args
        assert decision.policy_id == "allow-first"
        assert result.violations == [Violation(policy="allow-first", severity=Severity.MEDIUM)]

    @pytest.mark.asyncio
    async def test_empty_decisions_rejection_uses_default_policy(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[])
        adapters.edge_agent.enforce = AsyncMock(return_value=EnforcementResult(enforced=False))

        result = await orchestrator.process(_request())

        assert result.violations == [Violation(policy="default", severity=Severity.MEDIUM)]


class TestResidualViolations:
    """Non-allow decisions that survive enforcement become low violations."""

    @pytest.mark.asyncio
    async def test_filter_decision_with_modifications(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p2", PolicyAction.FILTER)])
        adapters.edge_agent.enforce = AsyncMock(
            return_value=EnforcementResult(enforced=True, modifications="clean text")
        )

        result = await orchestrator.process(_request(content="dirty text"))

        assert result.allowed is True
        assert result.filtered == "clean text"
        assert result.violations == [Violation(policy="p2", severity=Severity.LOW)]
        assert result.incident_id == "inc-1"
        adapters.incident.emit.assert_awaited_once()
        assert adapters.incident.emit.await_args.args[0].severity == Severity.LOW

    @pytest.mark.asyncio
    async def test_every_non_allow_listed_in_order_with_one_incident(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(
            return_value=[
                _decision("a", PolicyAction.ALLOW),
                _decision("f", PolicyAction.FILTER),
                _decision("b", PolicyAction.ALLOW),
                _decision("r", PolicyAction.REDACT),
            ]
        )

        result = await orchestrator.process(_request())

        assert result.violations == [
            Violation(policy="f", severity=Severity.LOW),
            Violation(policy="r", severity=Severity.LOW),
        ]
        adapters.incident.emit.assert_awaited_once()
        assert adapters.incident.emit.await_args.args[0].details["policy"] == "f"

    @pytest.mark.asyncio
    async def test_all_allow_has_no_violations(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(
            return_value=[_decision("a", PolicyAction.ALLOW), _decision("b", PolicyAction.ALLOW)]
        )

        result = await orchestrator.process(_request())

        assert result.violations is None
        assert result.incident_id is None


class TestIncidentSignal:
    """Shape of the signal sent to the incident manager."""

    @pytest.mark.asyncio
    async def test_signal_fields(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p1", PolicyAction.DENY)])

        await orchestrator.process(_request(kind=RequestKind.OUTPUT, request_id="req-42"))

        signal = adapters.incident.emit.await_args.args[0]
        assert signal.type == IncidentType.VIOLATION
        assert signal.source == INCIDENT_SOURCE
        assert signal.details == {
            "requestId": "req-42",
            "policy": "p1",
            "requestType": "output",
        }


class TestAdapterFailures:
    """Adapter errors abort processing without a result."""

    @pytest.mark.asyncio
    async def test_policy_failure_propagates(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(side_effect=AdapterError("policy", "down"))

        with pytest.raises(AdapterError, match="policy adapter failed: down"):
            await orchestrator.process(_request())

        adapters.shield.filter.assert_not_called()

    @pytest.mark.asyncio
    async def test_shield_failure_propagates(self, orchestrator, adapters):
        adapters.shield.filter = AsyncMock(side_effect=AdapterError("shield", "timeout"))

        with pytest.raises(AdapterError):
            await orchestrator.process(_request())

        adapters.edge_agent.enforce.assert_not_called()

    @pytest.mark.asyncio
    async def test_incident_failure_on_deny_propagates(self, orchestrator, adapters):
        adapters.policy.evaluate = AsyncMock(return_value=[_decision("p1", PolicyAction.DENY)])
        adapters.incident.emit = AsyncMock(side_effect=AdapterError("incident", "503"))

        with pytest.raises(AdapterError) as exc_info:
            await orchestrator.process(_request())

        assert exc_info.value.adapter == "incident"


class TestLifecycle:
    """Tests for adapter ownership."""

    def test_adapters_property(self, orchestrator, adapters):
        assert orchestrator.adapters is adapters

    @pytest.mark.asyncio
    async def test_close_closes_every_adapter(self, orchestrator, adapters):
        await orchestrator.close()

        for adapter in (
            adapters.policy,
            adapters.shield,
            adapters.edge_agent,
            adapters.incident,
            adapters.config,
        ):
            adapter.close.assert_awaited_once()


class TestWithSimulators:
    """End-to-end through the simulator adapters."""

    @pytest.mark.asyncio
    async def test_simulators_allow_everything(self):
        orchestrator = create_security_core()

        result = await orchestrator.process(_request(content="hi", request_id="r1"))

        assert result.to_dict() == {
            "requestId": "r1",
            "allowed": True,
            "filtered": "hi",
            "redactions": [],
        }

    @pytest.mark.asyncio
    async def test_deny_from_bound_policy_uses_simulated_incident(self):
        class DenyAll:
            async def evaluate(self, request):
                return [{"policyId": "p1", "action": "deny"}]

        orchestrator = create_security_core(policy_engine=DenyAll())

        result = await orchestrator.process(_request())

        assert result.to_dict() == {
            "requestId": "req-1",
            "allowed": False,
            "violations": [{"policy": "p1", "severity": "high"}],
        }

    @pytest.mark.asyncio
    async def test_orchestrator_is_reusable(self):
        orchestrator = create_security_core()

        first = await orchestrator.process(_request(request_id="a"))
        second = await orchestrator.process(_request(request_id="b"))

        assert first.request_id == "a"
        assert second.request_id == "b"
