"""Data models for the security orchestration pipeline.

Defines the inbound :class:`SecurityRequest`, the :class:`PolicyDecision`
values returned by the policy engine, the :class:`IncidentSignal` sent to the
incident manager, and the outbound :class:`SecurityResult`.

All models serialise to the camelCase JSON wire format shared with the
external collaborators (``to_dict`` / ``from_dict``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

# Value of IncidentSignal.source for every incident raised by this service
INCIDENT_SOURCE = "llm-security-core"


class RequestKind(StrEnum):
    """What a security request carries."""

    PROMPT = "prompt"
    OUTPUT = "output"
    RUNTIME = "runtime"


class PolicyAction(StrEnum):
    """Action a policy decision asks for."""

    ALLOW = "allow"
    DENY = "deny"
    FILTER = "filter"
    REDACT = "redact"


class FilterMode(StrEnum):
    """Content filter mode understood by the shield."""

    PROMPT = "prompt"
    OUTPUT = "output"


class IncidentType(StrEnum):
    """Types of incident signals."""

    VIOLATION = "violation"
    THRESHOLD = "threshold"
    ANOMALY = "anomaly"


class Severity(StrEnum):
    """Severity levels for violations and incidents."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _parse_enum(enum_cls: type[StrEnum], value: Any, what: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        valid = [member.value for member in enum_cls]
        raise ValueError(f"{what} must be one of {valid}, got: {value!r}") from None


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequestMetadata:
    """Optional caller metadata attached to a request."""

    user_id: str | None = None
    session_id: str | None = None
    timestamp: float | None = None  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting unset fields."""
        out: dict[str, Any] = {}
        if self.user_id is not None:
            out["userId"] = self.user_id
        if self.session_id is not None:
            out["sessionId"] = self.session_id
        if self.timestamp is not None:
            out["timestamp"] = self.timestamp
        return out

    @classmethod
    def from_dict(cls, data: Any) -> RequestMetadata:
        """Create from dictionary."""
        data = _require_mapping(data, "metadata")
        return cls(
            user_id=data.get("userId"),
            session_id=data.get("sessionId"),
            timestamp=data.get("timestamp"),
        )


@dataclass(frozen=True)
class SecurityRequest:
    """A prompt, model output or runtime event to be checked.

    Instances are immutable. The pipeline derives new requests with
    :meth:`with_content` instead of changing the caller's object.
    """

    id: str
    kind: RequestKind
    content: str
    context: dict[str, Any] | None = None
    metadata: RequestMetadata | None = None

    def __post_init__(self) -> None:
        """Validate and normalise fields."""
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("id must be a non-empty string")
        if not isinstance(self.content, str):
            raise ValueError("content must be a string")
        object.__setattr__(self, "kind", _parse_enum(RequestKind, self.kind, "type"))

    def with_content(self, content: str) -> SecurityRequest:
        """Return a copy of this request carrying different content."""
        return replace(self, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "content": self.content,
        }
        if self.context is not None:
            out["context"] = self.context
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Any) -> SecurityRequest:
        """Create from dictionary.

        Accepts ``kind`` as an alias for ``type``.

        Raises:
            ValueError: If the payload is not a valid request.
        """
        data = _require_mapping(data, "request")
        kind = data.get("type", data.get("kind"))
        if kind is None:
            raise ValueError("type is required")
        context = data.get("context")
        if context is not None and not isinstance(context, Mapping):
            raise ValueError("context must be a JSON object")
        metadata = data.get("metadata")
        return cls(
            id=data.get("id"),  # type: ignore[arg-type]  # validated in __post_init__
            kind=kind,
            content=data.get("content"),  # type: ignore[arg-type]
            context=dict(context) if context is not None else None,
            metadata=RequestMetadata.from_dict(metadata) if metadata is not None else None,
        )


# ---------------------------------------------------------------------------
# Policy decisions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PolicyDecision:
    """A single decision returned by the policy engine."""

    policy_id: str
    action: PolicyAction
    reason: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", _parse_enum(PolicyAction, self.action, "action"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        out: dict[str, Any] = {"policyId": self.policy_id, "action": self.action.value}
        if self.reason is not None:
            out["reason"] = self.reason
        return out

    @classmethod
    def from_dict(cls, data: Any) -> PolicyDecision:
        """Create from dictionary."""
        data = _require_mapping(data, "decision")
        policy_id = data.get("policyId")
        if not isinstance(policy_id, str) or not policy_id:
            raise ValueError("policyId must be a non-empty string")
        return cls(policy_id=policy_id, action=data.get("action"), reason=data.get("reason"))


# Used when the policy engine returns no decisions at all
DEFAULT_DECISION = PolicyDecision(policy_id="default", action=PolicyAction.ALLOW)


# ---------------------------------------------------------------------------
# Adapter results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Redaction:
    """A span of content removed or masked by the shield."""

    start: int
    end: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"start": self.start, "end": self.end, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: Any) -> Redaction:
        """Create from dictionary."""
        data = _require_mapping(data, "redaction")
        return cls(start=int(data["start"]), end=int(data["end"]), reason=str(data["reason"]))


@dataclass
class FilterResult:
    """Outcome of a shield filter call."""

    filtered: str
    redactions: list[Redaction] = field(default_factory=list)


@dataclass
class EnforcementResult:
    """Outcome of an edge agent enforcement call."""

    enforced: bool
    modifications: str | None = None


@dataclass
class IncidentReceipt:
    """Acknowledgement returned by the incident manager."""

    incident_id: str


@dataclass
class IncidentSignal:
    """A signal sent to the incident manager."""

    type: IncidentType
    severity: Severity
    source: str = INCIDENT_SOURCE
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "source": self.source,
            "details": self.details,
        }


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Violation:
    """A policy that was violated, with the severity the pipeline assigned."""

    policy: str
    severity: Severity

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"policy": self.policy, "severity": self.severity.value}

    @classmethod
    def from_dict(cls, data: Any) -> Violation:
        """Create from dictionary."""
        data = _require_mapping(data, "violation")
        return cls(
            policy=str(data["policy"]),
            severity=_parse_enum(Severity, data["severity"], "severity"),
        )


@dataclass
class SecurityResult:
    """The single verdict produced for one request.

    Optional fields left as ``None`` are omitted from :meth:`to_dict`.
    """

    request_id: str
    allowed: bool
    filtered: str | None = None
    redactions: list[Redaction] | None = None
    violations: list[Violation] | None = None
    incident_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        out: dict[str, Any] = {"requestId": self.request_id, "allowed": self.allowed}
        if self.filtered is not None:
            out["filtered"] = self.filtered
        if self.redactions is not None:
            out["redactions"] = [r.to_dict() for r in self.redactions]
        if self.violations is not None:
            out["violations"] = [v.to_dict() for v in self.violations]
        if self.incident_id is not None:
            out["incidentId"] = self.incident_id
        return out

    @classmethod
    def from_dict(cls, data: Any) -> SecurityResult:
        """Create from dictionary."""
        data = _require_mapping(data, "result")
        redactions = data.get("redactions")
        violations = data.get("violations")
        return cls(
            request_id=data["requestId"],
            allowed=bool(data["allowed"]),
            filtered=data.get("filtered"),
            redactions=[Redaction.from_dict(r) for r in redactions]
            if redactions is not None
            else None,
            violations=[Violation.from_dict(v) for v in violations]
            if violations is not None
            else None,
            incident_id=data.get("incidentId"),
        )
