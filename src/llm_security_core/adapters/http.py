"""HTTP backends for the collaborator services.

Each backend talks JSON to one collaborator over ``httpx``. Bound adapters
wrap them exactly like in-process backends; any :class:`BackendError`
raised here surfaces to the orchestrator as an ``AdapterError``.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from llm_security_core.logging import get_logger
from llm_security_core.models import (
    FilterMode,
    IncidentSignal,
    PolicyDecision,
    SecurityRequest,
)

log = get_logger("llm_security_core.adapters.http")


class BackendError(Exception):
    """Raised when a collaborator service cannot be reached or answers badly."""

    pass


class ServiceClient:
    """Async JSON client for one collaborator service."""

    def __init__(
        self,
        name: str,
        base_url: str,
        api_secret: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            name: Collaborator name used in logs and errors.
            base_url: Base URL of the service.
            api_secret: Shared secret sent as ``X-API-Secret``.
            timeout: Request timeout in seconds.
        """
        self._name = name
        self._base_url = base_url.rstrip("/")
        self._api_secret = api_secret
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

        log.info("backend_client_initialized", backend=name, base_url=self._base_url)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {}
            if self._api_secret:
                headers["X-API-Secret"] = self._api_secret
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            log.debug("backend_client_closed", backend=self._name)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Send a request and decode the JSON body.

        Returns:
            The decoded body, or None for a 404 when ``allow_not_found``.

        Raises:
            BackendError: On connection failure, error status or bad JSON.
        """
        try:
            client = await self._get_client()
            response = await client.request(method, path, json=json)
        except httpx.ConnectError as e:
            log.error("backend_connection_failed", backend=self._name, error=str(e))
            raise BackendError(f"Unable to connect to {self._name}: {e}") from e
        except httpx.RequestError as e:
            log.error("backend_request_failed", backend=self._name, error=str(e))
            raise BackendError(f"{self._name} request failed: {e}") from e

        if allow_not_found and response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise BackendError(f"{self._name} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"{self._name} returned invalid JSON") from e


class HttpPolicyBackend(ServiceClient):
    """LLM-Policy-Engine over HTTP."""

    def __init__(self, base_url: str, api_secret: str | None = None, timeout: float = 10.0):
        super().__init__("policy-engine", base_url, api_secret, timeout)

    async def evaluate(self, request: SecurityRequest) -> list[Any]:
        data = await self._request("POST", "/evaluate", json=request.to_dict())
        if isinstance(data, dict):
            data = data.get("decisions")
        if not isinstance(data, list):
            raise BackendError("policy-engine response has no decisions list")
        return data


class HttpShieldBackend(ServiceClient):
    """LLM-Shield over HTTP."""

    def __init__(self, base_url: str, api_secret: str | None = None, timeout: float = 10.0):
        super().__init__("shield", base_url, api_secret, timeout)

    async def filter(self, content: str, mode: FilterMode) -> dict[str, Any]:
        data: dict[str, Any] = await self._request(
            "POST", "/filter", json={"content": content, "mode": mode.value}
        )
        return data


class HttpEdgeAgentBackend(ServiceClient):
    """LLM-Edge-Agent over HTTP."""

    def __init__(self, base_url: str, api_secret: str | None = None, timeout: float = 10.0):
        super().__init__("edge-agent", base_url, api_secret, timeout)

    async def enforce(self, request: SecurityRequest, decision: PolicyDecision) -> dict[str, Any]:
        data: dict[str, Any] = await self._request(
            "POST",
            "/enforce",
            json={"request": request.to_dict(), "decision": decision.to_dict()},
        )
        return data


class HttpIncidentBackend(ServiceClient):
    """LLM-Incident-Manager over HTTP."""

    def __init__(self, base_url: str, api_secret: str | None = None, timeout: float = 10.0):
        super().__init__("incident-manager", base_url, api_secret, timeout)

    async def emit(self, signal: IncidentSignal) -> dict[str, Any]:
        data: dict[str, Any] = await self._request("POST", "/emit", json=signal.to_dict())
        return data


class HttpConfigBackend(ServiceClient):
    """LLM-Config-Manager over HTTP. Unknown keys (404) read as absent."""

    def __init__(self, base_url: str, api_secret: str | None = None, timeout: float = 10.0):
        super().__init__("config-manager", base_url, api_secret, timeout)

    async def get(self, key: str) -> Any:
        return await self._lookup(f"/config/{quote(key, safe='')}")

    async def get_secret(self, key: str) -> str | None:
        value = await self._lookup(f"/secrets/{quote(key, safe='')}")
        return None if value is None else str(value)

    async def _lookup(self, path: str) -> Any:
        data = await self._request("GET", path, allow_not_found=True)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise BackendError("config-manager response is not a JSON object")
        return data.get("value")
