"""Sync and async clients for the Agent Editor REST API."""

import logging
from typing import Any

import httpx

from agent_editor.config import Settings
from agent_editor.constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from agent_editor.exceptions import (
    AgentEditorError,
    AuthenticationError,
    NotFoundError,
    ServerError,
    TransportError,
    ValidationError,
)
from agent_editor.models import (
    AgentDetail,
    ConfigVersion,
    CreatedVersion,
    CreateVersionRequest,
    ExportSnapshot,
)

logger = logging.getLogger(__name__)


def _handle_error(response: httpx.Response) -> None:
    """Raise appropriate exception for error responses.

    Error bodies look like ``{"success": false, "error": "...",
    "details": [{"path": [...], "message": "..."}], "warnings": [...]}``.
    """
    status = response.status_code
    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    error = data.get("error") or data.get("detail") or response.text or response.reason_phrase
    details = data.get("details") or []
    warnings = data.get("warnings") or []
    method = response.request.method
    path = response.request.url.path

    if status in (400, 422):
        raise ValidationError(error, status_code=status, details=details, warnings=warnings)
    elif status == 401:
        raise AuthenticationError(f"Authentication failed: {error}", status_code=401)
    elif status == 404:
        raise NotFoundError(f"Not found: {error}", status_code=404)
    elif status >= 500:
        raise ServerError(f"Server error: {error}", status_code=status, details=details)
    else:
        raise AgentEditorError(
            f"Failed to {method} {path}: {error}",
            status_code=status,
            details=details,
            warnings=warnings,
        )


def _unwrap(response: httpx.Response) -> Any:
    """Return the ``data`` member of a successful response envelope."""
    body = response.json()
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _version_payload(
    merged_config: dict[str, Any],
    notes: str,
    global_prompt: str | None,
    rag_enabled: bool,
    rag_config_id: str | None,
    voice_config_id: str | None,
    auto_activate: bool,
) -> dict[str, Any]:
    request = CreateVersionRequest(
        config_json=merged_config,
        notes=notes,
        global_prompt=global_prompt,
        rag_enabled=rag_enabled,
        rag_config_id=rag_config_id,
        voice_config_id=voice_config_id,
        auto_activate=auto_activate,
    )
    return request.model_dump(by_alias=True)


def _build_headers(api_key: str | None) -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


class AgentEditorClient:
    """Synchronous client for the Agent Editor API.

    Example:
        with AgentEditorClient(base_url="http://localhost:3000") as client:
            agent = client.get_agent("agent-123")
            print(agent.active_version.version)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Agent Editor API base URL.
            api_key: Optional API key for authentication.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests, proxies).
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgentEditorClient":
        return cls(
            base_url=settings.base_url,
            api_key=settings.api_key or None,
            timeout=settings.timeout,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create httpx client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=_build_headers(self.api_key),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = self._get_client()
        try:
            response = client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"Failed to {method} {path}: {e}") from e

        if not response.is_success:
            _handle_error(response)

        return _unwrap(response)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "AgentEditorClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def get_agent(self, agent_id: str) -> AgentDetail:
        """Get agent detail including the active version.

        Raises:
            NotFoundError: If the agent does not exist.
            AgentEditorError: For other errors.
        """
        data = self._request("GET", f"/api/agents/{agent_id}")
        return AgentDetail.model_validate(data)

    def list_versions(self, agent_id: str) -> list[ConfigVersion]:
        """List all versions of an agent, newest first."""
        data = self._request("GET", f"/api/agents/{agent_id}/versions")
        return [ConfigVersion.model_validate(item) for item in data]

    def commit_version(
        self,
        agent_id: str,
        merged_config: dict[str, Any],
        *,
        notes: str,
        global_prompt: str | None = None,
        rag_enabled: bool = False,
        rag_config_id: str | None = None,
        voice_config_id: str | None = None,
        auto_activate: bool = True,
    ) -> CreatedVersion:
        """Create a new immutable version, activating it by default.

        Returns:
            CreatedVersion with the new version's id and number.

        Raises:
            ValidationError: If the server rejects the configuration.
            TransportError: If the request could not be sent.
            AgentEditorError: For other errors.
        """
        payload = _version_payload(
            merged_config,
            notes,
            global_prompt,
            rag_enabled,
            rag_config_id,
            voice_config_id,
            auto_activate,
        )
        data = self._request("POST", f"/api/agents/{agent_id}/versions", json=payload)
        created = CreatedVersion.model_validate(data)
        logger.info(f"Committed agent {agent_id} version {created.version}")
        return created

    def activate_version(self, agent_id: str, version_id: str) -> ConfigVersion:
        """Make an existing version the active one."""
        data = self._request("PUT", f"/api/agents/{agent_id}/versions/{version_id}/activate")
        return ConfigVersion.model_validate(data)

    def export_agent(self, agent_id: str, version: int | None = None) -> ExportSnapshot:
        """Fetch a flattened export snapshot (active version unless given)."""
        params = {"version": version} if version else None
        data = self._request("GET", f"/api/agents/{agent_id}/export", params=params)
        return ExportSnapshot.model_validate(data)


class AsyncAgentEditorClient:
    """Asynchronous client for the Agent Editor API.

    Example:
        async with AsyncAgentEditorClient(base_url="http://localhost:3000") as client:
            agent = await client.get_agent("agent-123")
            created = await client.commit_version(
                agent.id,
                agent.active_version.config_json,
                notes="Re-commit current config",
            )
            print(created.version)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Agent Editor API base URL.
            api_key: Optional API key for authentication.
            timeout: Request timeout in seconds.
            transport: Optional httpx async transport (tests, proxies).
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AsyncAgentEditorClient":
        return cls(
            base_url=settings.base_url,
            api_key=settings.api_key or None,
            timeout=settings.timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=_build_headers(self.api_key),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"Failed to {method} {path}: {e}") from e

        if not response.is_success:
            _handle_error(response)

        return _unwrap(response)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncAgentEditorClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_agent(self, agent_id: str) -> AgentDetail:
        """Get agent detail including the active version."""
        data = await self._request("GET", f"/api/agents/{agent_id}")
        return AgentDetail.model_validate(data)

    async def list_versions(self, agent_id: str) -> list[ConfigVersion]:
        """List all versions of an agent, newest first."""
        data = await self._request("GET", f"/api/agents/{agent_id}/versions")
        return [ConfigVersion.model_validate(item) for item in data]

    async def commit_version(
        self,
        agent_id: str,
        merged_config: dict[str, Any],
        *,
        notes: str,
        global_prompt: str | None = None,
        rag_enabled: bool = False,
        rag_config_id: str | None = None,
        voice_config_id: str | None = None,
        auto_activate: bool = True,
    ) -> CreatedVersion:
        """Create a new immutable version asynchronously.

        Raises:
            ValidationError: If the server rejects the configuration.
            TransportError: If the request could not be sent.
            AgentEditorError: For other errors.
        """
        payload = _version_payload(
            merged_config,
            notes,
            global_prompt,
            rag_enabled,
            rag_config_id,
            voice_config_id,
            auto_activate,
        )
        data = await self._request("POST", f"/api/agents/{agent_id}/versions", json=payload)
        created = CreatedVersion.model_validate(data)
        logger.info(f"Committed agent {agent_id} version {created.version}")
        return created

    async def activate_version(self, agent_id: str, version_id: str) -> ConfigVersion:
        """Make an existing version the active one."""
        data = await self._request(
            "PUT", f"/api/agents/{agent_id}/versions/{version_id}/activate"
        )
        return ConfigVersion.model_validate(data)

    async def export_agent(self, agent_id: str, version: int | None = None) -> ExportSnapshot:
        """Fetch a flattened export snapshot (active version unless given)."""
        params = {"version": version} if version else None
        data = await self._request("GET", f"/api/agents/{agent_id}/export", params=params)
        return ExportSnapshot.model_validate(data)
