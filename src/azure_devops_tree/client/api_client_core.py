"""Azure DevOps API client - Core transport, credentials and error mapping."""

import json
import sys
from datetime import datetime
from typing import Any

import httpx

from ..auth import PAT_PROVIDER_ID, AuthSession, CredentialProvider, PatCredentialProvider, request_headers
from ..models import (
    APIConfiguration,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    TimeoutError,
)


def log_event(message: str, component: str = "CLIENT") -> None:
    """Log an event to stderr with timestamp and consistent formatting."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"[{timestamp}] [{component}] {message}", file=sys.stderr, flush=True)


class _ClientLogger:
    """Lightweight logger that delegates to log_event.

    stdout carries the MCP protocol, so client code writes to stderr
    directly instead of relying on handler configuration.
    """

    def __init__(self, component: str = "CLIENT") -> None:
        self._component = component

    def info(self, msg: object) -> None:
        log_event(str(msg), self._component)

    def warning(self, msg: object) -> None:
        log_event(f"WARNING: {msg}", self._component)

    def error(self, msg: object) -> None:
        log_event(f"ERROR: {msg}", self._component)

    def debug(self, msg: object) -> None:
        log_event(f"DEBUG: {msg}", self._component)


class AzureDevOpsClientCore:
    """Core Azure DevOps API client - transport and response handling."""

    def __init__(
        self,
        config: APIConfiguration,
        credentials: CredentialProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            config: API settings (token, timeout, batch limits)
            credentials: Session source; defaults to the configured PAT
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self.credentials: CredentialProvider = credentials or PatCredentialProvider(config.pat)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client.

        Requests use absolute URLs since one client serves every source.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AzureDevOpsClientCore":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _get_session(self) -> AuthSession:
        """Fetch the credential session; called for every outgoing request."""
        session = await self.credentials.get_session(PAT_PROVIDER_ID, create_if_none=True)
        if session is None:
            raise AuthenticationError("No Azure DevOps session available")
        return session

    async def _send(self, method: str, url: str, operation: str, **kwargs: Any) -> httpx.Response:
        """Send one request, mapping transport failures to NetworkError."""
        session = await self._get_session()
        headers = request_headers(session)
        headers.update(kwargs.pop("headers", None) or {})

        try:
            return await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as err:
            raise TimeoutError(operation) from err
        except httpx.HTTPError as err:
            raise NetworkError(f"{operation} failed: {err}") from err

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            raise AuthenticationError("Invalid personal access token or unauthorized access")

        if response.status_code == 404:
            raise NotFoundError(resource=str(response.request.url))

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None)

        if response.status_code >= 500:
            raise NetworkError(f"Server error: {response.status_code}", status_code=response.status_code)

        if response.status_code >= 400:
            try:
                error_data = response.json()
                message = error_data.get("message", "API request failed")
            except (json.JSONDecodeError, AttributeError):
                message = f"API error: {response.status_code}"
            raise NetworkError(message, status_code=response.status_code)

    async def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle API response and errors."""
        self._raise_for_status(response)

        try:
            return response.json()  # type: ignore[no-any-return]
        except json.JSONDecodeError as err:
            raise NetworkError("Invalid response format from API") from err

    async def get_json(self, url: str, operation: str = "GET") -> dict[str, Any]:
        response = await self._send("GET", url, operation)
        return await self._handle_response(response)

    async def post_json(self, url: str, body: dict[str, Any], operation: str = "POST") -> dict[str, Any]:
        response = await self._send("POST", url, operation, json=body)
        return await self._handle_response(response)

    async def get_text(self, url: str, accept: str, operation: str = "GET") -> str:
        response = await self._send(
            "GET", url, operation, headers={"Accept": accept, "Content-Type": accept}
        )
        self._raise_for_status(response)
        return response.text
