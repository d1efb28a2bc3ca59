"""Credential sessions and request headers for Azure DevOps."""

import base64
from typing import Protocol

from pydantic import BaseModel, ConfigDict, SecretStr

from .models import AuthenticationError

PAT_PROVIDER_ID = "AzureDevOpsPAT"


class AuthSession(BaseModel):
    """An authenticated session carrying a personal access token."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    id: str = PAT_PROVIDER_ID
    account_label: str = "Azure DevOps Personal Access Token"


class CredentialProvider(Protocol):
    """Anything that can hand out an ``AuthSession`` for a provider id."""

    async def get_session(self, provider_id: str, create_if_none: bool = False) -> AuthSession | None:
        ...


class PatCredentialProvider:
    """Serves the configured personal access token as a session."""

    def __init__(self, pat: SecretStr | None):
        self._pat = pat

    async def get_session(self, provider_id: str, create_if_none: bool = False) -> AuthSession | None:
        if provider_id != PAT_PROVIDER_ID:
            raise AuthenticationError(f"Unknown credential provider: {provider_id}")

        token = self._pat.get_secret_value() if self._pat is not None else ""
        if token:
            return AuthSession(access_token=token)
        if create_if_none:
            # No interactive prompt here; the token has to come from configuration.
            raise AuthenticationError("PAT is required; set AZURE_DEVOPS_PAT")
        return None


def basic_auth_value(session: AuthSession) -> str:
    encoded = base64.b64encode(f":{session.access_token}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def request_headers(session: AuthSession) -> dict[str, str]:
    """Headers for a JSON request authenticated with ``session``."""
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "Authorization": basic_auth_value(session),
    }
