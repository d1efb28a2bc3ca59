"""Server configuration loaded from the environment."""

import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import APIConfiguration
from .sources import AzureDevOpsServerSource, AzureDevOpsServicesSource, AzureDevOpsSource


class ServerSettings(BaseModel):
    """A self-hosted Azure DevOps Server entry."""

    scheme: Literal["https", "http"] = "https"
    instance: str
    port: int = 8080
    collection: str = "DefaultCollection"


class ServerConfig(BaseSettings):
    """Configuration for the Azure DevOps tree server.

    Values come from ``AZURE_DEVOPS_*`` environment variables or a ``.env``
    file. List values (organizations, servers) are given as JSON.
    """

    model_config = SettingsConfigDict(
        env_prefix="AZURE_DEVOPS_",
        env_file=".env",
        extra="ignore",
    )

    pat: SecretStr | None = Field(default=None, description="Personal access token")
    organizations: list[str] = Field(default_factory=list)
    servers: list[ServerSettings] = Field(default_factory=list)
    timeout: float = Field(default=30.0, gt=0)
    max_batch_size: int = Field(default=500, ge=1)
    max_url_length: int = Field(default=2000, ge=1)
    storage_dir: Path = Field(default=Path.home() / ".azure-devops-tree")
    log_level: str = "INFO"

    def get_api_config(self) -> APIConfiguration:
        return APIConfiguration(
            pat=self.pat,
            timeout=self.timeout,
            max_batch_size=self.max_batch_size,
            max_url_length=self.max_url_length,
        )

    def get_sources(self) -> list[AzureDevOpsSource]:
        """Return one source per configured organization, then per server."""
        sources: list[AzureDevOpsSource] = [
            AzureDevOpsServicesSource.for_organization(org) for org in self.organizations
        ]
        for server in self.servers:
            sources.append(
                AzureDevOpsServerSource.for_instance(
                    server.instance,
                    scheme=server.scheme,
                    collection=server.collection,
                    port=server.port,
                )
            )
        return sources

    @property
    def icons_dir(self) -> Path:
        return self.storage_dir / "icons"


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout belongs to the MCP transport."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    has_console = any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in root.handlers
    )
    if not has_console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root.addHandler(handler)
