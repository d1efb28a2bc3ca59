"""Azure DevOps deployments that can be browsed as tree roots."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_VERSION = "6.0"


class AzureDevOpsSource(BaseModel):
    """One Azure DevOps deployment.

    ``base_url`` always ends with a slash so routes can be joined onto it.
    Sources are never merged; each one becomes its own root node.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    name: str
    api_version: str = DEFAULT_API_VERSION

    @property
    def is_server(self) -> bool:
        return False


class AzureDevOpsServicesSource(AzureDevOpsSource):
    """Cloud-hosted Azure DevOps (dev.azure.com)."""

    organization: str

    @classmethod
    def for_organization(cls, organization: str) -> "AzureDevOpsServicesSource":
        return cls(
            organization=organization,
            base_url=f"https://dev.azure.com/{organization}/",
            name=organization,
        )


class AzureDevOpsServerSource(AzureDevOpsSource):
    """Self-hosted Azure DevOps Server instance."""

    scheme: str = "https"
    instance_name: str
    collection: str = "DefaultCollection"
    port: int = Field(default=8080, gt=0)

    @classmethod
    def for_instance(
        cls,
        instance_name: str,
        scheme: str = "https",
        collection: str = "DefaultCollection",
        port: int = 8080,
    ) -> "AzureDevOpsServerSource":
        return cls(
            scheme=scheme,
            instance_name=instance_name,
            collection=collection,
            port=port,
            base_url=f"{scheme}://{instance_name}:{port}/{collection}/",
            name=instance_name,
        )

    @property
    def is_server(self) -> bool:
        return True
