"""Source nodes: one per configured Azure DevOps deployment."""

from ..client.api_client import AzureDevOpsClient
from ..client.icon_cache import WorkItemIconCache
from ..sources import AzureDevOpsSource
from ..tree import DeferredNode
from .project_node import project_node

SOURCE_NODE_KIND = "azureDevOpsSource"


def source_node(
    client: AzureDevOpsClient,
    source: AzureDevOpsSource,
    icon_cache: WorkItemIconCache | None = None,
) -> DeferredNode:
    """Build a root node listing the projects of ``source`` alphabetically."""

    async def load_children() -> list[DeferredNode]:
        projects = await client.get_projects(source)
        nodes = [project_node(client, source, project, icon_cache) for project in projects]
        return sorted(nodes, key=lambda node: node.title.casefold())

    def resolve_icon() -> str:
        return "server" if source.is_server else "cloud"

    return DeferredNode(
        SOURCE_NODE_KIND,
        source.name,
        tooltip=source.base_url,
        load_children=load_children,
        resolve_icon=resolve_icon,
        key=f"source:{source.base_url}",
    )
