"""Project nodes: children are the project's open work item forest."""

from ..client.api_client import AzureDevOpsClient
from ..client.api_client_core import _ClientLogger
from ..client.icon_cache import WorkItemIconCache
from ..models import DevOpsTreeError, HierarchicalWorkItem
from ..sources import AzureDevOpsSource
from ..tree import DeferredNode
from .work_node import work_node

PROJECT_NODE_KIND = "azureDevOpsProject"


def _work_item_types(roots: list[HierarchicalWorkItem]) -> list[str]:
    types: list[str] = []
    stack = list(roots)
    while stack:
        node = stack.pop()
        if node.item.type and node.item.type not in types:
            types.append(node.item.type)
        stack.extend(node.children)
    return types


async def _cache_icons(
    icon_cache: WorkItemIconCache,
    source: AzureDevOpsSource,
    project: str,
    roots: list[HierarchicalWorkItem],
) -> None:
    # Icons are decoration; a failed download only costs the icon.
    logger = _ClientLogger("ICONS")
    for work_item_type in _work_item_types(roots):
        try:
            await icon_cache.ensure_icon_cached(source, project, work_item_type)
        except (DevOpsTreeError, OSError) as e:
            logger.warning(f"Could not cache icon for {project}/{work_item_type}: {e}")


def project_node(
    client: AzureDevOpsClient,
    source: AzureDevOpsSource,
    project: str,
    icon_cache: WorkItemIconCache | None = None,
) -> DeferredNode:
    """Build a node that loads ``project``'s work items on first expansion."""

    async def load_children() -> list[DeferredNode]:
        ids = await client.query_work_item_ids(source, project)
        roots = await client.get_work_item_hierarchy(source, project, ids)
        if icon_cache is not None:
            await _cache_icons(icon_cache, source, project, roots)
        return [work_node(project, root, icon_cache) for root in roots]

    return DeferredNode(
        PROJECT_NODE_KIND,
        project,
        load_children=load_children,
        key=f"project:{source.base_url}{project}",
    )
