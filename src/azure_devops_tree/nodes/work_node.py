"""Work item nodes."""

from ..client.icon_cache import WorkItemIconCache
from ..models import HierarchicalWorkItem
from ..tree import DeferredNode

WORK_ITEM_NODE_KIND = "azureDevOpsWorkItem"


def work_node(
    project: str,
    work_item: HierarchicalWorkItem,
    icon_cache: WorkItemIconCache | None = None,
) -> DeferredNode:
    """Build a node for ``work_item`` and, recursively, its children.

    The children are known up front, so the node is created loaded and
    shows an expand affordance only when it actually has children.
    """
    item = work_item.item
    children = [work_node(project, child, icon_cache) for child in work_item.children]

    def resolve_icon() -> str | None:
        if icon_cache is None:
            return None
        return icon_cache.get_icon_uri(project, item.type)

    return DeferredNode.preloaded(
        WORK_ITEM_NODE_KIND,
        item.title,
        children,
        description=str(item.id),
        tooltip=item.state,
        resolve_icon=resolve_icon,
        key=f"workitem:{item.url}",
    )
