"""Work item parsing and forest assembly from flat batch results."""

from typing import Any, Iterable, Sequence

from ..models import HierarchicalWorkItem, WorkItem, WorkItemRelation, WorkItemRelationType
from .api_client_core import log_event

# Azure DevOps link type names for the two hierarchy directions.
HIERARCHY_RELATION_TYPES: dict[str, WorkItemRelationType] = {
    "System.LinkTypes.Hierarchy-Forward": "child",
    "System.LinkTypes.Hierarchy-Reverse": "parent",
}


def map_relation(raw: dict[str, Any]) -> WorkItemRelation | None:
    """Map one raw relation, or return None for non-hierarchy link types."""
    relation_type = HIERARCHY_RELATION_TYPES.get(raw.get("rel", ""))
    if relation_type is None:
        return None
    return WorkItemRelation(type=relation_type, url=raw.get("url", ""))


def map_relations(raw: Iterable[dict[str, Any]] | None) -> list[WorkItemRelation]:
    """Keep only parent/child relations. A missing list maps to []."""
    if not raw:
        return []

    relations: list[WorkItemRelation] = []
    for entry in raw:
        relation = map_relation(entry)
        if relation is not None:
            relations.append(relation)
    return relations


def map_work_item(raw: dict[str, Any]) -> WorkItem:
    """Build a ``WorkItem`` from one entry of a batch details response."""
    fields = raw.get("fields") or {}
    return WorkItem(
        id=raw["id"],
        url=raw["url"],
        state=fields.get("System.State", ""),
        type=fields.get("System.WorkItemType", ""),
        title=fields.get("System.Title", ""),
        relations=tuple(map_relations(raw.get("relations"))),
    )


def _first_parent(item: WorkItem) -> WorkItemRelation | None:
    for relation in item.relations:
        if relation.type == "parent":
            return relation
    return None


def build_hierarchy(items: Sequence[WorkItem]) -> list[HierarchicalWorkItem]:
    """Convert a flat work item list to a forest keyed on work item URLs.

    Items without a parent relation are roots. Items whose parent is not in
    ``items`` (closed, removed, or in another project) are roots too.
    Children keep the order of ``items``; nothing is sorted here.
    """
    # Pass 1: wrap every item; a repeated URL keeps the last wrapper
    nodes = [HierarchicalWorkItem(item=item) for item in items]
    nodes_by_url: dict[str, HierarchicalWorkItem] = {}
    for node in nodes:
        nodes_by_url[node.url] = node

    # Pass 2: link children to parents
    roots: list[HierarchicalWorkItem] = []
    for node in nodes:
        parent = _first_parent(node.item)
        parent_node = nodes_by_url.get(parent.url) if parent is not None else None
        if parent_node is None:
            roots.append(node)
        else:
            parent_node.children.append(node)

    reachable = _count_nodes(roots)
    if reachable < len(nodes):
        log_event(
            f"{len(nodes) - reachable} work item(s) unreachable from any root "
            "(parent relations form a cycle)",
            "HIERARCHY",
        )

    return roots


def _count_nodes(roots: list[HierarchicalWorkItem]) -> int:
    count = 0
    stack = list(roots)
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        count += 1
        stack.extend(node.children)
    return count
