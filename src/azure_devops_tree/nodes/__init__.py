"""Node kinds for the Azure DevOps tree."""

from .project_node import PROJECT_NODE_KIND, project_node
from .source_node import SOURCE_NODE_KIND, source_node
from .work_node import WORK_ITEM_NODE_KIND, work_node

__all__ = [
    "PROJECT_NODE_KIND",
    "SOURCE_NODE_KIND",
    "WORK_ITEM_NODE_KIND",
    "project_node",
    "source_node",
    "work_node",
]
