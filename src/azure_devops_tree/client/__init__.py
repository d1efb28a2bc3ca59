"""Azure DevOps REST client."""

from .api_client import AzureDevOpsClient
from .api_client_core import AzureDevOpsClientCore, log_event
from .batching import fetch_all, plan_batches
from .hierarchy import build_hierarchy, map_relations, map_work_item
from .icon_cache import WorkItemIconCache
from .url_builder import AzureDevOpsUrlBuilder

__all__ = [
    "AzureDevOpsClient",
    "AzureDevOpsClientCore",
    "AzureDevOpsUrlBuilder",
    "WorkItemIconCache",
    "build_hierarchy",
    "fetch_all",
    "log_event",
    "map_relations",
    "map_work_item",
    "plan_batches",
]
