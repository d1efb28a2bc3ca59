"""Azure DevOps API client - projects, work item queries and batch details."""

from typing import Any, Sequence

from ..models import HierarchicalWorkItem, NetworkError, WorkItem
from ..sources import AzureDevOpsSource
from .api_client_core import AzureDevOpsClientCore, _ClientLogger
from .batching import IDS_PARAM, fetch_all
from .hierarchy import build_hierarchy, map_work_item
from .url_builder import AzureDevOpsUrlBuilder

PROJECTS_ROUTE = "_apis/projects"
WIQL_ROUTE = "_apis/wit/wiql"
WORK_ITEMS_ROUTE = "_apis/wit/workitems"
WORK_ITEM_TYPES_ROUTE = "_apis/wit/workitemtypes"

# States excluded from the tree; everything else counts as open.
CLOSED_STATES = ("Closed", "Removed")


def build_wiql_query(project: str) -> str:
    """WIQL selecting the project's open work items, highest priority first."""
    escaped = project.replace("'", "''")
    state_filter = " AND ".join(f"[State] <> '{state}'" for state in CLOSED_STATES)
    return (
        "Select [System.Id], [System.AssignedTo], [System.State], [System.Title], [System.Tags] "
        "From WorkItems "
        f"Where [System.TeamProject] = '{escaped}' AND {state_filter} "
        "order by [Microsoft.VSTS.Common.Priority] asc, [System.CreatedDate] desc"
    )


class AzureDevOpsClient(AzureDevOpsClientCore):
    """Read-only Azure DevOps client used to populate the tree."""

    async def get_projects(self, source: AzureDevOpsSource) -> list[str]:
        """Return the names of all projects visible in ``source``."""
        url = AzureDevOpsUrlBuilder(source).with_route(PROJECTS_ROUTE).to_string()
        data = await self.get_json(url, "get_projects")
        return [project["name"] for project in data.get("value", []) or []]

    async def query_work_item_ids(self, source: AzureDevOpsSource, project: str) -> list[int]:
        """Run the open-items WIQL query for ``project`` and return the ids."""
        url = AzureDevOpsUrlBuilder(source).with_project(project).with_route(WIQL_ROUTE).to_string()
        data = await self.post_json(url, {"query": build_wiql_query(project)}, "query_work_item_ids")
        return [int(item["id"]) for item in data.get("workItems", []) or []]

    def work_items_url(
        self, source: AzureDevOpsSource, project: str, ids: Sequence[str]
    ) -> AzureDevOpsUrlBuilder:
        """Batch details URL for ``ids`` with relations expanded."""
        return (
            AzureDevOpsUrlBuilder(source)
            .with_project(project)
            .with_route(WORK_ITEMS_ROUTE)
            .with_query_param(IDS_PARAM, ",".join(ids))
            .with_query_param("$expand", "relations")
        )

    async def _fetch_work_item_batch(self, url: str) -> list[WorkItem]:
        data = await self.get_json(url, "get_work_items")
        return [map_work_item(raw) for raw in data.get("value", []) or []]

    async def get_work_items(
        self, source: AzureDevOpsSource, project: str, ids: Sequence[int]
    ) -> list[WorkItem]:
        """Fetch details for ``ids`` in as many requests as the API limits need."""
        return await fetch_all(
            ids,
            self.config.max_batch_size,
            self.config.max_url_length,
            lambda chunk_ids: self.work_items_url(source, project, chunk_ids),
            self._fetch_work_item_batch,
        )

    async def get_work_item_hierarchy(
        self, source: AzureDevOpsSource, project: str, ids: Sequence[int]
    ) -> list[HierarchicalWorkItem]:
        """Fetch ``ids`` and assemble them into a parent/child forest."""
        items = await self.get_work_items(source, project, ids)
        roots = build_hierarchy(items)
        _ClientLogger("HIERARCHY").info(
            f"{project}: {len(items)} work item(s), {len(roots)} root(s)"
        )
        return roots

    async def get_work_item_icon_url(
        self, source: AzureDevOpsSource, project: str, work_item_type: str
    ) -> str:
        """Look up the icon URL for a work item type."""
        url = (
            AzureDevOpsUrlBuilder(source)
            .with_project(project)
            .with_route(WORK_ITEM_TYPES_ROUTE)
            .with_route(work_item_type)
            .to_string()
        )
        data: dict[str, Any] = await self.get_json(url, "get_work_item_icon_url")
        icon_url = (data.get("icon") or {}).get("url")
        if not icon_url:
            raise NetworkError(f"Work item type '{work_item_type}' has no icon URL")
        return str(icon_url)

    async def download_icon(self, url: str) -> str:
        """Download an SVG icon and return its text."""
        return await self.get_text(url, "image/svg+xml", "download_icon")
