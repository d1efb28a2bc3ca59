"""Shared fixtures for the Azure DevOps tree tests."""

import json
from typing import Any, Callable

import httpx
import pytest
from pydantic import SecretStr

from azure_devops_tree.client import AzureDevOpsClient
from azure_devops_tree.models import APIConfiguration
from azure_devops_tree.sources import AzureDevOpsServicesSource

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def source() -> AzureDevOpsServicesSource:
    return AzureDevOpsServicesSource.for_organization("contoso")


@pytest.fixture
def make_client() -> Callable[..., AzureDevOpsClient]:
    """Build a client whose requests are answered by ``handler``."""

    def factory(handler: Handler, **config: Any) -> AzureDevOpsClient:
        api_config = APIConfiguration(pat=SecretStr("secret-token"), **config)
        return AzureDevOpsClient(api_config, transport=httpx.MockTransport(handler))

    return factory


def raw_work_item(item_id: int, parent: int | None = None, work_item_type: str = "Task") -> dict[str, Any]:
    """A batch details entry as the REST API returns it."""
    relations = []
    if parent is not None:
        relations.append({
            "rel": "System.LinkTypes.Hierarchy-Reverse",
            "url": f"https://dev.azure.com/contoso/_apis/wit/workItems/{parent}",
        })
    return {
        "id": item_id,
        "url": f"https://dev.azure.com/contoso/_apis/wit/workItems/{item_id}",
        "fields": {
            "System.State": "Active",
            "System.WorkItemType": work_item_type,
            "System.Title": f"Item {item_id}",
        },
        "relations": relations or None,
    }


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"Content-Type": "application/json"})
