"""Data models and exceptions for the Azure DevOps tree server."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class APIConfiguration(BaseModel):
    """Settings consumed by the API client."""

    pat: SecretStr | None = None
    timeout: float = Field(default=30.0, gt=0)
    max_batch_size: int = Field(default=500, ge=1)
    max_url_length: int = Field(default=2000, ge=1)


WorkItemRelationType = Literal["parent", "child"]


class WorkItemRelation(BaseModel):
    """A hierarchy link from one work item to another, by work item URL."""

    model_config = ConfigDict(frozen=True)

    type: WorkItemRelationType
    url: str


class WorkItem(BaseModel):
    """A single work item as returned by the batch details endpoint.

    ``url`` is the unique logical address of the item. Relations point at
    other items by that address, never by ``id``.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    url: str
    state: str = ""
    type: str = ""
    title: str = ""
    relations: tuple[WorkItemRelation, ...] = ()


class HierarchicalWorkItem(BaseModel):
    """A work item together with the items that name it as their parent."""

    item: WorkItem
    children: list["HierarchicalWorkItem"] = Field(default_factory=list)

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def url(self) -> str:
        return self.item.url


HierarchicalWorkItem.model_rebuild()


class CollapsibleState(str, Enum):
    """Expand affordance shown by the host for a tree node."""

    NONE = "none"
    COLLAPSED = "collapsed"
    EXPANDED = "expanded"


class TreeItem(BaseModel):
    """Display record for one tree node."""

    label: str
    collapsible_state: CollapsibleState = CollapsibleState.NONE
    description: str = ""
    tooltip: str = ""
    context_value: str = ""
    icon: str | None = None


# Exceptions
class DevOpsTreeError(Exception):
    """Base exception for Azure DevOps tree errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NetworkError(DevOpsTreeError):
    """A request failed at the transport level or returned a non-success status."""

    def __init__(self, message: str = "Network error", status_code: int | None = None):
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class AuthenticationError(NetworkError):
    """Authentication failed or no credential is available."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class NotFoundError(NetworkError):
    """The requested resource does not exist."""

    def __init__(self, resource: str, message: str = "Resource not found"):
        super().__init__(f"{message}: {resource}", status_code=404)
        self.resource = resource


class RateLimitError(NetworkError):
    """The service rejected the request because of rate limiting."""

    def __init__(self, retry_after: int | None = None):
        message = "Rate limit exceeded"
        if retry_after:
            message += f", retry after {retry_after} seconds"
        super().__init__(message, status_code=429)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after


class TimeoutError(NetworkError):  # noqa: A001
    """A request timed out in the transport."""

    def __init__(self, operation: str):
        super().__init__(f"Operation timed out: {operation}")
        self.operation = operation


class UrlTooLongError(DevOpsTreeError):
    """A single-id request URL is still over the configured length budget."""

    def __init__(self, url: str, max_length: int):
        super().__init__(
            f"URL for a single id is {len(url)} characters, over the limit of {max_length}",
            {"url": url, "max_length": max_length},
        )
        self.url = url
        self.max_length = max_length


class MissingQueryParamError(DevOpsTreeError):
    """A URL that had to be split does not carry the expected query parameter."""

    def __init__(self, name: str, url: str):
        super().__init__(f"Query parameter '{name}' missing from {url}", {"name": name, "url": url})
        self.name = name
        self.url = url
