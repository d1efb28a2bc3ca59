"""Request URL construction for the Azure DevOps REST API."""

from urllib.parse import quote, urlencode

import httpx

from ..sources import AzureDevOpsSource

API_VERSION_PARAM = "api-version"


class AzureDevOpsUrlBuilder:
    """Accumulates route segments and query parameters for one request.

    Routes are joined under ``source.base_url``. A project segment goes in
    front of the other routes regardless of call order. Unless
    ``without_api_version()`` is called, ``api-version`` is appended last.

    Example:
        >>> str(AzureDevOpsUrlBuilder(source).with_project("Web").with_route("_apis/wit/wiql"))
        'https://dev.azure.com/org/Web/_apis/wit/wiql?api-version=6.0'
    """

    def __init__(self, source: AzureDevOpsSource):
        self._source = source
        self._route_parts: list[str] = []
        self._query_params: list[tuple[str, str]] = []
        self._include_api_version = True

    @property
    def source(self) -> AzureDevOpsSource:
        return self._source

    def with_project(self, project: str) -> "AzureDevOpsUrlBuilder":
        self._route_parts.insert(0, project)
        return self

    def with_route(self, route: str) -> "AzureDevOpsUrlBuilder":
        self._route_parts.append(route)
        return self

    def with_query_param(self, key: str, value: str) -> "AzureDevOpsUrlBuilder":
        self._query_params.append((key, value))
        return self

    def without_api_version(self) -> "AzureDevOpsUrlBuilder":
        self._include_api_version = False
        return self

    def get_query_param(self, key: str) -> str | None:
        """Return the first value set for ``key``, or None if it was never set."""
        for name, value in self._query_params:
            if name == key:
                return value
        return None

    def to_string(self) -> str:
        path = "/".join(quote(part, safe="/") for part in self._route_parts)
        url = str(httpx.URL(self._source.base_url).join(path))

        params = list(self._query_params)
        if self._include_api_version:
            params.append((API_VERSION_PARAM, self._source.api_version))

        if not params:
            return url
        return f"{url}?{urlencode(params)}"

    @property
    def length(self) -> int:
        return len(self.to_string())

    def __len__(self) -> int:
        return self.length

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"AzureDevOpsUrlBuilder({self.to_string()!r})"
