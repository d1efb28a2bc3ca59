"""Azure DevOps work item tree MCP server implementation using FastMCP."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastmcp import FastMCP

from .client import AzureDevOpsClient, WorkItemIconCache
from .config import ServerConfig, setup_logging
from .nodes import source_node
from .tree import DeferredNode, DeferredTreeDataProvider

logger = logging.getLogger(__name__)

# Global instances, set up in lifespan()
_config: ServerConfig | None = None
_client: AzureDevOpsClient | None = None
_icon_cache: WorkItemIconCache | None = None
_provider: DeferredTreeDataProvider | None = None


def get_provider() -> DeferredTreeDataProvider:
    """Get the global tree provider instance."""
    if _provider is None:
        raise RuntimeError("Tree provider not initialized. Server not started properly.")
    return _provider


def build_source_nodes(
    config: ServerConfig,
    client: AzureDevOpsClient,
    icon_cache: WorkItemIconCache | None = None,
) -> list[DeferredNode]:
    """One root node per configured source, in configuration order."""
    return [source_node(client, source, icon_cache) for source in config.get_sources()]


def build_tree_state(
    config: ServerConfig,
) -> tuple[AzureDevOpsClient, WorkItemIconCache, list[DeferredNode]]:
    """Client, icon cache and root nodes for ``config``."""
    client = AzureDevOpsClient(config.get_api_config())
    icon_cache = WorkItemIconCache(config.icons_dir, client)
    icon_cache.update_icon_map()
    return client, icon_cache, build_source_nodes(config, client, icon_cache)


async def refresh_tree() -> dict[str, Any]:
    """Reload configuration, rebuild the roots and replace the whole tree.

    Everything is built before the live state is touched, so a bad
    configuration leaves the current tree and client in place.
    """
    global _config, _client, _icon_cache

    provider = get_provider()
    config = ServerConfig()
    client, icon_cache, roots = build_tree_state(config)

    old_client = _client
    _config, _client, _icon_cache = config, client, icon_cache
    provider.refresh(roots)
    if old_client is not None:
        await old_client.close()

    logger.info(f"Tree reloaded with {len(roots)} source(s)")
    return {
        "success": True,
        "root_count": len(roots),
        "timestamp": datetime.now().isoformat(),
    }


def node_to_dict(node: DeferredNode) -> dict[str, Any]:
    """Display record for a node plus the key used to address it later."""
    item = node.get_tree_item()
    return {"key": node.key, **item.model_dump(mode="json")}


def _require_node(node_key: str) -> DeferredNode:
    node = get_provider().get_node(node_key)
    if node is None:
        raise ValueError(
            f"Unknown node key: {node_key!r}. List roots or children first; "
            "keys are forgotten after a refresh."
        )
    return node


def _on_tree_changed() -> None:
    logger.info("Tree refreshed; previously returned node keys are no longer valid")


@asynccontextmanager
async def lifespan(_app: FastMCP):  # type: ignore[no-untyped-def]
    """Manage server lifecycle."""
    global _config, _client, _icon_cache, _provider

    logger.info("Starting Azure DevOps tree MCP server")

    _config = ServerConfig()
    setup_logging(_config.log_level)

    _client, _icon_cache, roots = build_tree_state(_config)
    _provider = DeferredTreeDataProvider(roots)
    unsubscribe = _provider.on_did_change_tree_data(_on_tree_changed)

    logger.info(f"Tree initialized with {len(roots)} source(s)")

    try:
        yield
    finally:
        logger.info("Shutting down Azure DevOps tree MCP server")
        unsubscribe()
        if _client:
            await _client.close()
        _client = None
        _icon_cache = None
        _provider = None
        _config = None


# Initialize FastMCP server
mcp = FastMCP(
    "Azure DevOps Tree MCP Server",
    instructions=(
        "Browse Azure DevOps sources, projects and open work items as a tree. "
        "Start with devops_tree_roots, then expand nodes by key."
    ),
    lifespan=lifespan,
)


@mcp.tool(name="devops_tree_roots", description="List the configured Azure DevOps sources")
async def tree_roots() -> list[dict[str, Any]]:
    """Return the root nodes (one per configured source)."""
    provider = get_provider()
    return [node_to_dict(node) for node in await provider.get_children()]


@mcp.tool(
    name="devops_tree_children",
    description="Expand a tree node: projects of a source, or work items of a project",
)
async def tree_children(node_key: str) -> list[dict[str, Any]]:
    """Return the children of a node, loading them on first access.

    Args:
        node_key: Key of a node returned by devops_tree_roots or devops_tree_children
    """
    node = _require_node(node_key)
    children = await get_provider().get_children(node)
    return [node_to_dict(child) for child in children]


@mcp.tool(name="devops_tree_item", description="Get the display record of one tree node")
async def tree_item(node_key: str) -> dict[str, Any]:
    """Return title, description, tooltip and expand state of a node.

    Args:
        node_key: Key of a previously returned node
    """
    return node_to_dict(_require_node(node_key))


@mcp.tool(
    name="devops_tree_refresh",
    description="Discard all cached tree state and reload from configuration",
)
async def tree_refresh() -> dict[str, Any]:
    """Reload configuration and replace the whole tree."""
    return await refresh_tree()


def main() -> None:
    """Run the server over stdio."""
    setup_logging()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
