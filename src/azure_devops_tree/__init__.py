"""Azure DevOps work item tree MCP server."""

__version__ = "0.1.0"
