"""Lazily expanded tree model."""

from .deferred_node import DeferredNode
from .deferred_tree_provider import DeferredTreeDataProvider

__all__ = ["DeferredNode", "DeferredTreeDataProvider"]
