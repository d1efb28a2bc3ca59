"""Adapter between a set of deferred root nodes and a polling tree host."""

from typing import Callable, Sequence

from ..models import TreeItem
from .deferred_node import DeferredNode

ChangeListener = Callable[[], None]


class DeferredTreeDataProvider:
    """Serves roots, children and display records for ``DeferredNode`` trees.

    ``refresh`` swaps the whole root set and notifies listeners once. Nodes
    handed out are also registered by key so a host that only keeps string
    handles can find them again; the registry is dropped on refresh.
    """

    def __init__(self, nodes: Sequence[DeferredNode] = ()):
        self._nodes: list[DeferredNode] = list(nodes)
        self._listeners: list[ChangeListener] = []
        self._nodes_by_key: dict[str, DeferredNode] = {}
        self._register(self._nodes)

    def _register(self, nodes: Sequence[DeferredNode]) -> None:
        for node in nodes:
            self._nodes_by_key[node.key] = node

    def get_tree_item(self, element: DeferredNode) -> TreeItem:
        return element.get_tree_item()

    async def get_children(self, element: DeferredNode | None = None) -> list[DeferredNode]:
        if element is None:
            return list(self._nodes)

        children = await element.get_cached_children()
        self._register(children)
        return children

    def get_node(self, key: str) -> DeferredNode | None:
        """Look up a node previously returned by this provider."""
        return self._nodes_by_key.get(key)

    def refresh(self, updated_nodes: Sequence[DeferredNode]) -> None:
        self._nodes = list(updated_nodes)
        self._nodes_by_key = {}
        self._register(self._nodes)
        self._fire_change()

    def on_did_change_tree_data(self, listener: ChangeListener) -> Callable[[], None]:
        """Subscribe to refresh notifications; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _fire_change(self) -> None:
        for listener in list(self._listeners):
            listener()
