"""Tree nodes whose children are computed on first access."""

import asyncio
from typing import Awaitable, Callable, Sequence

from ..models import CollapsibleState, TreeItem

ChildLoader = Callable[[], Awaitable[Sequence["DeferredNode"]]]
IconResolver = Callable[[], str | None]


async def _no_children() -> list["DeferredNode"]:
    return []


class DeferredNode:
    """A tree node with fixed display metadata and lazily loaded children.

    ``load_children`` runs at most once per node: the first call to
    ``get_cached_children`` populates the cache and later calls return it.
    Concurrent first calls share one in-flight load. If the load raises, the
    node stays unloaded and the next call tries again.

    Node kinds differ only in the ``load_children`` and ``resolve_icon``
    strategies passed in, not by subclassing.
    """

    def __init__(
        self,
        kind: str,
        title: str,
        description: str = "",
        tooltip: str = "",
        load_children: ChildLoader | None = None,
        resolve_icon: IconResolver | None = None,
        key: str | None = None,
    ):
        self.kind = kind
        self.title = title
        self.description = description
        self.tooltip = tooltip
        self.key = key or f"{kind}:{title}"
        self._load_children = load_children or _no_children
        self._resolve_icon = resolve_icon
        self._children: list[DeferredNode] = []
        self._has_loaded_children = False
        self._pending: asyncio.Future[list[DeferredNode]] | None = None

    @classmethod
    def preloaded(
        cls,
        kind: str,
        title: str,
        children: Sequence["DeferredNode"],
        description: str = "",
        tooltip: str = "",
        resolve_icon: IconResolver | None = None,
        key: str | None = None,
    ) -> "DeferredNode":
        """Build a node whose children are already known."""
        node = cls(kind, title, description, tooltip, resolve_icon=resolve_icon, key=key)
        node._children = list(children)
        node._has_loaded_children = True
        return node

    @property
    def has_loaded_children(self) -> bool:
        return self._has_loaded_children

    @property
    def children(self) -> list["DeferredNode"]:
        """Cached children; empty until the first load completes."""
        return list(self._children)

    async def get_cached_children(self) -> list["DeferredNode"]:
        if self._has_loaded_children:
            return list(self._children)

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
        pending = self._pending
        try:
            children = await asyncio.shield(pending)
        finally:
            if pending.done() and self._pending is pending:
                self._pending = None
        return list(children)

    async def _load(self) -> list["DeferredNode"]:
        children = list(await self._load_children())
        self._children = children
        self._has_loaded_children = True
        return children

    def get_collapsible_state(self) -> CollapsibleState:
        # Unloaded nodes may still have children, so offer to expand them.
        if not self._has_loaded_children or self._children:
            return CollapsibleState.COLLAPSED
        return CollapsibleState.NONE

    def get_icon(self) -> str | None:
        if self._resolve_icon is None:
            return None
        return self._resolve_icon()

    def get_tree_item(self) -> TreeItem:
        return TreeItem(
            label=self.title,
            collapsible_state=self.get_collapsible_state(),
            description=self.description,
            tooltip=self.tooltip,
            context_value=self.kind,
            icon=self.get_icon(),
        )

    def __repr__(self) -> str:
        return f"DeferredNode(kind={self.kind!r}, title={self.title!r})"
