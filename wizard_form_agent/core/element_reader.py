"""Per-tick cached reads of DOM properties and attributes."""

import logging
from typing import Any, Dict, Optional, Tuple

from wizard_form_agent.core.browser_interface import DocumentDriver, NodeHandle

logger = logging.getLogger(__name__)

_PROPERTY = "property"
_ATTRIBUTE = "attribute"


class ElementReader:
    """Reads node properties/attributes through the driver, caching per tick.

    Entries are keyed by (node identity, kind, name). A reader belongs to one
    snapshot; call ``invalidate`` (or build a new reader) before the next tick
    since node handles go stale across renders.
    """

    def __init__(self, driver: DocumentDriver):
        self.driver = driver
        self._cache: Dict[Tuple[int, str, str], str] = {}
        # Keeps nodes alive so their id() stays unique for the cache lifetime
        self._nodes: Dict[int, NodeHandle] = {}
        self.hits = 0
        self.misses = 0

    def _key(self, node: NodeHandle, kind: str, name: str) -> Tuple[int, str, str]:
        self._nodes[id(node)] = node
        return (id(node), kind, name)

    async def prop(self, node: NodeHandle, name: str) -> str:
        if node is None:
            return ""
        key = self._key(node, _PROPERTY, name)
        if key in self._cache:
            self.hits += 1
            return self._cache[key]
        self.misses += 1
        value = await self.driver.get_property(node, name) or ""
        self._cache[key] = value
        return value

    async def attr(self, node: NodeHandle, name: str) -> str:
        if node is None:
            return ""
        key = self._key(node, _ATTRIBUTE, name)
        if key in self._cache:
            self.hits += 1
            return self._cache[key]
        self.misses += 1
        value = await self.driver.get_attribute(node, name) or ""
        self._cache[key] = value
        return value

    async def element_id(self, node: NodeHandle) -> str:
        return await self.prop(node, "id")

    async def partial_id(self, node: NodeHandle) -> str:
        """The node's id, or its inner text when it has none."""
        node_id = await self.element_id(node)
        if node_id:
            return node_id
        return (await self.prop(node, "innerText")).strip()

    async def ancestor_id(self, node: NodeHandle) -> str:
        """Id of the closest ancestor that has one, ``""`` if none does."""
        parent: Optional[Any] = await self.driver.get_parent(node)
        while parent is not None:
            parent_id = await self.element_id(parent)
            if parent_id:
                return parent_id
            parent = await self.driver.get_parent(parent)
        return ""

    def invalidate(self) -> None:
        self._cache.clear()
        self._nodes.clear()
