"""Base interface for browser interactions."""

from typing import Any, List, Optional, Protocol

# Opaque handle to a DOM node; Playwright ElementHandle in production.
NodeHandle = Any


class DocumentDriver(Protocol):
    """Protocol defining the DOM capabilities the automation core consumes."""

    async def query_one(self, selector: str, wait_for_presence: bool = False) -> Optional[NodeHandle]:
        """Return the first node matching ``selector``, or None (after the wait budget if waiting)."""
        ...

    async def query_all(self, selector: str) -> List[NodeHandle]:
        ...

    async def get_property(self, node: NodeHandle, name: str) -> str:
        """Return a DOM property as a string, ``""`` when absent."""
        ...

    async def get_attribute(self, node: NodeHandle, name: str) -> str:
        """Return an attribute value, ``""`` when absent."""
        ...

    async def get_parent(self, node: NodeHandle) -> Optional[NodeHandle]:
        ...

    async def click(self, node: NodeHandle) -> None:
        ...

    async def type_text(self, text: str) -> None:
        """Type into whatever element currently has focus."""
        ...

    def current_url(self) -> str:
        ...

    async def wait_for_navigation_settled(self) -> None:
        ...

    async def wait_for_url_change(self, url: str) -> None:
        """Block until the page URL differs from ``url``."""
        ...

    async def page_content(self) -> str:
        ...

    async def navigate(self, url: str) -> bool:
        ...
