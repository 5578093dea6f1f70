"""Custom exceptions for the wizard form agent."""

from typing import Any, Optional


class ActionExecutionError(Exception):
    """Custom exception for action execution failures."""

    def __init__(self, message: str, selector: Optional[str] = None, details: Optional[Any] = None):
        self.selector = selector
        self.details = details
        super().__init__(message)


class TransientDOMError(Exception):
    """Raised when a node handle goes stale or the page context is torn down by a navigation."""
    pass


class CatalogValidationError(Exception):
    """Raised when form data or the navigation catalog contains a malformed entry."""

    def __init__(self, message: str, source: Optional[str] = None, index: Optional[int] = None):
        self.source = source
        self.index = index
        location = ""
        if source:
            location = f" ({source}"
            location += f", entry {index})" if index is not None else ")"
        super().__init__(f"{message}{location}")
