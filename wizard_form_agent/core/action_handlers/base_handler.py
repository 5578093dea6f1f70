"""Base class for action handlers."""
import logging

from wizard_form_agent.core.browser_interface import DocumentDriver, NodeHandle
from wizard_form_agent.core.exceptions import ActionExecutionError, TransientDOMError


class BaseActionHandler:
    def __init__(self, driver: DocumentDriver):
        self.driver = driver
        self.logger = logging.getLogger(self.__class__.__name__)

    async def execute(self, element) -> bool:
        raise NotImplementedError("Subclasses must implement the execute method.")

    async def _click(self, node: NodeHandle, description: str) -> None:
        """Click through the driver, normalising unexpected failures."""
        if node is None:
            raise ActionExecutionError(f"Nothing to click for {description}")
        try:
            await self.driver.click(node)
        except (ActionExecutionError, TransientDOMError):
            raise
        except Exception as e:
            self.logger.error(f"Unexpected error clicking {description}: {e}", exc_info=True)
            raise ActionExecutionError(f"Click failed for {description}", details=str(e)) from e
