"""Handles text input actions."""
from wizard_form_agent.core.action_handlers.base_handler import BaseActionHandler
from wizard_form_agent.core.elements import TextBox, is_ignored
from wizard_form_agent.core.exceptions import ActionExecutionError, TransientDOMError


class TextActionHandler(BaseActionHandler):
    """Focuses a text box and types the answer into it."""

    async def execute(self, element: TextBox) -> bool:
        if is_ignored(element.answer):
            self.logger.debug(f"Ignoring text input '{element.question}'")
            return True

        if not element.answer:
            self.logger.warning(f"Unhandled text input field: '{element.question}'")
            return False

        await self._click(element.node, f"text box '{element.element_id}'")
        try:
            await self.driver.type_text(element.answer)
        except (ActionExecutionError, TransientDOMError):
            raise
        except Exception as e:
            raise ActionExecutionError(
                f"Failed to type into '{element.element_id}'", selector=element.element_id, details=str(e)
            ) from e

        self.logger.info(f"Filled '{element.question}'")
        return True
