"""Handles radio button groups."""
from typing import Optional

from wizard_form_agent.core.action_handlers.base_handler import BaseActionHandler
from wizard_form_agent.core.browser_interface import DocumentDriver
from wizard_form_agent.core.elements import RadioGroup, is_ignored
from wizard_form_agent.tools.option_matcher import OptionMatcher


class RadioActionHandler(BaseActionHandler):
    """Clicks the option of a radio group whose label matches the answer."""

    def __init__(self, driver: DocumentDriver, matcher: Optional[OptionMatcher] = None):
        super().__init__(driver)
        self.matcher = matcher or OptionMatcher()

    async def execute(self, element: RadioGroup) -> bool:
        if is_ignored(element.answer):
            self.logger.debug(f"Ignoring radio group '{element.question}'")
            return True

        if not element.answer:
            self.logger.warning(f"Unhandled radio group: '{element.question}'")
            return False

        labels = [option.label for option in element.options]
        index, score = self.matcher.find_match(element.answer, labels)
        if index is None:
            self.logger.warning(
                f"No option of '{element.question}' matches '{element.answer}' "
                f"(options: {labels}, best score {score})"
            )
            return False

        option = element.options[index]
        await self._click(option.node, f"radio option '{option.label}'")
        self.logger.info(f"Selected '{option.label}' for '{element.question}'")
        return True
