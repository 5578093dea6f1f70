"""Handles button-triggered dropdown menus."""
from typing import Optional

from wizard_form_agent.core.action_handlers.base_handler import BaseActionHandler
from wizard_form_agent.core.browser_interface import DocumentDriver
from wizard_form_agent.core.elements import DropDown, is_ignored
from wizard_form_agent.tools import constants
from wizard_form_agent.tools.option_matcher import OptionMatcher


class DropDownActionHandler(BaseActionHandler):
    """Opens a dropdown and clicks the entry that matches the answer.

    When no entry matches, the trigger is clicked again to close the menu and
    nothing is selected.
    """

    def __init__(
        self,
        driver: DocumentDriver,
        option_selector: str = constants.DROP_DOWN_ITEM_TAGS,
        matcher: Optional[OptionMatcher] = None,
    ):
        super().__init__(driver)
        self.option_selector = option_selector
        self.matcher = matcher or OptionMatcher()

    async def execute(self, element: DropDown) -> bool:
        if is_ignored(element.answer):
            self.logger.debug(f"Ignoring dropdown '{element.question}'")
            return True

        if not element.answer:
            self.logger.warning(f"Unhandled dropdown: '{element.question}'")
            return False

        description = f"dropdown '{element.element_id}'"
        await self._click(element.node, description)

        first = await self.driver.query_one(self.option_selector, wait_for_presence=True)
        options = await self.driver.query_all(self.option_selector) if first is not None else []
        texts = [await self.driver.get_property(option, "innerText") for option in options]

        index, score = self.matcher.find_match(element.answer, texts)
        if index is None:
            self.logger.warning(
                f"No entry of '{element.question}' matches '{element.answer}' "
                f"({len(texts)} entries, best score {score}); closing menu"
            )
            await self._click(element.node, description)
            return False

        await self._click(options[index], f"dropdown entry '{texts[index].strip()}'")
        self.logger.info(f"Selected '{texts[index].strip()}' for '{element.question}'")
        return True
