"""Handles navigation buttons that start a catalogued click sequence."""
import asyncio

from wizard_form_agent.core.action_handlers.base_handler import BaseActionHandler
from wizard_form_agent.core.elements import NavButton


class NavButtonHandler(BaseActionHandler):
    """Clicks the button, then each follow-up selector in order.

    A follow-up that never shows up ends the chain early; parts of a chain are
    often rendered conditionally.
    """

    async def execute(self, element: NavButton) -> bool:
        await self._click(element.node, f"navigation button '{element.partial_id}'")
        self.logger.info(f"Clicked navigation button '{element.partial_id}'")

        last = len(element.child_selectors) - 1
        for index, selector in enumerate(element.child_selectors):
            next_node = await self.driver.query_one(selector, wait_for_presence=True)
            if next_node is None:
                self.logger.info(
                    f"Sequence of '{element.partial_id}' stopped at step {index + 1}: '{selector}' not found"
                )
                return False

            if element.awaits_navigation and index == last:
                await self._click_and_settle(next_node, selector)
            else:
                await self._click(next_node, selector)

        return True

    async def _click_and_settle(self, node, selector: str) -> None:
        """Click while already waiting for the navigation it triggers.

        If the click fails the wait is cancelled and collected before the
        error propagates, so nothing keeps touching the page afterwards.
        """
        settle = asyncio.ensure_future(self.driver.wait_for_navigation_settled())
        # Let the wait register its listener before the click goes out
        await asyncio.sleep(0)
        try:
            await self._click(node, selector)
        except BaseException:
            settle.cancel()
            await asyncio.gather(settle, return_exceptions=True)
            raise
        await settle
