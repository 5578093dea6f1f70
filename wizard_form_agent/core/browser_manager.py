"""Playwright implementation of the document driver."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import async_playwright, Page, Browser, BrowserContext, ElementHandle, Error
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from wizard_form_agent.core.exceptions import ActionExecutionError, TransientDOMError
from wizard_form_agent.tools import constants

logger = logging.getLogger(__name__)


def is_transient_error(error: Exception) -> bool:
    """True when a Playwright error just means the page navigated away under us."""
    message = str(error).lower()
    return any(pattern in message for pattern in constants.TRANSIENT_ERROR_PATTERNS)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class BrowserManager:
    """Manages the browser session and exposes it as a ``DocumentDriver``."""

    def __init__(
        self,
        visible: bool = False,
        window_width: int = 1280,
        window_height: int = 1024,
        selector_timeout: int = constants.SELECTOR_TIMEOUT,
        navigation_timeout: int = constants.NAVIGATION_TIMEOUT,
        type_delay_per_char: float = constants.TYPE_DELAY_PER_CHAR,
    ):
        """Initialize the browser manager.

        Args:
            visible: Whether to show the browser window
            window_width: Browser window width in pixels
            window_height: Browser window height in pixels
            selector_timeout: Wait budget in ms for ``query_one(..., wait_for_presence=True)``
            navigation_timeout: Timeout in ms for navigations
            type_delay_per_char: Pause after typing, in seconds per character
        """
        self.visible = visible
        self.window_width = window_width
        self.window_height = window_height
        self.selector_timeout = selector_timeout
        self.navigation_timeout = navigation_timeout
        self.type_delay_per_char = type_delay_per_char
        self.logger = logging.getLogger(__name__)

        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    @classmethod
    def from_options(cls, options: Dict[str, Any]) -> "BrowserManager":
        return cls(
            visible=options.get("visible", False),
            window_width=options.get("window_width", 1280),
            window_height=options.get("window_height", 1024),
            selector_timeout=options.get("selector_timeout", constants.SELECTOR_TIMEOUT),
            navigation_timeout=options.get("navigation_timeout", constants.NAVIGATION_TIMEOUT),
        )

    async def initialize(self) -> bool:
        """Launch the browser and open a page.

        Returns:
            True if successful, False otherwise
        """
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=not self.visible,
                args=[f"--window-size={self.window_width},{self.window_height}"],
            )
            self.context = await self.browser.new_context(
                viewport={'width': self.window_width, 'height': self.window_height - 200},
                ignore_https_errors=True,
            )
            self.page = await self.context.new_page()
            self.logger.info("Browser initialized")
            return True
        except Exception as e:
            self.logger.error(f"Failed to start browser: {e}")
            return False

    def _raise_translated(self, error: Error, action: str, selector: Optional[str] = None):
        if is_transient_error(error):
            self.logger.debug(f"Transient DOM error during {action}: {error}")
            raise TransientDOMError(str(error)) from error
        raise ActionExecutionError(f"{action} failed: {error}", selector=selector, details=str(error)) from error

    async def navigate(self, url: str) -> bool:
        """Navigate to a URL and wait for the network to go idle."""
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout)
            return True
        except Exception as e:
            self.logger.error(f"Failed to navigate to {url}: {e}")
            return False

    async def query_one(self, selector: str, wait_for_presence: bool = False) -> Optional[ElementHandle]:
        if not self.page:
            return None
        try:
            if wait_for_presence:
                return await self.page.wait_for_selector(selector, state="attached", timeout=self.selector_timeout)
            return await self.page.query_selector(selector)
        except PlaywrightTimeoutError:
            self.logger.info(f"Selector '{selector}' did not appear within {self.selector_timeout}ms")
            return None
        except Error as e:
            self._raise_translated(e, "query_one", selector)

    async def query_all(self, selector: str) -> List[ElementHandle]:
        if not self.page:
            return []
        try:
            return await self.page.query_selector_all(selector)
        except Error as e:
            self._raise_translated(e, "query_all", selector)

    async def get_property(self, node: ElementHandle, name: str) -> str:
        if node is None:
            return ""
        try:
            wrapper = await node.get_property(name)
            return _stringify(await wrapper.json_value())
        except Error as e:
            self._raise_translated(e, f"get_property({name})")

    async def get_attribute(self, node: ElementHandle, name: str) -> str:
        if node is None:
            return ""
        try:
            return _stringify(await node.get_attribute(name))
        except Error as e:
            self._raise_translated(e, f"get_attribute({name})")

    async def get_parent(self, node: ElementHandle) -> Optional[ElementHandle]:
        if node is None:
            return None
        try:
            parent = await node.evaluate_handle("el => el.parentElement")
            return parent.as_element()
        except Error as e:
            self._raise_translated(e, "get_parent")

    async def click(self, node: ElementHandle) -> None:
        try:
            await node.click()
        except Error as e:
            self._raise_translated(e, "click")

    async def type_text(self, text: str) -> None:
        try:
            await self.page.keyboard.type(text)
        except Error as e:
            self._raise_translated(e, "type_text")
        await asyncio.sleep(self.type_delay_per_char * len(text))

    def current_url(self) -> str:
        return self.page.url if self.page else ""

    async def wait_for_navigation_settled(self) -> None:
        """Wait for the next main-frame navigation and then for network idle."""
        try:
            await self.page.wait_for_event(
                "framenavigated",
                predicate=lambda frame: frame == self.page.main_frame,
                timeout=self.navigation_timeout,
            )
            await self.page.wait_for_load_state("networkidle", timeout=self.navigation_timeout)
        except PlaywrightTimeoutError:
            self.logger.warning(f"No settled navigation within {self.navigation_timeout}ms")
        except Error as e:
            self._raise_translated(e, "wait_for_navigation_settled")

    async def wait_for_url_change(self, url: str) -> None:
        try:
            await self.page.wait_for_url(lambda current: current != url, timeout=0)
        except Error as e:
            self._raise_translated(e, "wait_for_url_change")

    async def page_content(self) -> str:
        try:
            return await self.page.content()
        except Error as e:
            self._raise_translated(e, "page_content")

    async def close(self) -> None:
        """Close the browser manager."""
        try:
            if self.page:
                await self.page.close()
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()

            self.page = None
            self.context = None
            self.browser = None
            self.playwright = None
        except Exception as e:
            self.logger.error(f"Error closing browser: {str(e)}")
