"""Waiting until a page has finished rendering."""

import asyncio
import logging

from wizard_form_agent.core.browser_interface import DocumentDriver
from wizard_form_agent.tools import constants

logger = logging.getLogger(__name__)


async def wait_till_html_rendered(
    driver: DocumentDriver,
    timeout: int = constants.RENDER_TIMEOUT,
    check_interval: int = constants.RENDER_CHECK_INTERVAL,
    min_stable_checks: int = constants.RENDER_MIN_STABLE_CHECKS,
) -> bool:
    """Poll the page HTML until its length stops changing.

    Args:
        driver: Document driver to poll
        timeout: Overall budget in ms
        check_interval: Delay between polls in ms
        min_stable_checks: Consecutive unchanged polls that count as rendered

    Returns:
        True if the content stabilised, False if the budget ran out
    """
    max_checks = max(1, timeout // check_interval)
    last_size = 0
    stable_checks = 0

    for _ in range(max_checks):
        current_size = len(await driver.page_content())

        if last_size != 0 and current_size == last_size:
            stable_checks += 1
        else:
            stable_checks = 0

        if stable_checks >= min_stable_checks:
            logger.debug(f"Page content stable at {current_size} characters")
            return True

        last_size = current_size
        await asyncio.sleep(check_interval / 1000)

    logger.warning(f"Page content still changing after {timeout}ms")
    return False
