"""Action executor - dispatches form elements to the handler for their kind."""

import logging
from typing import Dict, Optional

from wizard_form_agent.core.browser_interface import DocumentDriver
from wizard_form_agent.core.diagnostics_manager import DiagnosticsManager
from wizard_form_agent.core.elements import ElementKind, FormElement, handled_key
from wizard_form_agent.core.handled_set import HandledSet
from wizard_form_agent.tools import constants
from wizard_form_agent.tools.option_matcher import OptionMatcher

from .action_handlers.base_handler import BaseActionHandler
from .action_handlers.dropdown_handler import DropDownActionHandler
from .action_handlers.nav_handler import NavButtonHandler
from .action_handlers.radio_handler import RadioActionHandler
from .action_handlers.text_handler import TextActionHandler

logger = logging.getLogger(__name__)


class ActionExecutor:
    """Runs the handler for an element and records it as handled afterwards.

    The HandledSet is only updated once the handler has returned; an element
    whose handler raised stays unhandled.
    """

    def __init__(
        self,
        driver: DocumentDriver,
        handled: HandledSet,
        diagnostics_manager: Optional[DiagnosticsManager] = None,
        option_selector: str = constants.DROP_DOWN_ITEM_TAGS,
        matcher: Optional[OptionMatcher] = None,
    ):
        self.driver = driver
        self.handled = handled
        self.diagnostics_manager = diagnostics_manager
        self.logger = logging.getLogger(__name__)

        matcher = matcher or OptionMatcher()
        self.handlers: Dict[ElementKind, BaseActionHandler] = {
            ElementKind.TEXT_BOX: TextActionHandler(driver),
            ElementKind.RADIO_GROUP: RadioActionHandler(driver, matcher=matcher),
            ElementKind.DROP_DOWN: DropDownActionHandler(driver, option_selector=option_selector, matcher=matcher),
            ElementKind.NAV_BUTTON: NavButtonHandler(driver),
        }

    async def execute(self, element: FormElement) -> bool:
        """Handle one element; exceptions propagate without marking it handled."""
        handler = self.handlers.get(element.kind)
        if handler is None:
            self.logger.warning(f"No handler registered for {element.kind}")
            return False

        success = await handler.execute(element)

        key = handled_key(element)
        if element.kind is ElementKind.NAV_BUTTON:
            self.handled.mark_button(key)
        else:
            self.handled.mark_question(key)

        if self.diagnostics_manager:
            self.diagnostics_manager.record_action(
                self.handled.lifecycle_id, element.kind.value, key, success
            )
        return success
