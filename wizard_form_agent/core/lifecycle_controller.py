"""Per-page lifecycle state machine that drives navigation and form filling."""

import asyncio
import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from wizard_form_agent.config import AutomationSettings
from wizard_form_agent.core.action_executor import ActionExecutor
from wizard_form_agent.core.browser_interface import DocumentDriver
from wizard_form_agent.core.diagnostics_manager import DiagnosticsManager
from wizard_form_agent.core.elements import should_handle
from wizard_form_agent.core.exceptions import ActionExecutionError, TransientDOMError
from wizard_form_agent.core.form_data import FormData
from wizard_form_agent.core.handled_set import HandledSet
from wizard_form_agent.core.navigation_resolver import NavigationResolver
from wizard_form_agent.core.page_classifier import PageClassifier
from wizard_form_agent.tools.page_stability import wait_till_html_rendered

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    START = "start"
    NAVIGATION_PHASE = "navigation_phase"
    CLASSIFY_LOOP = "classify_loop"
    END = "end"


class EndReason(Enum):
    NAVIGATED = "navigated"
    STABLE = "stable"
    TRANSIENT_ERROR = "transient_error"
    ACTION_ERROR = "action_error"
    DISABLED = "disabled"


@dataclass
class LifecycleContext:
    """Record of a single page lifecycle."""
    lifecycle_id: int
    url: str
    state: LifecycleState = LifecycleState.START
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    end_reason: Optional[EndReason] = None
    ticks: int = 0
    idle_ticks: int = 0
    handled_questions: int = 0
    handled_buttons: int = 0
    error: Optional[str] = None


class LifecycleController:
    """Runs START -> NAVIGATION_PHASE -> CLASSIFY_LOOP -> END once per page load.

    Everything happens on one task: DOM handles go stale when a navigation
    races a handler, so no two handlers ever touch the page at the same time.
    """

    def __init__(
        self,
        driver: DocumentDriver,
        form_data: FormData,
        settings: Optional[AutomationSettings] = None,
        diagnostics_manager: Optional[DiagnosticsManager] = None,
    ):
        self.driver = driver
        self.form_data = form_data
        self.settings = settings or AutomationSettings()
        self.diagnostics_manager = diagnostics_manager
        self.logger = logging.getLogger(__name__)

        self.handled = HandledSet()
        self.resolver = NavigationResolver(form_data.nav_sequences)
        self.classifier = PageClassifier(
            driver,
            form_data,
            self.handled,
            selectors=self.settings.selectors,
            resolver=self.resolver,
            diagnostics_manager=diagnostics_manager,
        )
        self.executor = ActionExecutor(
            driver,
            self.handled,
            diagnostics_manager=diagnostics_manager,
            option_selector=self.settings.selectors.drop_down_items,
        )

        self._next_lifecycle_id = 0
        self.current: Optional[LifecycleContext] = None
        self.history: List[LifecycleContext] = []

    def url_changed(self, context: LifecycleContext) -> bool:
        return self.driver.current_url() != context.url

    def _start(self) -> LifecycleContext:
        context = LifecycleContext(lifecycle_id=self._next_lifecycle_id, url=self.driver.current_url())
        self._next_lifecycle_id += 1
        self.handled.reset(context.lifecycle_id)
        self.current = context
        self.logger.info(f"[Life Cycle] Start (id: {context.lifecycle_id}) {context.url}")
        return context

    def _end(self, context: LifecycleContext) -> LifecycleContext:
        context.state = LifecycleState.END
        context.end_time = datetime.now()
        context.handled_questions = len(self.handled.questions)
        context.handled_buttons = len(self.handled.buttons)
        self.history.append(context)
        self.current = None
        self.logger.info(
            f"[Life Cycle] End   (id: {context.lifecycle_id}) reason={context.end_reason.value} "
            f"ticks={context.ticks} questions={context.handled_questions} buttons={context.handled_buttons}"
        )
        return context

    async def _navigation_phase(self, context: LifecycleContext) -> None:
        """Click catalogued buttons until one leaves the page.

        A transient error that leaves the URL unchanged (a button that only
        re-rendered the page) falls through so the form still gets filled.
        """
        context.state = LifecycleState.NAVIGATION_PHASE
        try:
            for button in await self.classifier.read_nav_buttons():
                if self.url_changed(context):
                    break
                if should_handle(button, self.handled):
                    await self.executor.execute(button)
        except TransientDOMError as e:
            if self.url_changed(context):
                raise
            self.logger.debug(f"Navigation phase of lifecycle {context.lifecycle_id} interrupted in place: {e}")

    async def _classify_loop(self, context: LifecycleContext) -> None:
        context.state = LifecycleState.CLASSIFY_LOOP
        max_idle = self.settings.max_idle_ticks

        while not self.url_changed(context):
            if max_idle and context.idle_ticks >= max_idle:
                context.end_reason = EndReason.STABLE
                return

            snapshot = await self.classifier.snapshot()
            context.ticks += 1

            acted = 0
            for element in snapshot.form_elements():
                if self.url_changed(context):
                    break
                # Two fields may share a question within one snapshot
                if not should_handle(element, self.handled):
                    continue
                await self.executor.execute(element)
                acted += 1

            context.idle_ticks = 0 if acted else context.idle_ticks + 1
            await asyncio.sleep(self.settings.tick_delay)

        context.end_reason = EndReason.NAVIGATED

    async def run_lifecycle(self) -> LifecycleContext:
        """Run one full lifecycle on the page as it is right now."""
        context = self._start()
        stage = (
            self.diagnostics_manager.track_stage(f"lifecycle_{context.lifecycle_id}")
            if self.diagnostics_manager else nullcontext()
        )

        with stage:
            try:
                if self.settings.automate_buttons:
                    await self._navigation_phase(context)

                if self.url_changed(context):
                    context.end_reason = EndReason.NAVIGATED
                elif self.settings.automate_forms:
                    await self._classify_loop(context)
                else:
                    context.end_reason = EndReason.DISABLED
            except TransientDOMError as e:
                # Expected whenever a navigation races the polling tick
                self.logger.debug(f"Lifecycle {context.lifecycle_id} interrupted: {e}")
                context.end_reason = EndReason.TRANSIENT_ERROR
            except ActionExecutionError as e:
                self.logger.error(f"Lifecycle {context.lifecycle_id} aborted: {e}")
                context.end_reason = EndReason.ACTION_ERROR
                context.error = str(e)

        return self._end(context)

    async def wait_until_rendered(self) -> bool:
        return await wait_till_html_rendered(
            self.driver,
            timeout=self.settings.render_timeout,
            check_interval=self.settings.render_check_interval,
            min_stable_checks=self.settings.render_min_stable_checks,
        )

    async def run(self, start_url: str, max_lifecycles: Optional[int] = None) -> List[LifecycleContext]:
        """Open ``start_url`` and process page after page.

        Blocks until ``max_lifecycles`` lifecycles have run (forever when None).
        Between lifecycles that ended without a navigation it waits for the
        URL to change, e.g. after the user clicks through manually.
        """
        if not await self.driver.navigate(start_url):
            raise ActionExecutionError(f"Could not open {start_url}", selector=start_url)

        completed = 0
        while max_lifecycles is None or completed < max_lifecycles:
            try:
                await self.wait_until_rendered()
            except TransientDOMError:
                continue

            context = await self.run_lifecycle()
            completed += 1
            if max_lifecycles is not None and completed >= max_lifecycles:
                break

            if not self.url_changed(context):
                self.logger.info(f"Waiting for the page to leave {context.url}")
                try:
                    await self.driver.wait_for_url_change(context.url)
                except TransientDOMError:
                    pass

        return self.history
