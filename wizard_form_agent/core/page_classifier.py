"""Turns the nodes found on the page into typed, filtered form elements."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from wizard_form_agent.core.browser_interface import DocumentDriver
from wizard_form_agent.core.diagnostics_manager import DiagnosticsManager
from wizard_form_agent.core.element_reader import ElementReader
from wizard_form_agent.core.elements import (
    DropDown,
    FormElement,
    NavButton,
    RadioGroup,
    RadioOption,
    TextBox,
    should_handle,
    skip_reason,
)
from wizard_form_agent.core.form_data import FormData
from wizard_form_agent.core.handled_set import HandledSet
from wizard_form_agent.core.navigation_resolver import NavigationResolver
from wizard_form_agent.tools import constants

logger = logging.getLogger(__name__)

# Skip reasons worth telling the operator about
REPORTED_REASONS = ("no answer", "ignored", "already answered")


@dataclass(frozen=True)
class PageSelectors:
    """CSS selectors used to find each kind of node."""
    labels: str = constants.LABEL_TAGS
    text_boxes: str = constants.TEXT_BOX_TAGS
    radios: str = constants.RADIO_TAGS
    drop_downs: str = constants.BUTTON_TAGS
    nav_buttons: str = constants.NAV_TAGS
    drop_down_items: str = constants.DROP_DOWN_ITEM_TAGS


@dataclass
class PageSnapshot:
    """Everything classified during one tick."""
    url: str
    labels: Dict[str, str] = field(default_factory=dict)
    text_boxes: List[TextBox] = field(default_factory=list)
    radio_groups: List[RadioGroup] = field(default_factory=list)
    drop_downs: List[DropDown] = field(default_factory=list)

    def form_elements(self) -> List[FormElement]:
        return [*self.text_boxes, *self.radio_groups, *self.drop_downs]

    def __len__(self) -> int:
        return len(self.text_boxes) + len(self.radio_groups) + len(self.drop_downs)


class PageClassifier:
    """Builds the per-tick element lists from raw DOM nodes.

    Questions come from ``<label for=...>`` text, answers from the alias map.
    Anything already handled in the current lifecycle, lacking a question or
    answer, or explicitly ignored is filtered out here so the handlers only
    see work they can do.
    """

    def __init__(
        self,
        driver: DocumentDriver,
        form_data: FormData,
        handled: HandledSet,
        selectors: Optional[PageSelectors] = None,
        resolver: Optional[NavigationResolver] = None,
        diagnostics_manager: Optional[DiagnosticsManager] = None,
    ):
        self.driver = driver
        self.form_data = form_data
        self.handled = handled
        self.selectors = selectors or PageSelectors()
        self.resolver = resolver or NavigationResolver(form_data.nav_sequences)
        self.diagnostics_manager = diagnostics_manager
        self.logger = logging.getLogger(__name__)

    def new_reader(self) -> ElementReader:
        return ElementReader(self.driver)

    def _report_skip(self, kind: str, subject: str, reason: Optional[str]) -> None:
        if reason not in REPORTED_REASONS:
            return
        if not self.handled.first_report(subject, reason):
            return
        if self.diagnostics_manager:
            self.diagnostics_manager.record_skip(self.handled.lifecycle_id, kind, subject, reason)
        else:
            self.logger.info(f"Skipping {kind} '{subject}': {reason}")

    def _skip(self, kind: str, question: str, reason: Optional[str]) -> None:
        """Report a skipped question; an ignored one counts as handled for the lifecycle."""
        if reason == "ignored":
            self.handled.mark_question(question)
        self._report_skip(kind, question, reason)

    async def read_labels(self, reader: ElementReader) -> Dict[str, str]:
        """Map each label's ``for`` attribute to its text."""
        labels: Dict[str, str] = {}
        for node in await self.driver.query_all(self.selectors.labels):
            target = await reader.attr(node, "for")
            if not target:
                continue
            text = (await reader.prop(node, "textContent")).strip()
            if text:
                labels.setdefault(target, text)
        return labels

    async def read_text_boxes(self, reader: ElementReader, labels: Dict[str, str]) -> List[TextBox]:
        text_boxes = []
        for node in await self.driver.query_all(self.selectors.text_boxes):
            element_id = await reader.element_id(node)
            question = labels.get(element_id)
            if not question:
                continue

            text_box = TextBox(
                element_id=element_id,
                question=question,
                answer=self.form_data.answer_for(question) or "",
                node=node,
                value_empty=(await reader.prop(node, "value")) == "",
            )
            if should_handle(text_box, self.handled):
                text_boxes.append(text_box)
            elif text_box.value_empty:
                self._skip("text", question, skip_reason(question, text_box.answer, self.handled))
        return text_boxes

    async def _is_checked(self, reader: ElementReader, node) -> bool:
        if await reader.attr(node, "aria-checked") == "true":
            return True
        return await reader.prop(node, "checked") == "true"

    async def read_radio_groups(self, reader: ElementReader, labels: Dict[str, str]) -> List[RadioGroup]:
        """Group radio options by their closest ancestor with an id.

        A group with any option already checked is dropped for this tick.
        """
        groups: Dict[str, RadioGroup] = {}
        excluded = set()

        for node in await self.driver.query_all(self.selectors.radios):
            container_id = await reader.ancestor_id(node)
            question = labels.get(container_id)
            if not question or container_id in excluded:
                continue

            if self.handled.has_question(question):
                excluded.add(container_id)
                continue

            if await self._is_checked(reader, node):
                excluded.add(container_id)
                groups.pop(container_id, None)
                self._report_skip("radio", question, "already answered")
                continue

            option_label = labels.get(await reader.element_id(node), "")
            if not option_label:
                self.logger.debug(f"Radio option under '{container_id}' has no label, leaving it out")
                continue

            group = groups.get(container_id)
            if group is None:
                group = RadioGroup(
                    container_id=container_id,
                    question=question,
                    answer=self.form_data.answer_for(question) or "",
                )
                groups[container_id] = group
            if not group.add_option(RadioOption(label=option_label, node=node)):
                self.logger.debug(f"Duplicate radio option '{option_label}' for '{question}'")

        radio_groups = []
        for group in groups.values():
            if should_handle(group, self.handled):
                radio_groups.append(group)
            else:
                self._skip("radio", group.question, skip_reason(group.question, group.answer, self.handled))
        return radio_groups

    async def read_drop_downs(self, reader: ElementReader, labels: Dict[str, str]) -> List[DropDown]:
        drop_downs = []
        for node in await self.driver.query_all(self.selectors.drop_downs):
            element_id = await reader.element_id(node)
            question = labels.get(element_id)
            if not question:
                continue

            drop_down = DropDown(
                element_id=element_id,
                question=question,
                answer=self.form_data.answer_for(question) or "",
                node=node,
            )
            if should_handle(drop_down, self.handled):
                drop_downs.append(drop_down)
            else:
                self._skip("dropdown", question, skip_reason(question, drop_down.answer, self.handled))
        return drop_downs

    async def read_nav_buttons(self, reader: Optional[ElementReader] = None) -> List[NavButton]:
        """Deduplicated navigation buttons that start a known sequence on this page."""
        reader = reader or self.new_reader()
        url = self.driver.current_url()
        candidates = self.resolver.sequences_for(url)
        if not candidates:
            self.logger.debug(f"No navigation sequences apply to {url}")
            return []

        nav_buttons = []
        seen = set()
        for node in await self.driver.query_all(self.selectors.nav_buttons):
            partial_id = await reader.partial_id(node)
            # Some pages render the same logical button twice
            if not partial_id or partial_id in seen:
                continue
            seen.add(partial_id)

            if self.handled.has_button(partial_id):
                continue

            nav_button = await self.resolver.resolve(reader, node, url, partial_id=partial_id, candidates=candidates)
            if nav_button:
                nav_buttons.append(nav_button)
        return nav_buttons

    async def snapshot(self) -> PageSnapshot:
        """Classify the current render. Uses a fresh cache every call."""
        reader = self.new_reader()
        labels = await self.read_labels(reader)
        snapshot = PageSnapshot(
            url=self.driver.current_url(),
            labels=labels,
            text_boxes=await self.read_text_boxes(reader, labels),
            radio_groups=await self.read_radio_groups(reader, labels),
            drop_downs=await self.read_drop_downs(reader, labels),
        )
        self.logger.debug(
            f"Snapshot: {len(labels)} labels, {len(snapshot.text_boxes)} text boxes, "
            f"{len(snapshot.radio_groups)} radio groups, {len(snapshot.drop_downs)} dropdowns"
        )
        return snapshot
