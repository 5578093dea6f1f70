"""Typed models of the interactive elements found on a form page."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from wizard_form_agent.core.handled_set import HandledSet
from wizard_form_agent.tools.constants import IGNORED_ANSWER


class ElementKind(Enum):
    """Kinds of elements the automation knows how to handle."""
    TEXT_BOX = "text_box"
    RADIO_GROUP = "radio_group"
    DROP_DOWN = "drop_down"
    NAV_BUTTON = "nav_button"


@dataclass
class TextBox:
    element_id: str
    question: str
    answer: str
    node: Any = None
    value_empty: bool = True
    kind: ElementKind = field(default=ElementKind.TEXT_BOX, init=False)


@dataclass
class RadioOption:
    label: str
    node: Any = None
    checked: bool = False


@dataclass
class RadioGroup:
    container_id: str
    question: str
    answer: str = ""
    options: List[RadioOption] = field(default_factory=list)
    kind: ElementKind = field(default=ElementKind.RADIO_GROUP, init=False)

    def add_option(self, option: RadioOption) -> bool:
        """Append an option unless one with the same label exists."""
        if any(existing.label == option.label for existing in self.options):
            return False
        self.options.append(option)
        return True

    @property
    def any_checked(self) -> bool:
        return any(option.checked for option in self.options)


@dataclass
class DropDown:
    element_id: str
    question: str
    answer: str
    node: Any = None
    kind: ElementKind = field(default=ElementKind.DROP_DOWN, init=False)


@dataclass
class NavButton:
    partial_id: str
    node: Any = None
    child_selectors: Tuple[str, ...] = ()
    awaits_navigation: bool = False
    kind: ElementKind = field(default=ElementKind.NAV_BUTTON, init=False)


FormElement = Union[TextBox, RadioGroup, DropDown, NavButton]


def is_ignored(answer: Optional[str]) -> bool:
    return answer == IGNORED_ANSWER


def skip_reason(question: Optional[str], answer: Optional[str], handled: HandledSet) -> Optional[str]:
    """Why a question-bound element should not be handled this tick, or None.

    Shared by every kind that carries a question.
    """
    if not question:
        return "no question"
    if handled.has_question(question):
        return "already handled"
    if not answer:
        return "no answer"
    if is_ignored(answer):
        return "ignored"
    return None


def should_handle(element: FormElement, handled: HandledSet) -> bool:
    """The shared "offer this element to its handler" predicate."""
    if element.kind is ElementKind.NAV_BUTTON:
        return bool(element.partial_id) and not handled.has_button(element.partial_id)
    if element.kind is ElementKind.TEXT_BOX and not element.value_empty:
        return False
    if element.kind is ElementKind.RADIO_GROUP and (element.any_checked or not element.options):
        return False
    return skip_reason(element.question, element.answer, handled) is None


def handled_key(element: FormElement) -> str:
    """Identifier recorded in the HandledSet once the element is handled."""
    if element.kind is ElementKind.NAV_BUTTON:
        return element.partial_id
    return element.question
