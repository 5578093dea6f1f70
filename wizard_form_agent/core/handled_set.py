"""Bookkeeping of what has already been acted on during one page lifecycle."""

import logging
from typing import Optional, Set, Tuple

logger = logging.getLogger(__name__)


class HandledSet:
    """Questions and buttons already handled within the current lifecycle.

    ``reset`` is called at the start of every lifecycle; nothing carries over
    from one URL to the next.
    """

    def __init__(self):
        self.lifecycle_id: Optional[int] = None
        self.questions: Set[str] = set()
        self.buttons: Set[str] = set()
        self._reported: Set[Tuple[str, str]] = set()

    def reset(self, lifecycle_id: Optional[int] = None) -> None:
        self.lifecycle_id = lifecycle_id
        self.questions.clear()
        self.buttons.clear()
        self._reported.clear()

    def has_question(self, question: Optional[str]) -> bool:
        return bool(question) and question in self.questions

    def has_button(self, partial_id: Optional[str]) -> bool:
        return bool(partial_id) and partial_id in self.buttons

    def mark_question(self, question: str) -> None:
        if question:
            self.questions.add(question)

    def mark_button(self, partial_id: str) -> None:
        if partial_id:
            self.buttons.add(partial_id)

    def first_report(self, subject: str, reason: str) -> bool:
        """True the first time a (subject, reason) skip is seen this lifecycle."""
        key = (subject, reason)
        if key in self._reported:
            return False
        self._reported.add(key)
        return True

    def __len__(self) -> int:
        return len(self.questions) + len(self.buttons)
