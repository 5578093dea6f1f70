"""Picking the dropdown entry or radio option that corresponds to an answer."""

import logging
import re
from typing import Optional, Sequence, Tuple

from thefuzz import fuzz

from wizard_form_agent.tools.constants import OPTION_FUZZY_THRESHOLD

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    return re.sub(r'\s+', ' ', (text or "").lower().strip())


class OptionMatcher:
    """Substring match first; a strict fuzzy score only as a fallback."""

    def __init__(self, fuzzy_threshold: int = OPTION_FUZZY_THRESHOLD):
        self.fuzzy_threshold = fuzzy_threshold
        self.logger = logging.getLogger(__name__)

    def find_match(self, answer: str, options: Sequence[str]) -> Tuple[Optional[int], int]:
        """Return (index of the chosen option, score) or (None, best score).

        The first option containing the answer wins with score 100.
        """
        target = normalize_text(answer)
        if not target:
            return None, 0

        normalized = [normalize_text(option) for option in options]
        for index, option in enumerate(normalized):
            if option and target in option:
                return index, 100

        best_index, best_score = None, 0
        for index, option in enumerate(normalized):
            if not option:
                continue
            score = fuzz.token_sort_ratio(target, option)
            if score > best_score:
                best_index, best_score = index, score

        if best_index is not None and best_score >= self.fuzzy_threshold:
            self.logger.debug(f"Fuzzy matched '{answer}' to '{options[best_index]}' (score {best_score})")
            return best_index, best_score

        return None, best_score
