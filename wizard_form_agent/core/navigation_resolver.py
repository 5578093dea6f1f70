"""Matches discovered buttons against the per-domain navigation catalog."""

import logging
from typing import List, Optional, Sequence

from wizard_form_agent.core.browser_interface import NodeHandle
from wizard_form_agent.core.element_reader import ElementReader
from wizard_form_agent.core.elements import NavButton
from wizard_form_agent.core.form_data import NavSequence

logger = logging.getLogger(__name__)


class NavigationResolver:
    """Resolves a button to the click sequence it starts.

    When several catalog entries match the same button the first one in
    catalog order wins.
    """

    def __init__(self, sequences: Sequence[NavSequence]):
        self.sequences = tuple(sequences)
        self.logger = logging.getLogger(__name__)

    def sequences_for(self, url: str) -> List[NavSequence]:
        return [sequence for sequence in self.sequences if sequence.applies_to(url)]

    async def match(self, reader: ElementReader, node: NodeHandle, candidates: Sequence[NavSequence]) -> Optional[NavSequence]:
        for sequence in candidates:
            value = await reader.attr(node, sequence.match_key)
            if value and value == sequence.match_value:
                return sequence
        return None

    async def resolve(
        self,
        reader: ElementReader,
        node: NodeHandle,
        url: str,
        partial_id: Optional[str] = None,
        candidates: Optional[Sequence[NavSequence]] = None,
    ) -> Optional[NavButton]:
        """Bind the matching sequence to ``node``, or return None if nothing matches.

        Args:
            reader: Cached reader for the current tick
            node: Candidate button
            url: Current page URL, used for domain filtering
            partial_id: Precomputed partial identity of the button
            candidates: Domain-filtered sequences, computed from ``url`` when omitted
        """
        if candidates is None:
            candidates = self.sequences_for(url)
        if not candidates:
            return None

        sequence = await self.match(reader, node, candidates)
        if sequence is None:
            return None

        if partial_id is None:
            partial_id = await reader.partial_id(node)

        self.logger.debug(
            f"Button '{partial_id}' matches {sequence.match_key}={sequence.match_value} "
            f"({len(sequence.child_selectors)} follow-up clicks)"
        )
        return NavButton(
            partial_id=partial_id,
            node=node,
            child_selectors=sequence.child_selectors,
            awaits_navigation=sequence.awaits_navigation,
        )
