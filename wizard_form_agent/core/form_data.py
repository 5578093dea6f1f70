"""Loading and validation of form answers and the navigation button catalog."""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from wizard_form_agent.core.alias_map import AliasMap
from wizard_form_agent.core.exceptions import CatalogValidationError
from wizard_form_agent.tools.constants import IGNORED_ANSWER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormAnswer:
    """One answer plus every question phrasing it applies to."""
    aliases: Tuple[str, ...]
    answer: str

    @property
    def ignored(self) -> bool:
        return self.answer == IGNORED_ANSWER


@dataclass(frozen=True)
class NavSequence:
    """Catalog entry describing which button starts a click sequence."""
    domain: str
    match_key: str
    match_value: str
    child_selectors: Tuple[str, ...] = ()
    awaits_navigation: bool = False

    def applies_to(self, url: str) -> bool:
        return self.domain == "*" or self.domain.lower() in (url or "").lower()


@dataclass(frozen=True)
class FormData:
    """Immutable bundle of everything the automation reads at runtime."""
    answers: AliasMap = field(default_factory=AliasMap)
    nav_sequences: Tuple[NavSequence, ...] = ()

    def answer_for(self, question: Optional[str]) -> Optional[str]:
        return self.answers.get(question) if question else None


def _read_structured_file(path: str) -> Any:
    if not os.path.exists(path):
        raise CatalogValidationError("Data file not found", source=path)

    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.endswith((".yaml", ".yml")):
                return yaml.safe_load(f)
            return json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise CatalogValidationError(f"Could not parse data file: {e}", source=path) from e


def parse_form_answers(entries: Any, source: str = "<memory>") -> List[FormAnswer]:
    """Validate raw ``{aliases|question, answer}`` entries."""
    if not isinstance(entries, list):
        raise CatalogValidationError("Form data must be a list of entries", source=source)

    answers = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CatalogValidationError("Entry is not an object", source=source, index=index)

        aliases = entry.get("aliases", entry.get("question"))
        if isinstance(aliases, str):
            aliases = [aliases]
        if not isinstance(aliases, list) or not aliases:
            raise CatalogValidationError("Entry needs a non-empty 'aliases' list", source=source, index=index)
        if any(not isinstance(alias, str) or not alias.strip() for alias in aliases):
            raise CatalogValidationError("Aliases must be non-empty strings", source=source, index=index)

        answer = entry.get("answer")
        if not isinstance(answer, str) or answer == "":
            raise CatalogValidationError("Entry needs a non-empty string 'answer'", source=source, index=index)

        answers.append(FormAnswer(aliases=tuple(aliases), answer=answer))

    return answers


def _parse_sequence(raw: Dict[str, Any], domain: str, source: str, index: int) -> NavSequence:
    match_key = raw.get("match_key", raw.get("parent_key"))
    match_value = raw.get("match_value", raw.get("parent_value"))
    children = raw.get("child_selectors", raw.get("children", []))
    awaits = raw.get("awaits_navigation", raw.get("waitForNavigation", False))

    if not isinstance(match_key, str) or not match_key:
        raise CatalogValidationError("Sequence needs a 'parent_key'", source=source, index=index)
    if not isinstance(match_value, str) or not match_value:
        raise CatalogValidationError("Sequence needs a 'parent_value'", source=source, index=index)
    if not isinstance(children, list) or any(not isinstance(c, str) or not c for c in children):
        raise CatalogValidationError("Sequence 'children' must be a list of selectors", source=source, index=index)
    if not isinstance(awaits, bool):
        raise CatalogValidationError("'waitForNavigation' must be a boolean", source=source, index=index)

    return NavSequence(
        domain=domain,
        match_key=match_key,
        match_value=match_value,
        child_selectors=tuple(children),
        awaits_navigation=awaits,
    )


def parse_nav_catalog(entries: Any, source: str = "<memory>") -> List[NavSequence]:
    """Flatten the button catalog into ``NavSequence`` entries, keeping file order.

    Accepts the grouped layout ``{domain, sequence: [...]}`` as well as flat
    entries that carry their own ``domain``.
    """
    if not isinstance(entries, list):
        raise CatalogValidationError("Navigation catalog must be a list", source=source)

    sequences = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CatalogValidationError("Entry is not an object", source=source, index=index)

        domain = entry.get("domain")
        if not isinstance(domain, str) or not domain:
            raise CatalogValidationError("Entry needs a non-empty 'domain'", source=source, index=index)

        if "sequence" in entry:
            group = entry["sequence"]
            if not isinstance(group, list):
                raise CatalogValidationError("'sequence' must be a list", source=source, index=index)
            for raw in group:
                if not isinstance(raw, dict):
                    raise CatalogValidationError("Sequence is not an object", source=source, index=index)
                sequences.append(_parse_sequence(raw, domain, source, index))
        else:
            sequences.append(_parse_sequence(entry, domain, source, index))

    return sequences


def build_alias_map(answers: Sequence[FormAnswer]) -> AliasMap:
    alias_map: AliasMap = AliasMap()
    for entry in answers:
        for alias in entry.aliases:
            if alias.lower() in alias_map:
                logger.warning(f"Alias '{alias}' listed more than once; the later answer wins")
            alias_map.add(alias, entry.answer)
    return alias_map


def load_form_data(form_path: str, nav_targets_path: Optional[str] = None) -> FormData:
    """Load answers and, optionally, the navigation catalog.

    Raises:
        CatalogValidationError: on any missing file or malformed entry.
    """
    answers = parse_form_answers(_read_structured_file(form_path), source=form_path)
    sequences: List[NavSequence] = []
    if nav_targets_path:
        sequences = parse_nav_catalog(_read_structured_file(nav_targets_path), source=nav_targets_path)

    alias_map = build_alias_map(answers)
    logger.info(
        f"Loaded {len(answers)} answers ({len(alias_map)} aliases) from {form_path} "
        f"and {len(sequences)} navigation sequences"
    )
    return FormData(answers=alias_map, nav_sequences=tuple(sequences))
