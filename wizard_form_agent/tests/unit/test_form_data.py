"""Tests for loading answers and the navigation catalog."""

import json

import pytest
import yaml

from wizard_form_agent.core.exceptions import CatalogValidationError
from wizard_form_agent.core.form_data import (
    NavSequence,
    build_alias_map,
    load_form_data,
    parse_form_answers,
    parse_nav_catalog,
)
from wizard_form_agent.tools.constants import IGNORED_ANSWER

ANSWERS = [
    {"question": ["first name", "given name"], "answer": "Ada"},
    {"aliases": ["middle name"], "answer": IGNORED_ANSWER},
]

CATALOG = [
    {
        "domain": "myworkdayjobs.com",
        "sequence": [
            {"parent_key": "data-automation-id", "parent_value": "adventureButton",
             "waitForNavigation": True, "children": ["#applyManually"]},
            {"parent_key": "data-automation-id", "parent_value": "next", "children": []},
        ],
    },
    {"domain": "*", "match_key": "id", "match_value": "accept", "child_selectors": ["#ok"]},
]


def test_parse_form_answers_accepts_question_or_aliases_key():
    answers = parse_form_answers(ANSWERS)

    assert answers[0].aliases == ("first name", "given name")
    assert answers[0].answer == "Ada"
    assert answers[1].ignored


@pytest.mark.parametrize("entry", [
    {"answer": "Ada"},
    {"question": [], "answer": "Ada"},
    {"question": ["first name", ""], "answer": "Ada"},
    {"question": ["first name"]},
    {"question": ["first name"], "answer": ""},
    "first name=Ada",
])
def test_parse_form_answers_rejects_malformed_entries(entry):
    with pytest.raises(CatalogValidationError) as excinfo:
        parse_form_answers([ANSWERS[0], entry], source="form.json")

    assert excinfo.value.index == 1
    assert "form.json" in str(excinfo.value)


def test_parse_nav_catalog_flattens_in_file_order():
    sequences = parse_nav_catalog(CATALOG)

    assert [s.match_value for s in sequences] == ["adventureButton", "next", "accept"]
    assert sequences[0] == NavSequence(
        domain="myworkdayjobs.com",
        match_key="data-automation-id",
        match_value="adventureButton",
        child_selectors=("#applyManually",),
        awaits_navigation=True,
    )
    assert sequences[1].awaits_navigation is False
    assert sequences[2].domain == "*"
    assert sequences[2].child_selectors == ("#ok",)


@pytest.mark.parametrize("entry", [
    {"sequence": []},
    {"domain": "x.com", "sequence": [{"parent_value": "next"}]},
    {"domain": "x.com", "sequence": [{"parent_key": "id", "parent_value": "next", "children": "#a"}]},
    {"domain": "x.com", "sequence": [{"parent_key": "id", "parent_value": "n", "waitForNavigation": "yes"}]},
    {"domain": "x.com", "sequence": {"parent_key": "id"}},
])
def test_parse_nav_catalog_rejects_malformed_entries(entry):
    with pytest.raises(CatalogValidationError):
        parse_nav_catalog([entry])


def test_nav_sequence_domain_matching():
    workday = NavSequence(domain="MyWorkdayJobs.com", match_key="id", match_value="x")
    anywhere = NavSequence(domain="*", match_key="id", match_value="x")

    assert workday.applies_to("https://acme.wd1.myworkdayjobs.com/apply")
    assert not workday.applies_to("https://boards.greenhouse.io/acme")
    assert anywhere.applies_to("https://boards.greenhouse.io/acme")


def test_build_alias_map_shares_values():
    alias_map = build_alias_map(parse_form_answers(ANSWERS))

    assert alias_map.get("What is your given name?") == "Ada"
    assert alias_map.get("Middle Name") == IGNORED_ANSWER
    assert len(alias_map.values()) == 2


def test_load_form_data_from_json_and_yaml(tmp_path):
    form_path = tmp_path / "form.yaml"
    form_path.write_text(yaml.safe_dump(ANSWERS))
    nav_path = tmp_path / "button-targets.json"
    nav_path.write_text(json.dumps(CATALOG))

    form_data = load_form_data(str(form_path), str(nav_path))

    assert form_data.answer_for("First name*") == "Ada"
    assert form_data.answer_for("") is None
    assert len(form_data.nav_sequences) == 3


def test_load_form_data_without_catalog(tmp_path):
    form_path = tmp_path / "form.json"
    form_path.write_text(json.dumps(ANSWERS))

    form_data = load_form_data(str(form_path))

    assert form_data.nav_sequences == ()


def test_load_form_data_missing_or_broken_file_is_fatal(tmp_path):
    with pytest.raises(CatalogValidationError):
        load_form_data(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(CatalogValidationError):
        load_form_data(str(broken))
