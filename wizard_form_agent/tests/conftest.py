"""Test configuration for pytest."""

import sys
from pathlib import Path

# Add the project root directory to Python path
project_root = str(Path(__file__).parent.parent.parent)
sys.path.append(project_root)

# --- Pytest Fixtures ---

import pytest

from wizard_form_agent.config import AutomationSettings
from wizard_form_agent.core.diagnostics_manager import DiagnosticsManager
from wizard_form_agent.core.handled_set import HandledSet
from wizard_form_agent.tests.fakes import FakeDriver, make_form_data
from wizard_form_agent.tools.constants import IGNORED_ANSWER


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def handled():
    handled_set = HandledSet()
    handled_set.reset(0)
    return handled_set


@pytest.fixture
def diagnostics():
    return DiagnosticsManager(run_id="test")


@pytest.fixture
def form_data():
    return make_form_data({
        "what is your name": "Ada",
        ("last name", "surname"): "Lovelace",
        "authorized to work": "Yes",
        "country": "United States of America",
        "middle name": IGNORED_ANSWER,
    })


@pytest.fixture
def fast_settings():
    """Settings that never sleep and stop after two idle ticks."""
    return AutomationSettings(
        tick_delay=0,
        max_idle_ticks=2,
        render_timeout=50,
        render_check_interval=1,
        render_min_stable_checks=2,
    )
