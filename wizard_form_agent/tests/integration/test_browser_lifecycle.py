"""End-to-end lifecycles against local HTML pages in a real browser.

Run with ``pytest --run-browser`` (add ``--visible`` to watch).
"""

import logging

import pytest

from wizard_form_agent.config import AutomationSettings
from wizard_form_agent.core.browser_manager import BrowserManager
from wizard_form_agent.core.form_data import NavSequence
from wizard_form_agent.core.lifecycle_controller import EndReason, LifecycleController
from wizard_form_agent.tests.fakes import make_form_data

logger = logging.getLogger(__name__)

pytestmark = pytest.mark.browser

FORM_PAGE = """
<html><body>
  <label for="first">First Name*</label>
  <input type="text" id="first">

  <label for="prefilled">Email</label>
  <input type="text" id="prefilled" value="keep@example.com">

  <div id="auth">
    <label for="auth">Are you legally authorized to work here?</label>
    <div>
      <input type="radio" id="auth-yes" name="auth"><label for="auth-yes">Yes</label>
      <input type="radio" id="auth-no" name="auth"><label for="auth-no">No</label>
    </div>
  </div>

  <label for="country">Country</label>
  <button id="country" aria-haspopup="listbox" onclick="document.getElementById('menu').hidden = !document.getElementById('menu').hidden">Select One</button>
  <ul id="menu" hidden>
    <li role="option" onclick="pick(this)">Canada</li>
    <li role="option" onclick="pick(this)">United States of America</li>
  </ul>
  <script>
    function pick(item) {
      document.getElementById('country').innerText = item.innerText;
      document.getElementById('menu').hidden = true;
    }
  </script>
</body></html>
"""

LANDING_PAGE = """
<html><body>
  <button data-automation-id="adventureButton" onclick="showLink()">Apply</button>
  <div id="choices"></div>
  <script>
    function showLink() {
      document.getElementById('choices').innerHTML =
        '<a data-automation-id="applyManually" href="step2.html">Apply Manually</a>';
    }
  </script>
</body></html>
"""

STEP_TWO_PAGE = """
<html><body>
  <label for="surname">Last name</label>
  <input type="text" id="surname">
</body></html>
"""

SETTINGS = AutomationSettings(
    tick_delay=0.05,
    max_idle_ticks=2,
    render_timeout=5000,
    render_check_interval=50,
    render_min_stable_checks=2,
)


@pytest.fixture
async def browser_manager(request):
    """Headless BrowserManager unless --visible is given."""
    manager = BrowserManager(visible=request.config.getoption("--visible"), selector_timeout=2000)
    try:
        assert await manager.initialize()
        yield manager
    finally:
        await manager.close()


@pytest.fixture
def site(tmp_path):
    (tmp_path / "form.html").write_text(FORM_PAGE)
    (tmp_path / "landing.html").write_text(LANDING_PAGE)
    (tmp_path / "step2.html").write_text(STEP_TWO_PAGE)
    return tmp_path


@pytest.mark.asyncio
async def test_fills_form_page(browser_manager, site):
    form_data = make_form_data({
        ("first name", "given name"): "Ada",
        "email": "ada@example.com",
        "authorized to work": "Yes",
        "country": "United States",
    })
    controller = LifecycleController(browser_manager, form_data, settings=SETTINGS)

    history = await controller.run((site / "form.html").as_uri(), max_lifecycles=1)

    page = browser_manager.page
    assert history[0].end_reason is EndReason.STABLE
    assert await page.input_value("#first") == "Ada"
    assert await page.input_value("#prefilled") == "keep@example.com"
    assert await page.is_checked("#auth-yes")
    assert await page.inner_text("#country") == "United States of America"


@pytest.mark.asyncio
async def test_navigation_sequence_leads_to_next_page(browser_manager, site):
    form_data = make_form_data({"last name": "Lovelace"}, sequences=[
        NavSequence(
            domain="*",
            match_key="data-automation-id",
            match_value="adventureButton",
            child_selectors=("a[data-automation-id='applyManually']",),
            awaits_navigation=True,
        ),
    ])
    controller = LifecycleController(browser_manager, form_data, settings=SETTINGS)

    history = await controller.run((site / "landing.html").as_uri(), max_lifecycles=2)

    assert [c.end_reason for c in history] == [EndReason.NAVIGATED, EndReason.STABLE]
    assert history[1].url.endswith("step2.html")
    assert await browser_manager.page.input_value("#surname") == "Lovelace"
