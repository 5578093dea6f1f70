"""Tests for the per-page lifecycle state machine."""

from dataclasses import replace

import pytest

from wizard_form_agent.core.exceptions import ActionExecutionError, TransientDOMError
from wizard_form_agent.core.form_data import NavSequence
from wizard_form_agent.core.lifecycle_controller import EndReason, LifecycleController, LifecycleState
from wizard_form_agent.tests.fakes import (
    SELECTORS,
    WORKDAY_URL,
    FakeNode,
    add_radio_group,
    add_text_box,
    make_form_data,
)

NEXT_PAGE = WORKDAY_URL + "/step-2"


def navigates_to(url):
    def on_click(driver):
        driver.url = url
    return on_click


@pytest.fixture
def controller(driver, form_data, fast_settings, diagnostics):
    return LifecycleController(driver, form_data, settings=fast_settings, diagnostics_manager=diagnostics)


@pytest.mark.asyncio
async def test_fills_page_then_ends_when_stable(driver, controller, diagnostics):
    add_text_box(driver, "name", "What is your name?")
    add_radio_group(driver, "auth", "Are you authorized to work?", ["Yes", "No"])

    context = await controller.run_lifecycle()

    assert context.state is LifecycleState.END
    assert context.end_reason is EndReason.STABLE
    assert context.handled_questions == 2
    assert driver.typed == ["Ada"]
    assert len(driver.clicks) == 2
    assert diagnostics.stages["lifecycle_0"].success is True
    assert controller.current is None


@pytest.mark.asyncio
async def test_ignored_field_is_untouched_but_handled(driver, controller):
    add_text_box(driver, "middle", "Middle name")

    context = await controller.run_lifecycle()

    assert "Middle name" in controller.handled.questions
    assert context.handled_questions == 1
    assert driver.clicks == []
    assert driver.typed == []


@pytest.mark.asyncio
async def test_handled_set_resets_between_lifecycles(driver, controller):
    add_text_box(driver, "name", "What is your name?")
    add_text_box(driver, "name-confirm", "What is your name? (again)")

    await controller.run_lifecycle()

    assert driver.typed == ["Ada", "Ada"]

    await controller.run_lifecycle()

    # A new lifecycle starts with an empty handled set
    assert driver.typed == ["Ada", "Ada", "Ada", "Ada"]
    assert [c.lifecycle_id for c in controller.history] == [0, 1]


@pytest.mark.asyncio
async def test_duplicate_question_in_one_snapshot_is_handled_once(driver, form_data, fast_settings):
    first = add_text_box(driver, "name", "What is your name?")
    second = add_text_box(driver, "name-2", "What is your name?")
    controller = LifecycleController(driver, form_data, settings=fast_settings)

    await controller.run_lifecycle()

    assert driver.typed == ["Ada"]
    assert driver.clicks == [first]
    assert second not in driver.clicks


@pytest.mark.asyncio
async def test_url_change_ends_classify_loop(driver, controller):
    node = add_text_box(driver, "name", "What is your name?")
    node.on_click = navigates_to(NEXT_PAGE)
    add_text_box(driver, "surname", "Last name")

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.NAVIGATED
    assert context.url == WORKDAY_URL
    # Nothing after the navigating click touches the new page
    assert driver.typed == ["Ada"]


@pytest.mark.asyncio
async def test_navigation_phase_runs_before_forms(driver, fast_settings):
    form_data = make_form_data({"what is your name": "Ada"}, sequences=[
        NavSequence(domain="*", match_key="data-automation-id", match_value="bottom-navigation-next-button"),
    ])
    next_button = FakeNode(
        properties={"innerText": "Next"},
        attributes={"data-automation-id": "bottom-navigation-next-button"},
        on_click=navigates_to(NEXT_PAGE),
    )
    driver.register(SELECTORS.nav_buttons, next_button)
    add_text_box(driver, "name", "What is your name?")
    controller = LifecycleController(driver, form_data, settings=fast_settings)

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.NAVIGATED
    assert context.handled_buttons == 1
    assert driver.clicks == [next_button]
    assert driver.typed == []


@pytest.mark.asyncio
async def test_rerendering_nav_button_still_lets_forms_fill(driver, fast_settings):
    form_data = make_form_data({"what is your name": "Ada"}, sequences=[
        NavSequence(domain="*", match_key="data-automation-id", match_value="expand"),
    ])
    expand = FakeNode(properties={"id": "expand"}, attributes={"data-automation-id": "expand"})
    driver.register(SELECTORS.nav_buttons, expand)
    add_text_box(driver, "name", "What is your name?")

    async def click(node):
        if node is expand:
            raise TransientDOMError("Element is not attached to the DOM")
        driver.clicks.append(node)

    driver.click = click
    controller = LifecycleController(driver, form_data, settings=fast_settings)

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.STABLE
    assert driver.typed == ["Ada"]
    # The button raised, so it stays unhandled
    assert context.handled_buttons == 0


@pytest.mark.asyncio
async def test_transient_error_after_navigation_ends_lifecycle(driver, fast_settings):
    form_data = make_form_data({"what is your name": "Ada"}, sequences=[
        NavSequence(domain="*", match_key="data-automation-id", match_value="next"),
    ])
    next_button = FakeNode(properties={"id": "next"}, attributes={"data-automation-id": "next"})
    driver.register(SELECTORS.nav_buttons, next_button)
    add_text_box(driver, "name", "What is your name?")

    async def click(node):
        driver.url = NEXT_PAGE
        raise TransientDOMError("Execution context was destroyed")

    driver.click = click
    controller = LifecycleController(driver, form_data, settings=fast_settings)

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.TRANSIENT_ERROR
    assert driver.typed == []


@pytest.mark.asyncio
async def test_disabled_buttons_are_never_clicked(driver, fast_settings):
    form_data = make_form_data({}, sequences=[
        NavSequence(domain="*", match_key="data-automation-id", match_value="next"),
    ])
    driver.register(SELECTORS.nav_buttons, FakeNode(attributes={"data-automation-id": "next"}))
    settings = replace(fast_settings, automate_buttons=False, automate_forms=False)
    controller = LifecycleController(driver, form_data, settings=settings)

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.DISABLED
    assert driver.clicks == []


@pytest.mark.asyncio
async def test_transient_error_ends_lifecycle_quietly(driver, controller):
    async def torn_down(selector):
        raise TransientDOMError("Execution context was destroyed")

    driver.query_all = torn_down

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.TRANSIENT_ERROR
    assert context.error is None


@pytest.mark.asyncio
async def test_action_error_is_recorded(driver, controller, diagnostics):
    add_text_box(driver, "name", "What is your name?")

    async def broken_click(node):
        raise ActionExecutionError("Element is outside of the viewport")

    driver.click = broken_click

    context = await controller.run_lifecycle()

    assert context.end_reason is EndReason.ACTION_ERROR
    assert "viewport" in context.error
    assert context.handled_questions == 0
    # The lifecycle itself completes, so the stage is not marked failed
    assert diagnostics.stages["lifecycle_0"].success is True


@pytest.mark.asyncio
async def test_run_processes_pages_until_limit(driver, controller):
    add_text_box(driver, "name", "What is your name?")
    driver.next_url = NEXT_PAGE

    history = await controller.run(WORKDAY_URL, max_lifecycles=2)

    assert [c.url for c in history] == [WORKDAY_URL, NEXT_PAGE]
    assert all(c.end_reason is EndReason.STABLE for c in history)
    assert driver.typed == ["Ada", "Ada"]


@pytest.mark.asyncio
async def test_run_fails_when_start_page_cannot_open(driver, controller):
    async def unreachable(url):
        return False

    driver.navigate = unreachable

    with pytest.raises(ActionExecutionError):
        await controller.run("https://unreachable.example")
