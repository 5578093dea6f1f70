import pytest


def pytest_addoption(parser):
    """Add custom command-line options to pytest."""
    parser.addoption(
        "--run-browser", action="store_true", default=False, help="Run tests that launch a real Playwright browser"
    )
    parser.addoption(
        "--visible", action="store_true", default=False, help="Show browser window"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-browser"):
        return
    skip_browser = pytest.mark.skip(reason="needs --run-browser")
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)
