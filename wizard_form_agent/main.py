"""Command line entry point for the wizard form agent."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from wizard_form_agent.config import Config
from wizard_form_agent.core.browser_manager import BrowserManager
from wizard_form_agent.core.diagnostics_manager import DiagnosticsManager
from wizard_form_agent.core.exceptions import ActionExecutionError, CatalogValidationError
from wizard_form_agent.core.form_data import FormData, load_form_data
from wizard_form_agent.core.lifecycle_controller import LifecycleController

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fill multi-step application forms from a set of known answers.")
    parser.add_argument("url", help="URL of the first page of the application")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument("--form-data", help="JSON/YAML file with question aliases and answers")
    parser.add_argument("--nav-targets", help="JSON/YAML navigation button catalog")
    parser.add_argument("--visible", action="store_true", help="Show the browser window")
    parser.add_argument("--max-lifecycles", type=int, default=None, help="Stop after this many page lifecycles")
    parser.add_argument("--report", help="Write the diagnostics report to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def run_automation(
    url: str,
    config: Config,
    form_data: FormData,
    max_lifecycles: Optional[int] = None,
    report_path: Optional[str] = None,
) -> int:
    """Launch the browser and run lifecycles until done.

    Returns:
        Process exit code
    """
    diagnostics_manager = DiagnosticsManager()
    browser_manager = BrowserManager.from_options(config.get_browser_options())

    if not await browser_manager.initialize():
        return 1

    controller = LifecycleController(
        browser_manager,
        form_data,
        settings=config.get_automation_settings(),
        diagnostics_manager=diagnostics_manager,
    )

    exit_code = 0
    try:
        history = await controller.run(url, max_lifecycles=max_lifecycles)
        logger.info(f"Finished after {len(history)} lifecycles")
    except ActionExecutionError as e:
        logger.error(f"Automation stopped: {e}")
        exit_code = 1
    finally:
        if report_path:
            diagnostics_manager.save_report(report_path)
        await browser_manager.close()

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    load_dotenv()

    config = Config(args.config)
    if args.visible:
        config.set("browser.visible", True)
    config.configure_logging(verbose=args.verbose)

    form_path = args.form_data or config.get("data.form_data")
    nav_path = args.nav_targets or config.get("data.nav_targets")
    try:
        form_data = load_form_data(form_path, nav_path)
    except CatalogValidationError as e:
        logger.error(f"Invalid form data: {e}")
        return 2

    try:
        return asyncio.run(run_automation(args.url, config, form_data, args.max_lifecycles, args.report))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
