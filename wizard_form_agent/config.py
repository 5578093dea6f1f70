"""Configuration module for the wizard form agent."""

import os
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from wizard_form_agent.core.page_classifier import PageSelectors
from wizard_form_agent.tools import constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutomationSettings:
    """Immutable knobs for the lifecycle controller."""
    automate_buttons: bool = True
    automate_forms: bool = True
    tick_delay: float = constants.TICK_DELAY
    max_idle_ticks: Optional[int] = None
    render_timeout: int = constants.RENDER_TIMEOUT
    render_check_interval: int = constants.RENDER_CHECK_INTERVAL
    render_min_stable_checks: int = constants.RENDER_MIN_STABLE_CHECKS
    selectors: PageSelectors = field(default_factory=PageSelectors)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('true', 'yes', '1', 'on')


class Config:
    """
    Configuration manager for the wizard form agent.
    """

    DEFAULTS = {
        "browser": {
            "visible": False,
            "window_width": 1280,
            "window_height": 1024,
            "selector_timeout": constants.SELECTOR_TIMEOUT,
            "navigation_timeout": constants.NAVIGATION_TIMEOUT
        },
        "automation": {
            "automate_buttons": True,
            "automate_forms": True,
            "tick_delay_ms": int(constants.TICK_DELAY * 1000),
            "max_idle_ticks": None,
            "render_timeout": constants.RENDER_TIMEOUT,
            "render_check_interval": constants.RENDER_CHECK_INTERVAL,
            "render_min_stable_checks": constants.RENDER_MIN_STABLE_CHECKS
        },
        "selectors": {
            "labels": constants.LABEL_TAGS,
            "text_boxes": constants.TEXT_BOX_TAGS,
            "radios": constants.RADIO_TAGS,
            "drop_downs": constants.BUTTON_TAGS,
            "nav_buttons": constants.NAV_TAGS,
            "drop_down_items": constants.DROP_DOWN_ITEM_TAGS
        },
        "data": {
            "form_data": "data/form.json",
            "nav_targets": "data/button-targets.json"
        },
        "logging": {
            "level": "INFO",
            "log_file": None,
            "console_output": True
        }
    }

    # Environment variable -> (dotted key, converter)
    ENV_OVERRIDES = {
        "WINDOW_WIDTH": ("browser.window_width", int),
        "WINDOW_HEIGHT": ("browser.window_height", int),
        "AUTOMATE_BUTTONS": ("automation.automate_buttons", _parse_bool),
        "AUTOMATE_FORMS": ("automation.automate_forms", _parse_bool),
        "BASE_SLEEP_TIME": ("automation.tick_delay_ms", int),
        "LABEL_TAGS": ("selectors.labels", str),
        "TEXT_BOX_TAGS": ("selectors.text_boxes", str),
        "RADIO_TAGS": ("selectors.radios", str),
        "BUTTON_TAGS": ("selectors.drop_downs", str),
        "NAV_TAGS": ("selectors.nav_buttons", str),
        "DROP_DOWN_ITEM_TAGS": ("selectors.drop_down_items", str),
    }

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to a JSON configuration file. Defaults only when None.
            environ: Environment mapping for overrides, ``os.environ`` when None.
        """
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self.config = self._load_config()
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file, merged over the defaults.

        Returns:
            Dictionary with configuration
        """
        defaults = json.loads(json.dumps(self.DEFAULTS))
        if not self.config_path:
            return defaults

        if not os.path.exists(self.config_path):
            logger.warning(f"Configuration file not found at {self.config_path}. Using defaults.")
            return defaults

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration: {e}")
            return defaults

        logger.info(f"Loaded configuration from {self.config_path}")
        return self._merge_with_defaults(defaults, config)

    def _merge_with_defaults(self, defaults: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge user configuration with defaults to ensure all required fields exist.
        """
        def deep_merge(target, source):
            for key, value in source.items():
                if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                    deep_merge(target[key], value)
                else:
                    target[key] = value

        deep_merge(defaults, config)
        return defaults

    def _apply_env_overrides(self) -> None:
        for env_name, (key, convert) in self.ENV_OVERRIDES.items():
            raw = self.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                self._set_value(key, convert(raw))
                logger.debug(f"Config {key} overridden by ${env_name}")
            except ValueError:
                logger.warning(f"Ignoring invalid value for {env_name}: '{raw}'")

    def _set_value(self, key: str, value: Any) -> None:
        parts = key.split('.')
        config = self.config
        for part in parts[:-1]:
            config = config.setdefault(part, {})
        config[parts[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (dotted notation, e.g. 'browser.visible')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for part in key.split('.'):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value in memory (use ``save`` to persist)."""
        self._set_value(key, value)

    def save(self, path: Optional[str] = None) -> bool:
        """
        Save configuration to file.

        Returns:
            True if successful, False otherwise
        """
        target = path or self.config_path
        if not target:
            logger.error("No configuration path to save to")
            return False
        try:
            directory = os.path.dirname(target)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2)
            logger.info(f"Saved configuration to {target}")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration: {e}")
            return False

    def configure_logging(self, verbose: bool = False):
        """Configure logging based on configuration."""
        level_name = "DEBUG" if verbose else str(self.get('logging.level', 'INFO')).upper()
        log_level = getattr(logging, level_name, logging.INFO)
        log_file = self.get('logging.log_file')
        console_output = self.get('logging.console_output', True)

        handlers = []
        if log_file:
            handlers.append(logging.FileHandler(log_file))
        if console_output:
            handlers.append(logging.StreamHandler())

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers or None,
            force=True
        )

    def get_browser_options(self) -> Dict[str, Any]:
        """
        Get browser configuration options.

        Returns:
            Dictionary with browser options
        """
        return {
            'visible': self.get('browser.visible', False),
            'window_width': self.get('browser.window_width', 1280),
            'window_height': self.get('browser.window_height', 1024),
            'selector_timeout': self.get('browser.selector_timeout', constants.SELECTOR_TIMEOUT),
            'navigation_timeout': self.get('browser.navigation_timeout', constants.NAVIGATION_TIMEOUT)
        }

    def get_selectors(self) -> PageSelectors:
        defaults = PageSelectors()
        return PageSelectors(
            labels=self.get('selectors.labels', defaults.labels),
            text_boxes=self.get('selectors.text_boxes', defaults.text_boxes),
            radios=self.get('selectors.radios', defaults.radios),
            drop_downs=self.get('selectors.drop_downs', defaults.drop_downs),
            nav_buttons=self.get('selectors.nav_buttons', defaults.nav_buttons),
            drop_down_items=self.get('selectors.drop_down_items', defaults.drop_down_items)
        )

    def get_automation_settings(self) -> AutomationSettings:
        """Build the immutable settings handed to the lifecycle controller."""
        max_idle = self.get('automation.max_idle_ticks')
        return AutomationSettings(
            automate_buttons=bool(self.get('automation.automate_buttons', True)),
            automate_forms=bool(self.get('automation.automate_forms', True)),
            tick_delay=self.get('automation.tick_delay_ms', int(constants.TICK_DELAY * 1000)) / 1000,
            max_idle_ticks=int(max_idle) if max_idle else None,
            render_timeout=self.get('automation.render_timeout', constants.RENDER_TIMEOUT),
            render_check_interval=self.get('automation.render_check_interval', constants.RENDER_CHECK_INTERVAL),
            render_min_stable_checks=self.get('automation.render_min_stable_checks', constants.RENDER_MIN_STABLE_CHECKS),
            selectors=self.get_selectors()
        )
