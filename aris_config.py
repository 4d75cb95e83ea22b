"""
aris_config.py

Configuration for the Aris proof editor.

Settings are read once from a YAML file and exposed through a process-wide
ArisConfig object with dict-style access. A missing file falls back to the
defaults below.

Usage:
    from aris_config import configure_logging, get_config

    cfg = get_config()
    limit = cfg.get("undo_limit", 0)
    configure_logging(cfg)

The file is located via the ARIS_CONFIG environment variable, defaulting to
config/aris.yaml relative to the working directory.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from aris_exceptions import InvalidConfigError
from common.constants import (
    DEFAULT_GOAL_CAPACITY,
    DEFAULT_SIBLING_SCOPE_POLICY,
    DEFAULT_UNDO_LIMIT,
)
from component_10_logging_config import get_logger, setup_logging

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "aris.yaml"

DEFAULTS: Dict[str, Any] = {
    "undo_limit": DEFAULT_UNDO_LIMIT,
    "sibling_scope_policy": DEFAULT_SIBLING_SCOPE_POLICY,
    "goal_capacity": DEFAULT_GOAL_CAPACITY,
    "verbose": False,
    "log_level": "INFO",
    "theme": "dark",
}

_ALLOWED_VALUES: Dict[str, tuple] = {
    "sibling_scope_policy": ("entire_subproof", "reject"),
    "log_level": ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
    "theme": ("dark", "light"),
}


class ArisConfig:
    """
    Dict-like configuration container.

    Values are validated against the type of their default and, for
    enumerated settings, against the allowed values.
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(DEFAULTS)
        for key, value in (values or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Sets a value after validating it.

        Raises:
            InvalidConfigError: Wrong type or value not allowed
        """
        if key in DEFAULTS:
            expected_type = type(DEFAULTS[key])
            # bool is a subclass of int; keep the two apart
            if isinstance(value, bool) != (expected_type is bool) or not isinstance(
                value, expected_type
            ):
                raise InvalidConfigError(
                    f"Setting '{key}' expects {expected_type.__name__}",
                    context={"key": key, "value": value},
                )
        allowed = _ALLOWED_VALUES.get(key)
        if allowed and value not in allowed:
            raise InvalidConfigError(
                f"Setting '{key}' must be one of {', '.join(allowed)}",
                context={"key": key, "value": value},
            )
        if key == "undo_limit" and value < 0:
            raise InvalidConfigError(
                "undo_limit must not be negative", context={"value": value}
            )
        if key == "goal_capacity" and value < 1:
            raise InvalidConfigError(
                "goal_capacity must be at least 1", context={"value": value}
            )
        self._values[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    @classmethod
    def from_yaml(cls, config_path: Path) -> "ArisConfig":
        """
        Loads configuration from a YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            ArisConfig with file values applied over the defaults

        Raises:
            InvalidConfigError: Malformed YAML or invalid values
        """
        config_file = Path(config_path)
        if not config_file.exists():
            logger.warning(
                "Config file not found, using defaults",
                extra={"config_path": str(config_file)},
            )
            return cls()

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigError(
                "Malformed YAML in config file",
                context={"config_path": str(config_file)},
                original_exception=e,
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidConfigError(
                "Config file must contain a mapping",
                context={"config_path": str(config_file)},
            )

        # Settings may be nested under an 'aris' section
        section = data.get("aris", data)
        unknown = sorted(set(section) - set(DEFAULTS))
        if unknown:
            logger.warning(
                "Ignoring unknown config keys", extra={"keys": ", ".join(unknown)}
            )
            section = {k: v for k, v in section.items() if k in DEFAULTS}

        config = cls(section)
        logger.info(
            "Configuration loaded",
            extra={"config_path": str(config_file), "keys": len(section)},
        )
        return config


_config: Optional[ArisConfig] = None
_config_lock = threading.Lock()


def get_config() -> ArisConfig:
    """
    Returns the process-wide configuration, loading it on first use.
    """
    global _config
    with _config_lock:
        if _config is None:
            path = Path(os.environ.get("ARIS_CONFIG", str(DEFAULT_CONFIG_PATH)))
            _config = ArisConfig.from_yaml(path)
        return _config


def reset_config() -> None:
    """Drops the cached configuration so the next get_config() reloads it."""
    global _config
    with _config_lock:
        _config = None


def configure_logging(config: Optional[ArisConfig] = None) -> None:
    """
    Applies the logging settings of a configuration.

    verbose forces DEBUG on the console; otherwise log_level is used.
    """
    config = config or get_config()
    if config.get("verbose", False):
        console_level = logging.DEBUG
    else:
        console_level = logging.getLevelName(config.get("log_level", "INFO"))
    setup_logging(console_level=console_level)
