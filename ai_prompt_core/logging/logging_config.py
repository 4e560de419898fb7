"""Logging setup for ai_prompt_core.

@public

Every module obtains its logger through ``get_pipeline_logger(__name__)``;
the first such call installs the configuration below unless the host
application already called ``setup_logging``.

The configuration is a ``logging.config.dictConfig`` mapping, taken from a
YAML file when one is given (``AI_PROMPT_LOGGING_CONFIG``) and otherwise
built in code. ``AI_PROMPT_LOG_LEVEL`` sets the package level for the
built-in mapping.
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

PACKAGE_LOGGER = "ai_prompt_core"

# Loggers that follow a ``setup_logging(level=...)`` override.
DEFAULT_LOG_LEVELS = {
    PACKAGE_LOGGER: "INFO",
    f"{PACKAGE_LOGGER}.prompt_compiler": "INFO",
    f"{PACKAGE_LOGGER}.synthesizer": "INFO",
    f"{PACKAGE_LOGGER}.evaluation": "INFO",
    f"{PACKAGE_LOGGER}.improvement": "INFO",
}

_LINE_FORMAT = "%(asctime)s.%(msecs)03d | %(levelname)-7s | %(name)s - %(message)s"


class LoggingConfig:
    """A lazily loaded logging configuration.

    @public

    The YAML file wins when it exists; a missing or unset path means the
    built-in configuration. The mapping is read once per instance.

    Example:
        >>> LoggingConfig(Path("logging.yml")).apply()
    """

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None and (env_path := os.environ.get("AI_PROMPT_LOGGING_CONFIG")):
            config_path = Path(env_path)
        self.config_path = config_path
        self._config: Optional[Dict[str, Any]] = None

    def load_config(self) -> Dict[str, Any]:
        """Return the dictConfig mapping, reading the YAML file on first use."""
        if self._config is None:
            if self.config_path is not None and self.config_path.exists():
                self._config = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
            else:
                self._config = _builtin_config(os.environ.get("AI_PROMPT_LOG_LEVEL", "INFO"))
        return self._config

    def apply(self):
        """Install the mapping; calling it again reconfigures."""
        logging.config.dictConfig(self.load_config())


def _builtin_config(level: str) -> Dict[str, Any]:
    # Package records go to stderr only so CLI stdout stays machine-readable.
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "line": {"format": _LINE_FORMAT, "datefmt": "%H:%M:%S"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "line",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            PACKAGE_LOGGER: {"level": level, "handlers": ["console"], "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


_logging_config: Optional[LoggingConfig] = None


def setup_logging(config_path: Optional[Path] = None, level: Optional[str] = None):
    """Configure package logging.

    @public

    Args:
        config_path: YAML file in dictConfig format. Defaults to
            ``AI_PROMPT_LOGGING_CONFIG`` or the built-in configuration.
        level: Level forced onto every package logger after the
            configuration is applied (the CLI passes ``DEBUG`` for ``--verbose``).
    """
    global _logging_config

    _logging_config = LoggingConfig(config_path)
    _logging_config.apply()

    if level:
        for logger_name in DEFAULT_LOG_LEVELS:
            logging.getLogger(logger_name).setLevel(level)


def get_pipeline_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``, configuring logging on first use.

    @public
    """
    if _logging_config is None:
        setup_logging()
    return logging.getLogger(name)
