"""Logging infrastructure for AI Prompt Core.

@public

Key components:
    get_pipeline_logger: Factory function for creating package loggers
    setup_logging: Initialize logging configuration from YAML or defaults
    LoggingConfig: Configuration class for logging settings

Example:
    >>> from ai_prompt_core.logging import get_pipeline_logger
    >>>
    >>> logger = get_pipeline_logger(__name__)
    >>> logger.info("Compiling prompts")
"""

from .logging_config import LoggingConfig, get_pipeline_logger, setup_logging

__all__ = [
    "LoggingConfig",
    "get_pipeline_logger",
    "setup_logging",
]
