"""
Shared module - Cross-cutting concerns / Shared Layer

This module provides utilities, constants, and enums used across
multiple layers of the application:
- Environment names, log levels and API constants
- Structured logging configuration
- Docker secret resolution for environment variables

It must not depend on Infrastructure or Frameworks.
"""

from .consts import (
    API_PREFIX,
    CONTINUATION_TOKEN_HEADER,
    EnumEnvironment,
    EnumLogLevel,
)
from .logging import configure_logging, get_logger, update_logging_from_settings

__all__ = [
    "API_PREFIX",
    "CONTINUATION_TOKEN_HEADER",
    "EnumEnvironment",
    "EnumLogLevel",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
