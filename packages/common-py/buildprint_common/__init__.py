"""buildprint common - shared errors, logging and constants."""

from .constants import LOG_LEVELS, RECIPE_INSTRUCTIONS, SOURCE_INSTRUCTIONS, DigestDefaults, LogDefaults
from .errors import (
    BuildprintError,
    DigestError,
    HashError,
    ParseError,
    ResolveError,
    ValidationError,
)
from .logger import (
    BuildprintLogger,
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "BuildprintError",
    "ValidationError",
    "DigestError",
    "ParseError",
    "ResolveError",
    "HashError",
    # Logging
    "BuildprintLogger",
    "get_logger",
    "configure_logging",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    # Constants
    "DigestDefaults",
    "LogDefaults",
    "LOG_LEVELS",
    "RECIPE_INSTRUCTIONS",
    "SOURCE_INSTRUCTIONS",
]
