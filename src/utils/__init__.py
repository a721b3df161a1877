"""Utility modules for Lectern.

- **errors** -- Exception hierarchy rooted at LecternError.  Internal
  provider failures and caller-facing :class:`PipelineFailure` subclasses,
  each of which carries a stable ``kind`` and an HTTP status.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

# -- Exception hierarchy ----------------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    DocumentNotFoundError,
    GenerationExhaustedError,
    LecternError,
    LLMError,
    MalformedOutputError,
    NarrationError,
    NoContentAvailableError,
    PersistenceError,
    PipelineFailure,
    PipelineTimeoutError,
    ProviderUnavailableError,
    StorageError,
    StorageObjectNotFoundError,
    UnauthorizedError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "DocumentNotFoundError",
    "GenerationExhaustedError",
    "LLMError",
    "LecternError",
    "MalformedOutputError",
    "NarrationError",
    "NoContentAvailableError",
    "PersistenceError",
    "PipelineFailure",
    "PipelineTimeoutError",
    "ProviderUnavailableError",
    "StorageError",
    "StorageObjectNotFoundError",
    "UnauthorizedError",
    "configure_logging",
    "get_logger",
]
