"""Custom exception hierarchy for Lectern.

All application exceptions inherit from :class:`LecternError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "sqlite", "local_storage") caused the
failure.

The hierarchy is split into two groups:

    LecternError  (base)
    +-- ConfigurationError         (startup / missing config)
    +-- LLMError                   (any LLM API call failure)
    +-- ProviderUnavailableError   (external service down / unreachable)
    +-- StorageError               (object storage read/write failure)
    |   +-- StorageObjectNotFoundError
    +-- NarrationError             (speech synthesis failure)
    +-- PersistenceError           (relational store failure)
    +-- PipelineFailure            (caller-facing, carries ``kind``)
        +-- UnauthorizedError
        +-- DocumentNotFoundError
        +-- NoContentAvailableError
        +-- GenerationExhaustedError
        +-- MalformedOutputError
        +-- PipelineTimeoutError

Only :class:`PipelineFailure` subclasses cross the API boundary.  The
``kind`` attribute is the stable classification string clients switch on.
"""


class LecternError(Exception):
    """Base exception for all Lectern errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Internal / provider errors
# ---------------------------------------------------------------------------

class ConfigurationError(LecternError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(LecternError):
    """Raised when an LLM API call fails or returns nothing usable."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(LecternError):
    """Raised when an external service or provider is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageError(LecternError):
    """Raised when object storage cannot serve or accept bytes."""

    def __init__(
        self,
        message: str = "Object storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageObjectNotFoundError(StorageError):
    """Raised when no object exists under the requested storage key."""

    def __init__(
        self,
        key: str,
        provider_name: str | None = None,
    ) -> None:
        self._key = key
        super().__init__(message=f"Object not found: {key}", provider_name=provider_name)

    @property
    def key(self) -> str:
        return self._key


class NarrationError(LecternError):
    """Raised when speech synthesis fails or returns empty audio."""

    def __init__(
        self,
        message: str = "Narration synthesis failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PersistenceError(LecternError):
    """Raised when the relational store rejects a read or write."""

    def __init__(
        self,
        message: str = "Persistence operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Caller-facing pipeline failures
# ---------------------------------------------------------------------------

class PipelineFailure(LecternError):
    """Base for failures reported to the caller of a generation pipeline.

    Subclasses set ``kind`` (the classification string) and
    ``status_code`` (the HTTP status the API layer responds with).
    ``details`` holds optional diagnostic text safe to show a client.
    """

    kind: str = "pipeline-failed"
    status_code: int = 500

    def __init__(
        self,
        message: str = "Pipeline failed",
        details: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._details = details
        super().__init__(message=message, provider_name=provider_name)

    @property
    def details(self) -> str | None:
        return self._details


class UnauthorizedError(PipelineFailure):
    """Raised when no authenticated caller identity is present."""

    kind = "unauthorized"
    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: str | None = None) -> None:
        super().__init__(message=message, details=details)


class DocumentNotFoundError(PipelineFailure):
    """Raised when the document does not exist or belongs to another user."""

    kind = "not-found"
    status_code = 404

    def __init__(self, document_id: str) -> None:
        self._document_id = document_id
        super().__init__(message="File not found", details=f"document_id={document_id}")

    @property
    def document_id(self) -> str:
        return self._document_id


class NoContentAvailableError(PipelineFailure):
    """Raised when a document yields no usable text (missing bytes, empty extraction)."""

    kind = "no-content"
    status_code = 400

    def __init__(self, reason: str, document_id: str | None = None) -> None:
        self._reason = reason
        self._document_id = document_id
        super().__init__(message="No content available for this file", details=reason)

    @property
    def reason(self) -> str:
        return self._reason

    @property
    def document_id(self) -> str | None:
        return self._document_id


class GenerationExhaustedError(PipelineFailure):
    """Raised when every generation attempt failed to produce parseable output."""

    kind = "generation-failed"
    status_code = 502

    def __init__(self, message: str = "Generation failed", attempts: int = 0, details: str | None = None) -> None:
        self._attempts = attempts
        super().__init__(message=message, details=details)

    @property
    def attempts(self) -> int:
        return self._attempts


class MalformedOutputError(PipelineFailure):
    """Raised when parsed output contained no item that passed validation."""

    kind = "malformed-output"
    status_code = 502

    def __init__(self, message: str = "Generated output failed validation", details: str | None = None) -> None:
        super().__init__(message=message, details=details)


class PipelineTimeoutError(PipelineFailure):
    """Raised when a pipeline call exceeds its wall-clock budget."""

    kind = "timeout"
    status_code = 504

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            message="Pipeline timed out",
            details=f"exceeded {timeout_seconds:g}s budget",
        )
