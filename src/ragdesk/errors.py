"""Error taxonomy shared by ingestion, retrieval and the chat pipeline."""

from __future__ import annotations

from enum import Enum


class RagdeskError(Exception):
    """Base class for all errors raised by ragdesk."""


class ConfigurationError(RagdeskError):
    """Raised when required setup is missing or malformed; fatal at startup."""


class ValidationError(RagdeskError):
    """Raised when caller-supplied input falls outside the accepted contract."""


class IngestionError(RagdeskError):
    """Raised when an ingestion run cannot produce a complete vector store."""


class ProviderErrorKind(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_PUBLIC_MESSAGES = {
    ProviderErrorKind.AUTH: "The AI provider rejected the configured credentials.",
    ProviderErrorKind.RATE_LIMIT: "Rate limit exceeded. Please try again later.",
    ProviderErrorKind.TIMEOUT: "Request to AI provider timed out. Please retry.",
    ProviderErrorKind.UNKNOWN: "An internal error occurred. Please try again.",
}


class ProviderError(RagdeskError):
    """Failure reported by an embedding or generation provider.

    The ``kind`` is assigned once, by the provider adapter that observed the
    failure. The pipeline only adds the ``stage`` in which it happened.
    """

    kind: ProviderErrorKind = ProviderErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        kind: ProviderErrorKind | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.stage = stage

    @property
    def public_message(self) -> str:
        """Message that is safe to show to end users."""

        return _PUBLIC_MESSAGES[self.kind]

    def with_stage(self, stage: str) -> "ProviderError":
        return type(self)(str(self), kind=self.kind, stage=stage)

    @staticmethod
    def for_kind(kind: ProviderErrorKind, message: str) -> "ProviderError":
        return _KIND_TO_CLASS[kind](message)


class AuthError(ProviderError):
    kind = ProviderErrorKind.AUTH


class RateLimitError(ProviderError):
    kind = ProviderErrorKind.RATE_LIMIT


class ProviderTimeoutError(ProviderError):
    kind = ProviderErrorKind.TIMEOUT


class UnknownProviderError(ProviderError):
    kind = ProviderErrorKind.UNKNOWN


_KIND_TO_CLASS: dict[ProviderErrorKind, type[ProviderError]] = {
    ProviderErrorKind.AUTH: AuthError,
    ProviderErrorKind.RATE_LIMIT: RateLimitError,
    ProviderErrorKind.TIMEOUT: ProviderTimeoutError,
    ProviderErrorKind.UNKNOWN: UnknownProviderError,
}


__all__ = [
    "AuthError",
    "ConfigurationError",
    "IngestionError",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderTimeoutError",
    "RagdeskError",
    "RateLimitError",
    "UnknownProviderError",
    "ValidationError",
]
