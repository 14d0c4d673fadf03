from __future__ import annotations


class MediaServiceError(RuntimeError):
    pass


class ArgumentError(MediaServiceError, ValueError):
    """Caller input is missing or invalid. Never retried."""


class ConfigurationError(MediaServiceError):
    """Credential or required setting is missing/invalid."""


class UnavailableError(MediaServiceError):
    """Backend is transiently unready; the caller may retry with backoff."""


class RequestTimeoutError(MediaServiceError, TimeoutError):
    pass


class RequestCancelledError(MediaServiceError):
    pass


class ProtocolError(MediaServiceError):
    """Response shape did not match any known schema."""


class DecodeError(MediaServiceError):
    """Payload bytes could not be turned into usable media."""


class NotSupportedError(MediaServiceError):
    pass


class OperationInProgressError(MediaServiceError):
    """A request was dispatched while the previous one is still active."""
