# File: mediasense/core/errors.py


class MediaSenseError(Exception):
    """Base class for every error raised by the pipeline."""


class ConfigurationError(MediaSenseError):
    """Missing credentials or tooling. Never retried."""


class ProviderError(MediaSenseError):
    """An external service rejected the request."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class TransientProviderError(ProviderError):
    """5xx or rate limited. Eligible for a fallback transition."""


class UnsupportedInputError(MediaSenseError):
    """Corrupt, empty, too small or unsupported media."""


class ChunkingFailed(MediaSenseError):
    """Raised only when every chunk conversion failed."""


class TranscriptionTimeoutError(MediaSenseError, TimeoutError):
    """Long-running recognition exceeded its polling budget."""


class OperationCancelled(MediaSenseError):
    """The caller cancelled a long-running recognition."""
