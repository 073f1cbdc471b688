"""Custom exceptions for the contact extractor domain."""


class ExtractorError(Exception):
    """Base exception for this project."""


class ConfigError(ExtractorError):
    """Raised when runtime configuration is invalid."""


class ValidationError(ExtractorError):
    """Raised when a submitted URL batch is missing or empty."""


class FetchError(ExtractorError):
    """Raised when every request strategy failed for a URL."""


class RegistryLookupError(ExtractorError):
    """Raised when a job id is unknown to the registry."""


class JobNotReadyError(ExtractorError):
    """Raised when results are requested before a job has completed."""


class JobStateError(ExtractorError):
    """Raised when a completed job is mutated."""
