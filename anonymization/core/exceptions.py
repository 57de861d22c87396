# anonymization/core/exceptions.py

"""Custom exception hierarchy for the PII anonymization library.

This module defines the specific error types used throughout the package
to differentiate between configuration, backend, engine and export errors.
"""


class AnonymizationError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigurationError(AnonymizationError):
    """Raised when configuration loading or validation fails."""

    pass


class InitializationError(AnonymizationError):
    """Raised when the recognition backend fails to load."""

    pass


class RecognitionError(AnonymizationError):
    """Describes a failed call to the recognition backend.

    Instances are returned inside a RecognitionOutcome rather than raised
    past the recognizer adapter.

    Attributes:
        kind: ``unavailable`` when no model is loaded, ``inference`` when
            the model raised while processing the text.
    """

    UNAVAILABLE = "unavailable"
    INFERENCE = "inference"

    def __init__(self, message: str, kind: str = INFERENCE) -> None:
        super().__init__(message)
        self.kind = kind


class ValidationError(AnonymizationError):
    """Raised on invalid configuration values or malformed detections."""

    pass


class ExportError(AnonymizationError):
    """Raised when a result cannot be serialized for export."""

    pass
