# anonymization/core/definitions.py

"""Constants for detectable PII types and anonymization modes."""


class PIIType:
    """Canonical PII type tags used throughout the detection pipeline."""

    EMAIL = "email"
    PHONE = "phone"
    SSN = "ssn"
    CREDIT_CARD = "creditCard"
    NAME = "name"
    ADDRESS = "address"
    IP_ADDRESS = "ipAddress"
    DATE_OF_BIRTH = "dateOfBirth"
    PASSPORT = "passport"
    CUSTOM = "custom"

    ALL = frozenset(
        {
            EMAIL,
            PHONE,
            SSN,
            CREDIT_CARD,
            NAME,
            ADDRESS,
            IP_ADDRESS,
            DATE_OF_BIRTH,
            PASSPORT,
            CUSTOM,
        }
    )


class AnonymizationMode:
    """Substitution styles understood by the anonymization engine.

    LABEL, REPLACE and PLACEHOLDER all render bracketed placeholders.
    """

    MASK = "mask"
    LABEL = "label"
    REMOVE = "remove"
    REPLACE = "replace"
    PLACEHOLDER = "placeholder"

    ALL = frozenset({MASK, LABEL, REMOVE, REPLACE, PLACEHOLDER})


class DetectionSource:
    """Which backend produced the detections of a processing call."""

    MODEL = "model"
    FALLBACK = "fallback"


class BackendStatus:
    """Lifecycle states of the token-classification backend."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    READY = "ready"
    UNAVAILABLE = "unavailable"
