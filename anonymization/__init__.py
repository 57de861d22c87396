# anonymization/__init__.py

"""PII detection and anonymization with a token-classification model.

Detection falls back to regular expressions whenever the model cannot
be used.
"""

from anonymization.core.definitions import AnonymizationMode, PIIType
from anonymization.core.domain import (
    Detection,
    DetectionResult,
    DetectorConfig,
    ProcessingStats,
)
from anonymization.logic.anonymizer import anonymize
from anonymization.service.pipeline import PIIDetectionService, get_service

__all__ = [
    "AnonymizationMode",
    "PIIType",
    "Detection",
    "DetectionResult",
    "DetectorConfig",
    "ProcessingStats",
    "anonymize",
    "PIIDetectionService",
    "get_service",
]
__version__ = "0.1.0"
