# anonymization/core/domain.py

"""Domain models for detection and anonymization results."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from anonymization.core.definitions import AnonymizationMode, DetectionSource, PIIType
from anonymization.core.exceptions import ValidationError


@dataclass
class Detection:
    """A single identified PII occurrence.

    Attributes:
        type: Canonical PII type (see PIIType)
        text: Exact substring matched in the original text
        start: Starting character position in original text
        end: Ending character position in original text (exclusive)
        confidence: Confidence score (0.0 to 1.0)
        original_text: Matched substring kept for audit after rewriting
    """

    type: str
    text: str
    start: int
    end: int
    confidence: float
    original_text: Optional[str] = None

    def __post_init__(self) -> None:
        if self.original_text is None:
            self.original_text = self.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
            "originalText": self.original_text,
        }


@dataclass(frozen=True)
class DetectorConfig:
    """Caller-supplied detection settings.

    Attributes:
        types: Enabled PII types; detections of other types are discarded
        confidence_threshold: Minimum confidence score for a detection
        mode: Substitution style (see AnonymizationMode)
    """

    types: FrozenSet[str] = frozenset(PIIType.ALL)
    confidence_threshold: float = 0.8
    mode: str = AnonymizationMode.MASK

    def __post_init__(self) -> None:
        types = frozenset(self.types)
        unknown = sorted(types - PIIType.ALL)
        if unknown:
            raise ValidationError(f"Unknown PII types: {unknown}")

        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValidationError(
                f"Confidence threshold must be within [0, 1], got {self.confidence_threshold}"
            )

        if self.mode not in AnonymizationMode.ALL:
            raise ValidationError(f"Unknown anonymization mode: {self.mode!r}")

        object.__setattr__(self, "types", types)

    def updated(self, **changes: Any) -> "DetectorConfig":
        """Returns a copy with the given fields replaced."""
        if "types" in changes:
            changes["types"] = frozenset(changes["types"])
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": sorted(self.types),
            "confidenceThreshold": self.confidence_threshold,
            "mode": self.mode,
        }


@dataclass
class DetectionResult:
    """Result object returned by the detection service.

    Attributes:
        original_text: Input text
        anonymized_text: Text with PII replaced by placeholders
        detections: Detections in recognizer order
        processing_time: Wall-clock duration of the call in milliseconds
        accuracy: Static quality indicator of the backend that ran
        source: Backend that produced the detections
    """

    original_text: str
    anonymized_text: str
    detections: List[Detection] = field(default_factory=list)
    processing_time: float = 0.0
    accuracy: float = 0.0
    source: str = DetectionSource.FALLBACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalText": self.original_text,
            "anonymizedText": self.anonymized_text,
            "detections": [d.to_dict() for d in self.detections],
            "processingTime": self.processing_time,
            "accuracy": self.accuracy,
        }


@dataclass
class ProcessingStats:
    """Cumulative counters over the lifetime of a service."""

    total_documents: int = 0
    total_detections: int = 0
    average_confidence: float = 0.0
    processing_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDocuments": self.total_documents,
            "totalDetections": self.total_detections,
            "averageConfidence": self.average_confidence,
            "processingTime": self.processing_time,
        }


def mean_confidence(detections: Iterable[Detection]) -> Optional[float]:
    """Returns the mean confidence of detections, or None when empty."""
    scores = [d.confidence for d in detections]
    if not scores:
        return None
    return sum(scores) / len(scores)
