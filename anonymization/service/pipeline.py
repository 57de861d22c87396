# anonymization/service/pipeline.py

"""Main detection service pipeline."""

import logging
import threading
import time
from collections import deque
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

from anonymization.core.definitions import (
    AnonymizationMode,
    BackendStatus,
    DetectionSource,
)
from anonymization.core.domain import DetectionResult, DetectorConfig, ProcessingStats
from anonymization.core.loader import PatternLoader
from anonymization.engine.recognizer import EntityRecognizer, TokenClassificationBackend
from anonymization.logic.anonymizer import anonymize
from anonymization.service.config import Settings, default_config
from anonymization.service.export import ExportArtifact, export_result
from anonymization.service.stats import StatsTracker

logger = logging.getLogger(__name__)

MODEL_DISPLAY_NAME = "Piiranha v1"
MODEL_VERSION = "1.0.0"


class PIIDetectionService:
    """Runs recognition and anonymization and keeps session state.

    Session state is the active DetectorConfig, cumulative statistics and
    a bounded history of recent results (most recent first).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        recognizer: Optional[EntityRecognizer] = None,
        config: Optional[DetectorConfig] = None,
    ) -> None:
        self.settings = settings or Settings()

        if recognizer is None:
            backend = None
            if self.settings.load_model:
                backend = TokenClassificationBackend(self.settings.model_name)
            recognizer = EntityRecognizer(backend=backend)

        self.recognizer = recognizer
        self.config = config or default_config(self.settings)
        self.stats = StatsTracker()
        self._history: Deque[DetectionResult] = deque(maxlen=self.settings.history_limit)
        self._history_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Backend lifecycle
    # ------------------------------------------------------------------

    @property
    def backend(self) -> Optional[TokenClassificationBackend]:
        return self.recognizer.backend

    @property
    def status(self) -> str:
        if self.backend is None:
            return BackendStatus.UNAVAILABLE
        return self.backend.status

    def start(self) -> None:
        """Kicks off background loading of the model, if one is configured."""
        if self.backend is not None:
            self.backend.start()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def update_config(self, **changes: Any) -> DetectorConfig:
        """Applies a partial configuration update and returns the result."""
        self.config = self.config.updated(**changes)
        return self.config

    def process(self, text: str, config: Optional[DetectorConfig] = None) -> DetectionResult:
        """Detects and anonymizes PII in text.

        The anonymized text is always rendered with placeholders; use
        render() for other modes.

        Args:
            text: Raw input text
            config: Overrides the service configuration for this call

        Returns:
            DetectionResult with timing and backend accuracy
        """
        config = config or self.config
        started = time.perf_counter()

        logger.info(
            "Starting detection request",
            extra={"text_length": len(text), "threshold": config.confidence_threshold},
        )

        detections, source = self.recognizer.recognize(text, config)
        anonymized_text = anonymize(text, detections, AnonymizationMode.PLACEHOLDER)

        processing_time = (time.perf_counter() - started) * 1000.0
        accuracy = (
            self.settings.model_accuracy
            if source == DetectionSource.MODEL
            else self.settings.fallback_accuracy
        )

        result = DetectionResult(
            original_text=text,
            anonymized_text=anonymized_text,
            detections=detections,
            processing_time=processing_time,
            accuracy=accuracy,
            source=source,
        )

        self.stats.record(detections, processing_time)
        with self._history_lock:
            self._history.appendleft(result)

        logger.info(
            f"Found {len(detections)} PII entities",
            extra={
                "detection_count": len(detections),
                "source": source,
                "processing_time_ms": round(processing_time, 3),
            },
        )
        return result

    def render(self, result: DetectionResult, mode: Optional[str] = None) -> str:
        """Re-renders a result's original text in the given mode."""
        return anonymize(result.original_text, result.detections, mode or self.config.mode)

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def get_stats(self) -> ProcessingStats:
        return self.stats.snapshot()

    def reset_stats(self) -> None:
        self.stats.reset()

    @property
    def history(self) -> List[DetectionResult]:
        with self._history_lock:
            return list(self._history)

    @property
    def latest(self) -> Optional[DetectionResult]:
        with self._history_lock:
            return self._history[0] if self._history else None

    def clear_history(self) -> None:
        with self._history_lock:
            self._history.clear()

    def export(
        self,
        fmt: str,
        result: Optional[DetectionResult] = None,
        now: Optional[datetime] = None,
    ) -> ExportArtifact:
        """Exports a result (the latest one by default).

        Raises:
            ExportError: If there is nothing to export or serialization fails.
        """
        return export_result(result or self.latest, self.get_stats(), fmt, now=now)

    def model_info(self) -> Dict[str, Any]:
        """Returns a summary of the active backend for display."""
        status = self.status
        loaded = status == BackendStatus.READY
        return {
            "name": MODEL_DISPLAY_NAME,
            "model": self.settings.model_name,
            "version": MODEL_VERSION,
            "accuracy": (
                f"{self.settings.model_accuracy * 100:.2f}%"
                if loaded
                else f"{self.settings.fallback_accuracy * 100:.0f}% (Fallback)"
            ),
            "status": {
                BackendStatus.READY: "Loaded",
                BackendStatus.INITIALIZING: "Initializing",
            }.get(status, "Fallback Mode"),
            "pii_labels": len(PatternLoader.get_instance().get_label_mapping()),
        }


class SharedService:
    """Process-wide service instance for the application entry point.

    Library callers should construct their own PIIDetectionService.
    """

    _instance: Optional[PIIDetectionService] = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> PIIDetectionService:
        """Returns the shared service, creating and starting it on first use."""
        if cls._instance is None:
            with cls._lock:
                # Double-checked locking pattern
                if cls._instance is None:
                    logger.info("Initializing detection service")
                    service = PIIDetectionService()
                    service.start()
                    cls._instance = service

        return cls._instance


def get_service() -> PIIDetectionService:
    return SharedService.get_instance()
