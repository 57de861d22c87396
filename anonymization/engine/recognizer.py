# anonymization/engine/recognizer.py

"""Token-classification backend and the recognizer adapter around it."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from anonymization.core.definitions import BackendStatus, DetectionSource
from anonymization.core.domain import Detection, DetectorConfig
from anonymization.core.exceptions import InitializationError, RecognitionError
from anonymization.engine.fallback import PatternFallbackMatcher
from anonymization.logic.labels import map_label

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "iiiorg/piiranha-v1-detect-personal-information"

PipelineFactory = Callable[[str], Callable[[str], List[Dict[str, Any]]]]


def create_token_classifier(model_name: str) -> Callable[[str], List[Dict[str, Any]]]:
    """Builds a transformers token-classification pipeline.

    Spans are aggregated with the "simple" strategy and the "O" label is
    suppressed.
    """
    # Pulls in torch; imported on first load only
    from transformers import pipeline

    return pipeline(
        "token-classification",
        model=model_name,
        aggregation_strategy="simple",
        ignore_labels=["O"],
    )


@dataclass
class RawSpan:
    """One entity span as reported by the token classifier."""

    label: str
    word: str
    score: float
    start: Optional[int] = None
    end: Optional[int] = None

    @classmethod
    def from_pipeline(cls, item: Dict[str, Any]) -> "RawSpan":
        start = item.get("start")
        end = item.get("end")
        return cls(
            label=item.get("entity_group") or item.get("entity") or "",
            word=item.get("word", ""),
            score=float(item["score"]),
            start=int(start) if start is not None else None,
            end=int(end) if end is not None else None,
        )


@dataclass
class RecognitionOutcome:
    """Either the spans found by the backend or the error that prevented it."""

    spans: List[RawSpan] = field(default_factory=list)
    error: Optional[RecognitionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TokenClassificationBackend:
    """Lazily loaded token-classification model.

    The model is loaded once on a background thread by start(). A failed
    load is logged and leaves the backend unavailable for its lifetime;
    there is no retry.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        pipeline_factory: Optional[PipelineFactory] = None,
    ) -> None:
        self.model_name = model_name
        self._factory = pipeline_factory or create_token_classifier
        self._pipeline: Optional[Callable[[str], List[Dict[str, Any]]]] = None
        self._status = BackendStatus.IDLE
        self._lock = threading.Lock()
        self._settled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def status(self) -> str:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status == BackendStatus.READY

    def start(self) -> None:
        """Begins loading the model in the background. Later calls are no-ops."""
        with self._lock:
            if self._status != BackendStatus.IDLE:
                return
            self._status = BackendStatus.INITIALIZING

        self._thread = threading.Thread(
            target=self._initialize, name="token-classifier-init", daemon=True
        )
        self._thread.start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until initialization settles. Returns False on timeout."""
        return self._settled.wait(timeout)

    def _initialize(self) -> None:
        logger.info(f"Initializing token classifier with model: {self.model_name}")
        try:
            try:
                classifier = self._factory(self.model_name)
            except Exception as e:
                raise InitializationError(
                    f"Failed to load token classifier '{self.model_name}'"
                ) from e

            self._pipeline = classifier
            self._status = BackendStatus.READY
            logger.info("Token classifier loaded", extra={"model": self.model_name})

        except InitializationError:
            self._status = BackendStatus.UNAVAILABLE
            logger.warning(
                "Token classifier failed to load, using fallback detection",
                exc_info=True,
                extra={"model": self.model_name},
            )
        finally:
            self._settled.set()

    def recognize(self, text: str) -> RecognitionOutcome:
        """Runs the model over text. Never raises.

        Returns:
            RecognitionOutcome carrying spans, or an error whose kind is
            ``unavailable`` (no model) or ``inference`` (model raised)
        """
        classifier = self._pipeline
        if classifier is None:
            return RecognitionOutcome(
                error=RecognitionError(
                    f"Token classifier not loaded (status={self._status})",
                    kind=RecognitionError.UNAVAILABLE,
                )
            )

        if not text:
            return RecognitionOutcome()

        try:
            raw = classifier(text)
            spans = [RawSpan.from_pipeline(item) for item in raw]
        except Exception as e:
            error = RecognitionError(
                f"Token classification failed: {e}", kind=RecognitionError.INFERENCE
            )
            error.__cause__ = e
            return RecognitionOutcome(error=error)

        return RecognitionOutcome(spans=spans)


class EntityRecognizer:
    """Adapter producing filtered detections, with regex fallback.

    Failures of the backend never propagate: the call that hit them is
    answered by the pattern fallback instead.
    """

    def __init__(
        self,
        backend: Optional[TokenClassificationBackend] = None,
        fallback: Optional[PatternFallbackMatcher] = None,
    ) -> None:
        self.backend = backend
        self.fallback = fallback or PatternFallbackMatcher()

    def recognize(
        self, text: str, config: DetectorConfig
    ) -> Tuple[List[Detection], str]:
        """Detects PII in text.

        Args:
            text: Raw input text
            config: Threshold and enabled types to filter by

        Returns:
            Tuple of (detections, source) where source is a DetectionSource
        """
        if self.backend is None:
            outcome = RecognitionOutcome(
                error=RecognitionError(
                    "No token classifier configured", kind=RecognitionError.UNAVAILABLE
                )
            )
        else:
            outcome = self.backend.recognize(text)

        if outcome.ok:
            return self._from_spans(text, outcome.spans, config), DetectionSource.MODEL

        if outcome.error.kind == RecognitionError.INFERENCE:
            logger.warning(
                "Detection failed, using fallback",
                exc_info=outcome.error,
                extra={"error": str(outcome.error), "text_length": len(text)},
            )
        else:
            logger.debug("Token classifier unavailable, using fallback detection")

        detections = [
            d
            for d in self.fallback.match(text)
            if d.confidence >= config.confidence_threshold and d.type in config.types
        ]
        return detections, DetectionSource.FALLBACK

    def _from_spans(
        self, text: str, spans: List[RawSpan], config: DetectorConfig
    ) -> List[Detection]:
        detections: List[Detection] = []
        cursor = 0

        for span in spans:
            # Locate before filtering: dropped spans still advance the cursor.
            start, end = span.start, span.end
            if start is None or end is None:
                start = text.find(span.word, cursor) if span.word else -1
                if start < 0:
                    logger.debug(
                        "Dropping span without locatable offsets",
                        extra={"label": span.label},
                    )
                    continue
                end = start + len(span.word)

            if not (0 <= start < end <= len(text)):
                logger.debug(
                    "Dropping span with invalid offsets",
                    extra={"label": span.label, "start": start, "end": end},
                )
                continue

            cursor = end

            if span.score < config.confidence_threshold:
                continue

            pii_type = map_label(span.label)
            if pii_type not in config.types:
                continue

            detections.append(
                Detection(
                    type=pii_type,
                    text=text[start:end],
                    start=start,
                    end=end,
                    confidence=span.score,
                )
            )

        return detections
