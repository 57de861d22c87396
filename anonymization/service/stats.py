# anonymization/service/stats.py

"""Cumulative processing statistics."""

import logging
import threading
from dataclasses import replace
from typing import Sequence

from anonymization.core.domain import Detection, ProcessingStats, mean_confidence

logger = logging.getLogger(__name__)


class StatsTracker:
    """Owns a ProcessingStats record and serializes updates to it.

    Average confidence is not a running average: each call that found
    detections overwrites it with that call's mean, and a call that found
    none leaves it unchanged.
    """

    def __init__(self) -> None:
        self._stats = ProcessingStats()
        self._lock = threading.Lock()

    def record(self, detections: Sequence[Detection], processing_time: float) -> None:
        """Folds one completed processing call into the statistics."""
        average = mean_confidence(detections)
        with self._lock:
            self._stats.total_documents += 1
            self._stats.total_detections += len(detections)
            self._stats.processing_time += processing_time
            if average is not None:
                self._stats.average_confidence = average

    def snapshot(self) -> ProcessingStats:
        """Returns a copy of the current statistics."""
        with self._lock:
            return replace(self._stats)

    def reset(self) -> None:
        with self._lock:
            self._stats = ProcessingStats()
        logger.debug("Processing statistics reset")
