# anonymization/engine/fallback.py

"""Regex fallback detector used when the token classifier is unavailable."""

import logging
import re
from typing import Dict, List

from presidio_analyzer import Pattern, PatternRecognizer

from anonymization.core.domain import Detection
from anonymization.core.loader import PatternLoader

logger = logging.getLogger(__name__)

_PATTERN_CACHE: Dict[str, List[Pattern]] = {}


def _get_cached_patterns(entity_type: str) -> List[Pattern]:
    """Retrieves list of Pattern objects from cache or creates them."""
    if entity_type in _PATTERN_CACHE:
        return _PATTERN_CACHE[entity_type]

    loader = PatternLoader.get_instance()
    patterns = [
        Pattern(name=p["name"], regex=p["regex"], score=float(p["score"]))
        for p in loader.get_patterns(entity_type)
    ]

    _PATTERN_CACHE[entity_type] = patterns
    return patterns


class FallbackPatternRecognizer(PatternRecognizer):
    """Case-sensitive pattern recognizer for one PII type.

    The name pattern relies on letter case, so presidio's default
    IGNORECASE flag is not used.
    """

    def __init__(self, entity_type: str):
        super().__init__(
            supported_entity=entity_type,
            name=f"Fallback_{entity_type}_Recognizer",
            patterns=_get_cached_patterns(entity_type),
            global_regex_flags=re.MULTILINE,
        )


def resolve_overlaps(detections: List[Detection]) -> List[Detection]:
    """Keeps a non-overlapping subset of detections.

    Longest span wins a contested region; ties go to the higher confidence,
    then to the leftmost span. Survivors are returned left to right.
    """
    ranked = sorted(
        detections, key=lambda d: (-(d.end - d.start), -d.confidence, d.start)
    )
    taken: List[Detection] = []
    for d in ranked:
        if any(d.start < t.end and d.end > t.start for t in taken):
            logger.debug(
                "Discarding overlapping fallback match",
                extra={"type": d.type, "start": d.start, "end": d.end},
            )
            continue
        taken.append(d)
    return sorted(taken, key=lambda d: d.start)


class PatternFallbackMatcher:
    """Runs one independent regex scan per PII type over the text."""

    def __init__(self) -> None:
        loader = PatternLoader.get_instance()
        self._recognizers: List[FallbackPatternRecognizer] = []

        for entity_type in loader.get_pattern_types():
            if not loader.get_patterns(entity_type):
                logger.warning(f"Skipping fallback recognizer for {entity_type}: No patterns found.")
                continue
            self._recognizers.append(FallbackPatternRecognizer(entity_type))

        logger.debug(f"Initialized {len(self._recognizers)} fallback recognizers")

    @property
    def supported_types(self) -> List[str]:
        return [r.supported_entities[0] for r in self._recognizers]

    def match(self, text: str) -> List[Detection]:
        """Detects PII in text with the fallback patterns.

        Args:
            text: Raw input text

        Returns:
            Non-overlapping detections in left-to-right order
        """
        candidates: List[Detection] = []
        for recognizer in self._recognizers:
            results = recognizer.analyze(text=text, entities=recognizer.supported_entities)
            for r in sorted(results, key=lambda r: r.start):
                candidates.append(
                    Detection(
                        type=r.entity_type,
                        text=text[r.start : r.end],
                        start=r.start,
                        end=r.end,
                        confidence=float(r.score),
                    )
                )

        return resolve_overlaps(candidates)
