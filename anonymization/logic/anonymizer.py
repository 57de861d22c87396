# anonymization/logic/anonymizer.py

"""Position-preserving rewriting of text around detected PII spans.

Detections always carry offsets into the original text. Substitution runs
from the rightmost span to the leftmost: splicing a span only shifts the
characters to its right, so every span still waiting to be processed keeps
valid offsets against the current string and nothing is recomputed.

Placeholder numbering is independent of that processing order. The Nth
detection of a type read top to bottom is always ``[TYPE_N]``; a type seen
exactly once is rendered ``[TYPE]`` without a suffix.
"""

import logging
from collections import Counter
from typing import List, Sequence

from anonymization.core.definitions import AnonymizationMode
from anonymization.core.domain import Detection
from anonymization.core.exceptions import ValidationError
from anonymization.logic.labels import placeholder_name

logger = logging.getLogger(__name__)

MASK_CHAR = "*"


def _check_spans(text: str, detections: Sequence[Detection]) -> None:
    """Rejects detections whose offsets do not fit the text.

    Raises:
        ValidationError: If any span violates 0 <= start < end <= len(text).
    """
    for d in detections:
        if not (0 <= d.start < d.end <= len(text)):
            raise ValidationError(
                f"Detection span [{d.start}, {d.end}) is invalid for text of "
                f"length {len(text)} (type={d.type!r})"
            )


def _reading_order(detections: Sequence[Detection]) -> List[int]:
    """Indices of detections sorted left to right, ties kept in list order."""
    return sorted(range(len(detections)), key=lambda i: detections[i].start)


def assign_placeholders(detections: Sequence[Detection]) -> List[str]:
    """Computes the placeholder token of every detection.

    Args:
        detections: Detections in any order

    Returns:
        Tokens aligned index-for-index with ``detections``
    """
    names = [placeholder_name(d.type) for d in detections]
    totals = Counter(names)

    tokens = [""] * len(detections)
    seen: Counter = Counter()
    for i in _reading_order(detections):
        name = names[i]
        seen[name] += 1
        if totals[name] == 1:
            tokens[i] = f"[{name}]"
        else:
            tokens[i] = f"[{name}_{seen[name]}]"
    return tokens


def replacement_for(detection: Detection, token: str, mode: str) -> str:
    """Returns the substitution text for one detection in the given mode."""
    if mode == AnonymizationMode.MASK:
        return MASK_CHAR * len(detection.text)
    if mode == AnonymizationMode.REMOVE:
        return ""
    return token


def anonymize(
    text: str,
    detections: Sequence[Detection],
    mode: str = AnonymizationMode.MASK,
) -> str:
    """Rewrites text with every detection substituted according to mode.

    Args:
        text: Original text the detection offsets refer to
        detections: Detections in any order
        mode: ``mask``, ``remove``, or a placeholder mode
            (``label``, ``replace``, ``placeholder``; also the default for
            unrecognized modes)

    Returns:
        The anonymized text

    Raises:
        ValidationError: If a detection span does not fit the text.
    """
    if not detections:
        return text

    _check_spans(text, detections)
    tokens = assign_placeholders(detections)

    # Rightmost first; equal starts keep their list order.
    order = sorted(
        range(len(detections)), key=lambda i: (-detections[i].start, i)
    )

    result = text
    for i in order:
        d = detections[i]
        replacement = replacement_for(d, tokens[i], mode)
        result = result[: d.start] + replacement + result[d.end :]

    logger.debug(
        "Anonymized text",
        extra={"detection_count": len(detections), "mode": mode},
    )
    return result
