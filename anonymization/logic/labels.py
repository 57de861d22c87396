# anonymization/logic/labels.py

"""Translation between model labels, PII types and placeholder tags."""

import re

from anonymization.core.definitions import PIIType
from anonymization.core.loader import PatternLoader

BIO_PREFIX = re.compile(r"^[BI]-")

UNKNOWN_PLACEHOLDER = "UNKNOWN"


def strip_bio_prefix(label: str) -> str:
    """Removes a leading ``B-``/``I-`` tag from a sequence label."""
    return BIO_PREFIX.sub("", label)


def map_label(label: str) -> str:
    """Maps a raw model label to a canonical PII type.

    Args:
        label: Label as emitted by the token classifier (e.g. ``B-PERSON``)

    Returns:
        The mapped PIIType, or PIIType.CUSTOM for unrecognized labels
    """
    mapping = PatternLoader.get_instance().get_label_mapping()
    return mapping.get(strip_bio_prefix(label), PIIType.CUSTOM)


def placeholder_name(pii_type: str) -> str:
    """Returns the display tag used inside placeholders for a PII type."""
    placeholders = PatternLoader.get_instance().get_placeholders()
    return placeholders.get(pii_type, UNKNOWN_PLACEHOLDER)
