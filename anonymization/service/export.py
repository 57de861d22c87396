# anonymization/service/export.py

"""Serialization of detection results to downloadable formats."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from anonymization.core.domain import DetectionResult, ProcessingStats
from anonymization.core.exceptions import ExportError

logger = logging.getLogger(__name__)

CSV_HEADER = ("Type", "Text", "Confidence", "Start", "End")


@dataclass(frozen=True)
class ExportArtifact:
    """Serialized content together with a suggested file name."""

    content: str
    filename: str
    mime_type: str


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def to_json(result: DetectionResult, stats: ProcessingStats, now: datetime) -> str:
    payload = {
        "result": result.to_dict(),
        "stats": stats.to_dict(),
        "exportedAt": now.isoformat(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_csv(result: DetectionResult) -> str:
    """One row per detection; text always quoted, confidence in percent."""
    rows = [",".join(CSV_HEADER)]
    for d in result.detections:
        rows.append(
            ",".join(
                [
                    d.type,
                    _quote(d.text),
                    f"{d.confidence * 100:.1f}",
                    str(d.start),
                    str(d.end),
                ]
            )
        )
    return "\n".join(rows)


def export_result(
    result: Optional[DetectionResult],
    stats: ProcessingStats,
    fmt: str,
    now: Optional[datetime] = None,
) -> ExportArtifact:
    """Serializes a result as json, csv or txt.

    Unrecognized formats export the anonymized text, like ``txt``.

    Args:
        result: Result to export
        stats: Statistics included in the JSON export
        fmt: ``json``, ``csv`` or ``txt``
        now: Timestamp for the export, defaults to the current UTC time

    Returns:
        ExportArtifact with content, filename and MIME type

    Raises:
        ExportError: If there is no result or serialization fails.
    """
    if result is None:
        raise ExportError("No result to export")

    now = now or datetime.now(timezone.utc)
    day = now.date().isoformat()
    fmt = (fmt or "").lower()

    try:
        if fmt == "json":
            artifact = ExportArtifact(
                to_json(result, stats, now), f"pii-detection-{day}.json", "application/json"
            )
        elif fmt == "csv":
            artifact = ExportArtifact(to_csv(result), f"pii-detections-{day}.csv", "text/csv")
        else:
            artifact = ExportArtifact(
                result.anonymized_text, f"pii-anonymized-{day}.txt", "text/plain"
            )
    except (TypeError, ValueError) as e:
        logger.error("Export failed", exc_info=True, extra={"format": fmt})
        raise ExportError(f"Export failed: {e}") from e

    logger.info(f"Exported as {fmt.upper() or 'TXT'}: {artifact.filename}")
    return artifact
