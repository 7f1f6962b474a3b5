"""Reading recorded tracks (Path.csv export format) as position readings."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from geo_logger.models import PositionReading

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_float(value: str) -> float:
    return float(value.strip())


def _parse_optional(value: str | None, *, negative_is_unknown: bool) -> float | None:
    """Empty cells are unknown; so are -1 sentinels for speed/course."""

    if value is None or not value.strip():
        return None
    v = _parse_float(value)
    if negative_is_unknown and v < 0:
        return None
    return v


def _row_to_reading(row: dict[str, str]) -> PositionReading:
    accuracy = _parse_float(row.get("horizontalAccuracy", "") or "-1")
    if accuracy < 0:
        raise ValueError("horizontalAccuracy unknown")
    return PositionReading(
        latitude=_parse_float(row["latitude"]),
        longitude=_parse_float(row["longitude"]),
        altitude=_parse_optional(row.get("altitude"), negative_is_unknown=False),
        accuracy=accuracy,
        speed=_parse_optional(row.get("speed"), negative_is_unknown=True),
        heading=_parse_optional(row.get("course"), negative_is_unknown=True),
        timestamp_ms=int(row["geoTime"].strip()),
        altitude_accuracy=_parse_optional(row.get("verticalAccuracy"), negative_is_unknown=True),
    )


def load_track_readings(csv_path: str | Path) -> tuple[list[PositionReading], CsvSummary]:
    """Load a recorded track into memory, file order preserved.

    Columns used (observed in the export):
      - geoTime: epoch milliseconds
      - latitude/longitude: decimal degrees
      - altitude, speed, course, horizontalAccuracy, verticalAccuracy (optional)

    Rows with missing coordinates, unparsable numbers or an unknown
    horizontal accuracy are skipped.

    Raises:
        KeyError: If the header lacks geoTime/latitude/longitude.
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[PositionReading] = []

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames: Sequence[str] = reader.fieldnames or ()
        missing = [c for c in ("geoTime", "latitude", "longitude") if c not in fieldnames]
        if missing:
            raise KeyError(f"CSV缺少必要字段：{missing}. 实际字段：{list(fieldnames)}")
        for row in reader:
            rows_total += 1
            try:
                parsed.append(_row_to_reading(row))
            except (KeyError, ValueError, TypeError, AttributeError):
                # 某些行可能损坏/空行，直接跳过
                continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=tuple(fieldnames),
    )
    if summary.rows_skipped > 0:
        logger.warning("CSV中有 %s 行解析失败已跳过", summary.rows_skipped)
    return parsed, summary
