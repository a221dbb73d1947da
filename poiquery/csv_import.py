"""
CSV import of POIs.

Reads rows with the columns ``name``, ``latitude`` and ``longitude``
(plus optional ``description`` and ``category``; header names are
case-insensitive), encrypts each row's coordinates and returns payloads
ready for the bulk add endpoint. Invalid rows are skipped and counted.

Example:
    name,latitude,longitude,category
    City Hall,40.7128,-74.0060,civic
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as SchemaValidationError

from poiquery.core.exceptions import ValidationException
from poiquery.schemas.poi import POICreate
from poiquery.services.cipher import CoordinateCipher

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name", "latitude", "longitude")
OPTIONAL_COLUMNS = ("description", "category")


@dataclass
class CSVImportResult:
    """Outcome of parsing a CSV file.

    Attributes:
        pois: Encrypted POI payloads in camelCase, in file order.
        total_rows: Data rows read (header excluded).
        skipped: Rows rejected as invalid.
        errors: One message per skipped row, with its line number.
    """

    pois: List[Dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_poi_rows(lines: Iterable[str], cipher: CoordinateCipher) -> CSVImportResult:
    """
    Parse CSV lines into encrypted POI payloads.

    Args:
        lines: CSV text, one line per item, header first.
        cipher: Cipher used to encrypt each row's coordinates.

    Returns:
        CSVImportResult with at least one payload.

    Raises:
        ValidationException: If required columns are missing or no row is valid.
    """
    reader = csv.DictReader(lines)
    headers = {(name or "").strip().lower(): name for name in (reader.fieldnames or [])}

    missing = [column for column in REQUIRED_COLUMNS if column not in headers]
    if missing:
        raise ValidationException(f"CSV is missing required columns: {', '.join(missing)}")

    result = CSVImportResult()
    for row in reader:
        result.total_rows += 1
        line = reader.line_num
        values = {column: row.get(headers[column]) for column in headers if column}

        try:
            lat = float((values.get("latitude") or "").strip())
            lng = float((values.get("longitude") or "").strip())
            encrypted_lat, encrypted_lng = cipher.encrypt(lat, lng)
            poi = POICreate(
                encrypted_lat=encrypted_lat,
                encrypted_lng=encrypted_lng,
                name=values.get("name") or "",
                description=_optional(values.get("description")),
                category=_optional(values.get("category")),
            )
        except (ValueError, SchemaValidationError, ValidationException) as e:
            result.skipped += 1
            reason = e.message if isinstance(e, ValidationException) else str(e).splitlines()[0]
            result.errors.append(f"line {line}: {reason}")
            continue

        result.pois.append(poi.model_dump(by_alias=True, exclude_none=True))

    if not result.pois:
        raise ValidationException("No valid rows found in CSV")

    logger.info(
        f"Parsed {result.total_rows} CSV rows: {len(result.pois)} valid, {result.skipped} skipped"
    )
    return result


def parse_poi_csv(text: str, cipher: CoordinateCipher) -> CSVImportResult:
    """Parse CSV content held in a string."""
    return parse_poi_rows(io.StringIO(text), cipher)


def load_poi_csv(path: Union[str, Path], cipher: CoordinateCipher) -> CSVImportResult:
    """Parse a CSV file from disk (UTF-8, an optional BOM is ignored)."""
    with open(path, newline="", encoding="utf-8-sig") as handle:
        return parse_poi_rows(handle, cipher)
