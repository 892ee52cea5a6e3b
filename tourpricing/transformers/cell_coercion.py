"""Coercion of raw spreadsheet cells into typed values."""

import math
import re
from datetime import date, datetime
from typing import Any, Iterable, Optional

from openpyxl.utils.datetime import WINDOWS_EPOCH, from_excel

# Tried in this order once ISO parsing and serial decoding have failed
FLEXIBLE_DATE_FORMATS = [
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%m-%d-%Y",
    "%d.%m.%Y",
    "%m.%d.%Y",
]

TRUE_VALUES = {"true", "t", "yes", "y", "1", "active", "enabled"}
FALSE_VALUES = {"false", "f", "no", "n", "0", "inactive", "disabled"}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_DIGITS = re.compile(r"^\d+$")


def normalize_header(label: Any) -> str:
    """Canonicalise a header cell: "Room Type Name" -> "room_type_name"."""
    if label is None:
        return ""
    return _NON_ALNUM.sub("_", str(label).strip().lower()).strip("_")


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def is_empty_row(row: Iterable[Any]) -> bool:
    return all(is_blank(cell) for cell in row)


def _is_number(value: Any) -> bool:
    # bool is an int subclass; spreadsheet TRUE/FALSE are not numbers
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_string(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    if _is_number(value):
        if isinstance(value, float):
            if not math.isfinite(value):
                return None
            if value.is_integer():
                return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return None


def coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if _is_number(value):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace(" ", "").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def coerce_boolean(value: Any) -> Optional[bool]:
    """Read an active/inactive flag; None means blank or unrecognised."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
    return None


def decode_date_serial(serial: float, epoch: datetime = WINDOWS_EPOCH) -> Optional[str]:
    """Decode a spreadsheet date serial using the workbook's 1900 or 1904 epoch."""
    if not math.isfinite(serial) or serial < 1:
        return None
    try:
        decoded = from_excel(serial, epoch=epoch)
    except (OverflowError, ValueError):
        return None
    if isinstance(decoded, datetime):
        return decoded.date().isoformat()
    if isinstance(decoded, date):
        return decoded.isoformat()
    return None


def _parse_iso(text: str) -> Optional[str]:
    candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(candidate).date().isoformat()
    except ValueError:
        return None


def coerce_date(value: Any, epoch: datetime = WINDOWS_EPOCH) -> Optional[str]:
    """Normalise any supported date representation to yyyy-MM-dd.

    Accepts native dates, spreadsheet serial numbers, ISO 8601 strings,
    digit-only strings holding a serial, and the FLEXIBLE_DATE_FORMATS.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if _is_number(value):
        return decode_date_serial(float(value), epoch)

    text = coerce_string(value)
    if not text:
        return None

    iso = _parse_iso(text)
    if iso:
        return iso

    if _DIGITS.match(text):
        decoded = decode_date_serial(float(text), epoch)
        if decoded:
            return decoded

    for pattern in FLEXIBLE_DATE_FORMATS:
        try:
            return datetime.strptime(text, pattern).date().isoformat()
        except ValueError:
            continue
    return None
