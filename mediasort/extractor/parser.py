"""Metadata field parsing utilities."""

import re
from datetime import datetime
from typing import Any

from mediasort.models import EmbeddedMetadata

DATE_ORIGINAL_KEYS = ("EXIF:DateTimeOriginal", "QuickTime:CreateDate", "XMP:DateTimeOriginal")
DATE_MODIFIED_KEYS = ("EXIF:ModifyDate", "QuickTime:ModifyDate", "XMP:ModifyDate")
MAKE_KEYS = ("EXIF:Make", "QuickTime:Make", "MakerNotes:Make")
MODEL_KEYS = ("EXIF:Model", "QuickTime:Model", "MakerNotes:Model")

_TZ_PATTERN = re.compile(r"([+-]\d{2}:\d{2}|Z)$")
_SUBSEC_PATTERN = re.compile(r"\.\d+$")

_DATE_FORMATS = [
    "%Y:%m:%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y:%m:%d",
]


def parse_exif_date(date_str: Any) -> datetime | None:
    """Parse an EXIF date string, ignoring any timezone suffix.

    Returns None for missing, zeroed or unparseable values.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    date_str = date_str.strip()
    if not date_str or date_str.startswith("0000:00:00"):
        return None

    date_str = _TZ_PATTERN.sub("", date_str)
    date_str = _SUBSEC_PATTERN.sub("", date_str)

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt)
        except ValueError:
            continue

    return None


def get_first_value(metadata: dict, *keys: str) -> Any:
    """Get first non-None value from metadata by keys."""
    for key in keys:
        if key in metadata and metadata[key] is not None:
            return metadata[key]
    return None


def clean_device_string(value: Any) -> str | None:
    """Strip quotes, commas and surrounding whitespace from a make or model."""
    if value is None:
        return None
    cleaned = str(value).replace('"', "").replace(",", "").strip()
    return cleaned or None


def parse_embedded_metadata(metadata: dict) -> EmbeddedMetadata:
    """Pick the capture dates and device fields out of one exiftool record."""
    date_original = None
    for key in DATE_ORIGINAL_KEYS:
        date_original = parse_exif_date(metadata.get(key))
        if date_original:
            break

    date_modified = None
    for key in DATE_MODIFIED_KEYS:
        date_modified = parse_exif_date(metadata.get(key))
        if date_modified:
            break

    return EmbeddedMetadata(
        date_original=date_original,
        date_modified=date_modified,
        make=clean_device_string(get_first_value(metadata, *MAKE_KEYS)),
        model=clean_device_string(get_first_value(metadata, *MODEL_KEYS)),
    )
