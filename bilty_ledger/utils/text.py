"""Text normalization applied to operator input before it is stored"""

from typing import Any, Dict

# Field names containing any of these keep their case (numbers, dates, rates)
_VERBATIM_MARKERS = (
    "date",
    "amount",
    "rate",
    "weight",
    "charge",
    "commission",
    "total",
    "advance",
    "day",
    "hold",
)


def to_upper(text: str) -> str:
    return text.strip().upper()


def normalize_record_text(data: Dict[str, Any]) -> Dict[str, Any]:
    """Trim every string value and upper-case the free-text ones"""
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(value, str):
            normalized[key] = value
            continue
        lowered = key.lower()
        if any(marker in lowered for marker in _VERBATIM_MARKERS):
            normalized[key] = value.strip()
        else:
            normalized[key] = to_upper(value)
    return normalized
