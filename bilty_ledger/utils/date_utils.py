"""Date manipulation utilities"""

from datetime import date


def _parse_iso(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def days_between(start_iso: str | None, end_iso: str | None) -> int:
    """Absolute whole-day difference between two ISO dates; 0 if either is missing or invalid"""
    if not start_iso or not end_iso:
        return 0
    start = _parse_iso(start_iso)
    end = _parse_iso(end_iso)
    if start is None or end is None:
        return 0
    return abs((end - start).days)


def to_iso(ddmmyyyy: str | None) -> str:
    """
    Convert a DD-MM-YYYY display date to YYYY-MM-DD.

    Returns "" when the text is too short, does not have three '-' separated
    segments, has a non-numeric segment, or the year is not four digits.
    """
    if not ddmmyyyy or not isinstance(ddmmyyyy, str) or len(ddmmyyyy) < 8:
        return ""
    parts = ddmmyyyy.strip().split("-")
    if len(parts) != 3:
        return ""
    dd, mm, yyyy = parts
    if not dd or not mm or len(yyyy) != 4:
        return ""
    if not (dd.isdigit() and mm.isdigit() and yyyy.isdigit()):
        return ""
    return f"{yyyy}-{mm.zfill(2)}-{dd.zfill(2)}"


def to_display(iso: str | None) -> str:
    """Convert YYYY-MM-DD to DD-MM-YYYY with zero-padded day and month"""
    if not iso or not isinstance(iso, str):
        return ""
    parts = iso.strip().split("-")
    if len(parts) != 3:
        return ""
    yyyy, mm, dd = parts
    if len(yyyy) != 4 or not dd or not mm:
        return ""
    if not (dd.isdigit() and mm.isdigit() and yyyy.isdigit()):
        return ""
    return f"{dd.zfill(2)}-{mm.zfill(2)}-{yyyy}"


def coerce_iso(value: str | None) -> str:
    """Accept either a display date or an ISO date and return ISO ("" if neither)"""
    if not value:
        return ""
    converted = to_iso(value)
    if converted:
        return converted
    parsed = _parse_iso(value)
    return parsed.isoformat() if parsed else ""


def today_iso() -> str:
    return date.today().isoformat()


def today_display() -> str:
    return to_display(today_iso())
