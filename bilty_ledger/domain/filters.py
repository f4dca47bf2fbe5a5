"""Record search used by the records list and CSV export"""

from enum import Enum
from typing import Iterable, List

from bilty_ledger.domain.models import PAID, TransportRecord


class StatusFilter(str, Enum):
    ALL = "all"
    PAID = "paid"
    UNPAID = "unpaid"


def _matches_search(record: TransportRecord, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    haystack = (
        record.truck_number,
        record.transport_company_name,
        record.destination,
        record.bilty_number,
    )
    return any(needle in (value or "").lower() for value in haystack)


def _matches_status(record: TransportRecord, status: StatusFilter) -> bool:
    if status == StatusFilter.PAID:
        return record.is_balance_paid == PAID
    if status == StatusFilter.UNPAID:
        return record.is_balance_paid != PAID
    return True


def _matches_date(record: TransportRecord, date_text: str) -> bool:
    if not date_text:
        return True
    return date_text in (record.lr_date or "") or date_text in (record.sms_date or "")


def filter_records(
    records: Iterable[TransportRecord],
    search: str = "",
    status: StatusFilter = StatusFilter.ALL,
    date_text: str = "",
) -> List[TransportRecord]:
    """Case-insensitive search over truck/transport/destination/bilty, plus status and LR/SMS date"""
    return [
        r for r in records
        if _matches_search(r, search.strip())
        and _matches_status(r, status)
        and _matches_date(r, date_text.strip())
    ]
