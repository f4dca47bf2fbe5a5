"""Outstanding balance aggregation per transport company"""

from decimal import Decimal
from typing import Dict, Iterable, List

from bilty_ledger.domain.models import PAID, CompanySummary, DashboardStats, TransportRecord
from bilty_ledger.utils.money import ZERO, parse_amount


def company_key(name: str | None) -> str:
    """Grouping key for a transport company; blank names map to ""."""
    return (name or "").strip().upper()


def record_outstanding(record: TransportRecord) -> Decimal:
    """What is still owed on a record: net amount less balance already paid"""
    return parse_amount(record.net_amount) - parse_amount(record.balance_paid_amount)


def summarize_outstanding(records: Iterable[TransportRecord]) -> List[CompanySummary]:
    """
    Build one summary per transport company, in first-seen order.

    Only unpaid records add to the outstanding amount; paid records are still
    counted. Records without a company name are left out entirely.
    """
    summaries: Dict[str, CompanySummary] = {}

    for record in records:
        key = company_key(record.transport_company_name)
        if not key:
            continue

        summary = summaries.get(key)
        if summary is None:
            summary = CompanySummary(company_name=record.transport_company_name.strip())
            summaries[key] = summary

        summary.total_records += 1
        if record.is_balance_paid == PAID:
            summary.paid_records += 1
        else:
            summary.outstanding += record_outstanding(record)

    return list(summaries.values())


def sort_by_outstanding(summaries: List[CompanySummary]) -> List[CompanySummary]:
    """Highest outstanding first; ties keep their original order"""
    return sorted(summaries, key=lambda s: s.outstanding, reverse=True)


def dashboard_stats(records: List[TransportRecord], recent_limit: int = 5) -> DashboardStats:
    """Headline totals across all records (paid/unpaid use net amount, falling back to total)"""
    if not records:
        return DashboardStats(
            total_records=0,
            total_amount=ZERO,
            paid_amount=ZERO,
            unpaid_amount=ZERO,
            unique_trucks=0,
            unique_transports=0,
            unique_destinations=0,
            average_amount=ZERO,
            paid_percentage=0.0,
        )

    total_amount = sum((parse_amount(r.total) for r in records), ZERO)

    paid = [r for r in records if r.is_balance_paid == PAID]
    unpaid = [r for r in records if r.is_balance_paid != PAID]

    def billed(record: TransportRecord) -> Decimal:
        return parse_amount(record.net_amount or record.total)

    return DashboardStats(
        total_records=len(records),
        total_amount=total_amount,
        paid_amount=sum((billed(r) for r in paid), ZERO),
        unpaid_amount=sum((billed(r) for r in unpaid), ZERO),
        unique_trucks=len({r.truck_number for r in records if r.truck_number}),
        unique_transports=len({r.transport_company_name for r in records if r.transport_company_name}),
        unique_destinations=len({r.destination for r in records if r.destination}),
        average_amount=total_amount / len(records),
        paid_percentage=round(len(paid) / len(records) * 100, 1),
        recent_records=records[:recent_limit],
    )
