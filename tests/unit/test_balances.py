"""Unit tests for outstanding balance aggregation"""

from decimal import Decimal

from bilty_ledger.domain.balances import dashboard_stats, summarize_outstanding, sort_by_outstanding
from bilty_ledger.domain.models import PAID, CompanySummary, TransportRecord


def record(company: str, net: str, paid_amount: str = "", status: str = "NO", **fields) -> TransportRecord:
    return TransportRecord(
        transport_company_name=company,
        net_amount=net,
        total=net,
        balance_paid_amount=paid_amount,
        is_balance_paid=status,
        **fields,
    )


def test_outstanding_counts_unpaid_records_only():
    summaries = summarize_outstanding(
        [
            record("VRL LOGISTICS", "5000"),
            record("VRL LOGISTICS", "3000", paid_amount="1000"),
            record("VRL LOGISTICS", "8000", paid_amount="8000", status=PAID),
        ]
    )
    assert len(summaries) == 1
    vrl = summaries[0]
    assert vrl.outstanding == Decimal("7000")
    assert vrl.total_records == 3
    assert vrl.paid_records == 1
    assert vrl.pending_records == 2


def test_company_names_group_case_insensitively():
    summaries = summarize_outstanding([record("Vrl Logistics ", "100"), record("VRL LOGISTICS", "200")])
    assert len(summaries) == 1
    assert summaries[0].company_name == "Vrl Logistics"
    assert summaries[0].outstanding == Decimal("300")


def test_blank_company_is_excluded():
    summaries = summarize_outstanding([record("", "100"), record("   ", "200"), record("GATI", "50")])
    assert [s.company_name for s in summaries] == ["GATI"]


def test_summary_outstanding_equals_sum_of_unpaid_net_less_paid():
    records = [
        record("A", "1000", paid_amount="250"),
        record("A", "400"),
        record("A", "900", status=PAID),
        record("B", "700", paid_amount="700"),
    ]
    by_name = {s.company_name: s for s in summarize_outstanding(records)}
    assert by_name["A"].outstanding == Decimal("1150")
    assert by_name["B"].outstanding == Decimal("0")


def test_sort_is_descending_and_stable():
    summaries = [
        CompanySummary("FIRST", outstanding=Decimal("100")),
        CompanySummary("BIG", outstanding=Decimal("900")),
        CompanySummary("SECOND", outstanding=Decimal("100")),
    ]
    ordered = sort_by_outstanding(summaries)
    assert [s.company_name for s in ordered] == ["BIG", "FIRST", "SECOND"]


def test_dashboard_for_empty_store():
    stats = dashboard_stats([])
    assert stats.total_records == 0
    assert stats.total_amount == Decimal("0")
    assert stats.paid_percentage == 0.0
    assert stats.recent_records == []


def test_dashboard_totals_and_uniques():
    records = [
        record("A", "1000", status=PAID, truck_number="T1", destination="PUNE"),
        record("A", "3000", truck_number="T2", destination="PUNE"),
        record("B", "2000", truck_number="T1", destination="NASIK"),
    ]
    stats = dashboard_stats(records, recent_limit=2)
    assert stats.total_records == 3
    assert stats.total_amount == Decimal("6000")
    assert stats.paid_amount == Decimal("1000")
    assert stats.unpaid_amount == Decimal("5000")
    assert stats.unique_trucks == 2
    assert stats.unique_transports == 2
    assert stats.unique_destinations == 2
    assert stats.average_amount == Decimal("2000")
    assert stats.paid_percentage == 33.3
    assert len(stats.recent_records) == 2
