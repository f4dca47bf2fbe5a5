"""Unit tests for the payment allocation engine"""

import pytest
from decimal import Decimal

from bilty_ledger.domain.allocation import (
    allocate_payment,
    apply_lump_sum_allocation,
    merge_requests,
    validate_lump_sum_allocations,
)
from bilty_ledger.domain.exceptions import InsufficientBalanceError, ValidationError
from bilty_ledger.domain.models import PAID, UNPAID, AllocationRequest, LumpSumPayment, TransportRecord


def record(record_id: str, net: str, company: str = "SHREE GANESH ROADWAYS", **fields) -> TransportRecord:
    return TransportRecord(id=record_id, transport_company_name=company, net_amount=net, **fields)


def lump_sum(remaining: str = "10000") -> LumpSumPayment:
    return LumpSumPayment(
        id="LS1",
        company_name="SHREE GANESH ROADWAYS",
        amount=Decimal("10000"),
        remaining_balance=Decimal(remaining),
        date_received="2025-03-01",
    )


class TestAllocatePayment:
    def test_oldest_record_is_settled_first(self):
        records = [record("r1", "5000"), record("r2", "3000")]
        result = allocate_payment(records, "SHREE GANESH ROADWAYS", Decimal("6000"), "05-03-2025")

        first, second = result.updated_records
        assert first.id == "r1"
        assert first.balance_paid_amount == "5000"
        assert first.is_balance_paid == PAID
        assert first.balance_paid_date == "05-03-2025"
        assert second.balance_paid_amount == "1000"
        assert second.is_balance_paid == UNPAID
        assert result.unallocated_remainder == Decimal("0")
        assert result.applied_total == Decimal("6000")

    def test_total_applied_plus_remainder_equals_payment(self):
        records = [record("r1", "1200"), record("r2", "800", balance_paid_amount="300")]
        result = allocate_payment(records, "SHREE GANESH ROADWAYS", Decimal("5000"), "05-03-2025")

        assert result.applied_by_record == {"r1": Decimal("1200"), "r2": Decimal("500")}
        assert result.applied_total + result.unallocated_remainder == Decimal("5000")
        assert result.unallocated_remainder == Decimal("3300")

    def test_no_record_is_overpaid(self):
        records = [record("r1", "100"), record("r2", "250.50")]
        result = allocate_payment(records, "SHREE GANESH ROADWAYS", Decimal("10000"), "05-03-2025")
        for updated in result.updated_records:
            assert Decimal(updated.balance_paid_amount) <= Decimal(updated.net_amount)
            assert updated.is_balance_paid == PAID

    def test_paid_and_other_company_records_are_untouched(self):
        records = [
            record("r1", "500", is_balance_paid=PAID),
            record("r2", "500", company="GATI"),
            record("r3", "500"),
        ]
        result = allocate_payment(records, "SHREE GANESH ROADWAYS", Decimal("500"), "05-03-2025")
        assert [r.id for r in result.updated_records] == ["r3"]

    def test_records_with_nothing_outstanding_are_skipped(self):
        records = [record("r1", "500", balance_paid_amount="500"), record("r2", "-20"), record("r3", "400")]
        result = allocate_payment(records, "SHREE GANESH ROADWAYS", Decimal("100"), "05-03-2025")
        assert [r.id for r in result.updated_records] == ["r3"]

    def test_company_match_ignores_case_and_spaces(self):
        records = [record("r1", "500", company="Shree Ganesh Roadways ")]
        result = allocate_payment(records, "  shree ganesh roadways", Decimal("200"), "05-03-2025")
        assert len(result.updated_records) == 1

    def test_only_payment_fields_change(self):
        original = record("r1", "8300", total="10000", advance="1000", commission="200", bilty_charge="500")
        result = allocate_payment([original], "SHREE GANESH ROADWAYS", Decimal("300"), "05-03-2025")
        updated = result.updated_records[0]
        assert updated.net_amount == "8300"
        assert updated.total == original.total
        assert updated.advance == original.advance
        assert original.balance_paid_amount == ""

    def test_stops_when_payment_used_up(self):
        records = [record("r1", "500"), record("r2", "500")]
        result = allocate_payment(records, "SHREE GANESH ROADWAYS", Decimal("500"), "05-03-2025")
        assert [r.id for r in result.updated_records] == ["r1"]

    @pytest.mark.parametrize(
        "company, amount, date, message",
        [
            ("", Decimal("100"), "05-03-2025", "Company name"),
            ("GATI", Decimal("100"), "", "Payment date"),
            ("GATI", Decimal("0"), "05-03-2025", "positive"),
            ("GATI", Decimal("-5"), "05-03-2025", "positive"),
        ],
    )
    def test_invalid_input_is_rejected(self, company, amount, date, message):
        with pytest.raises(ValidationError, match=message):
            allocate_payment([record("r1", "500", company="GATI")], company, amount, date)


class TestLumpSumValidation:
    RECORDS = [record("r1", "8000"), record("r2", "8000")]

    def test_valid_batch_returns_total(self):
        requests = [AllocationRequest("r1", Decimal("4000")), AllocationRequest("r2", Decimal("6000"))]
        assert validate_lump_sum_allocations(lump_sum(), requests, self.RECORDS) == Decimal("10000")

    def test_over_allocation_is_rejected(self):
        requests = [AllocationRequest("r1", Decimal("7000")), AllocationRequest("r2", Decimal("3001"))]
        with pytest.raises(InsufficientBalanceError):
            validate_lump_sum_allocations(lump_sum(), requests, self.RECORDS)

    def test_over_allocation_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            validate_lump_sum_allocations(lump_sum("100"), [AllocationRequest("r1", Decimal("101"))], self.RECORDS)

    def test_unknown_record_is_rejected(self):
        with pytest.raises(ValidationError, match="does not exist"):
            validate_lump_sum_allocations(lump_sum(), [AllocationRequest("missing", Decimal("1"))], self.RECORDS)

    def test_empty_batch_is_rejected(self):
        with pytest.raises(ValidationError):
            validate_lump_sum_allocations(lump_sum(), [], self.RECORDS)

    def test_non_positive_amount_is_rejected(self):
        with pytest.raises(ValidationError, match="positive"):
            validate_lump_sum_allocations(lump_sum(), [AllocationRequest("r1", Decimal("0"))], self.RECORDS)

    def test_record_cannot_receive_more_than_it_owes(self):
        owing = [record("r1", "1000", balance_paid_amount="200")]
        with pytest.raises(ValidationError, match="exceeds its outstanding 800"):
            validate_lump_sum_allocations(lump_sum(), [AllocationRequest("r1", Decimal("800.01"))], owing)
        exact = [AllocationRequest("r1", Decimal("800"))]
        assert validate_lump_sum_allocations(lump_sum(), exact, owing) == Decimal("800")

    def test_repeated_requests_count_together_against_outstanding(self):
        owing = [record("r1", "1000")]
        requests = [AllocationRequest("r1", Decimal("600")), AllocationRequest("r1", Decimal("600"))]
        with pytest.raises(ValidationError, match="outstanding"):
            validate_lump_sum_allocations(lump_sum(), requests, owing)

    def test_paid_record_is_rejected(self):
        paid = [record("r1", "1000", is_balance_paid=PAID)]
        with pytest.raises(ValidationError, match="already paid"):
            validate_lump_sum_allocations(lump_sum(), [AllocationRequest("r1", Decimal("10"))], paid)


def test_lump_sum_allocation_leaves_paid_flag_alone():
    updated = apply_lump_sum_allocation(record("r1", "5000", lump_sum_allocated_amount="1000"), Decimal("4000"))
    assert updated.lump_sum_allocated_amount == "5000"
    assert updated.is_balance_paid == UNPAID


def test_merge_requests_sums_repeated_records():
    merged = merge_requests(
        [
            AllocationRequest("r2", Decimal("10")),
            AllocationRequest("r1", Decimal("5")),
            AllocationRequest("r2", Decimal("2.5")),
        ]
    )
    assert list(merged) == ["r2", "r1"]
    assert merged["r2"] == Decimal("12.5")
