"""Integration tests for the record and payment services against the test database"""

import pytest
from decimal import Decimal

from bilty_ledger.domain.exceptions import (
    ConcurrentUpdateError,
    DuplicateOptionError,
    InsufficientBalanceError,
    RecordNotFoundError,
    StoreError,
    ValidationError,
)
from bilty_ledger.domain.models import PAID, UNPAID, AllocationRequest
from bilty_ledger.infrastructure.database.repositories import OptionKind, TransportRecordRepository
from bilty_ledger.services.options import OptionService


class TestRecordService:
    def test_serial_numbers_follow_record_count(self, make_record):
        first = make_record()
        second = make_record()
        explicit = make_record(serial_number="77")

        assert first.serial_number == "1"
        assert second.serial_number == "2"
        assert explicit.serial_number == "77"

    def test_create_normalizes_text_and_computes_derived_fields(self, record_service):
        record = record_service.create(
            {
                "transport_company_name": " vrl logistics ",
                "truck_number": "mh12ab1234",
                "weight": "27 MT G",
                "rate": "1200",
                "bilty_charge": "400",
                "advance": "5000",
            }
        )
        assert record.id
        assert record.transport_company_name == "VRL LOGISTICS"
        assert record.truck_number == "MH12AB1234"
        assert record.total == "32400"
        assert record.freight_amount == "32000"
        assert record.net_amount == "27000"
        assert record.is_balance_paid == UNPAID
        assert record.lump_sum_allocated_amount == "0"
        assert record.version == 1

    def test_create_requires_transport_company(self, record_service):
        with pytest.raises(ValidationError):
            record_service.create({"truck_number": "MH12AB1234"})
        assert record_service.list() == []

    def test_unknown_fields_are_rejected(self, record_service):
        with pytest.raises(ValidationError, match="Unknown fields"):
            record_service.preview({"transport_company_name": "GATI", "colour": "RED"})

    def test_create_remembers_suggestions(self, make_record, db):
        make_record(truck_number="gj01zz9999", destination="nasik")
        options = OptionService(db)
        assert options.list(OptionKind.TRUCKS) == ["GJ01ZZ9999"]
        assert options.list(OptionKind.DESTINATIONS) == ["NASIK"]
        assert options.list(OptionKind.TRANSPORTS) == ["SHREE GANESH ROADWAYS"]

    def test_update_recomputes_and_bumps_version(self, make_record, record_service):
        record = make_record(total="10000")
        updated = record_service.update(record.id, {"commission": "500"}, expected_version=record.version)

        assert updated.net_amount == "9500"
        assert updated.total == "10000"
        assert updated.version == record.version + 1
        assert record_service.get(record.id).commission == "500"

    def test_stale_version_is_rejected_without_change(self, make_record, record_service):
        record = make_record(total="10000")
        record_service.update(record.id, {"advance": "100"}, expected_version=record.version)

        with pytest.raises(ConcurrentUpdateError):
            record_service.update(record.id, {"advance": "999"}, expected_version=record.version)
        assert record_service.get(record.id).advance == "100"

    def test_get_missing_record(self, record_service):
        with pytest.raises(RecordNotFoundError):
            record_service.get("00000000-0000-0000-0000-000000000000")
        with pytest.raises(RecordNotFoundError):
            record_service.get("not-a-uuid")

    def test_company_summaries_sorted_by_outstanding(self, make_record, record_service):
        make_record(company="SMALL CO", total="100")
        make_record(company="BIG CO", total="9000")
        make_record(company="BIG CO", total="1000", is_balance_paid="YES")

        summaries = record_service.company_summaries()
        assert [s.company_name for s in summaries] == ["BIG CO", "SMALL CO"]
        assert summaries[0].outstanding == Decimal("9000")
        assert summaries[0].paid_records == 1


class TestCompanyPayment:
    def test_oldest_first_with_remainder(self, make_record, payment_service, record_service):
        oldest = make_record(total="5000")
        newer = make_record(total="3000")

        result = payment_service.allocate("shree ganesh roadways", Decimal("9000"), "05-03-2025")

        assert [r.id for r in result.updated_records] == [oldest.id, newer.id]
        assert result.unallocated_remainder == Decimal("1000")

        stored = record_service.get(oldest.id)
        assert stored.balance_paid_amount == "5000"
        assert stored.balance_paid_date == "05-03-2025"
        assert stored.is_balance_paid == PAID
        assert record_service.get(newer.id).is_balance_paid == PAID

    def test_iso_payment_date_is_stored_in_display_form(self, make_record, payment_service, record_service):
        record = make_record(total="5000")
        payment_service.allocate("SHREE GANESH ROADWAYS", Decimal("100"), "2025-03-05")
        assert record_service.get(record.id).balance_paid_date == "05-03-2025"

    def test_invalid_payment_changes_nothing(self, make_record, payment_service, record_service):
        record = make_record(total="5000")
        with pytest.raises(ValidationError):
            payment_service.allocate("SHREE GANESH ROADWAYS", Decimal("0"), "05-03-2025")
        with pytest.raises(ValidationError):
            payment_service.allocate("SHREE GANESH ROADWAYS", Decimal("100"), "sometime")
        assert record_service.get(record.id).balance_paid_amount == ""

    def test_failed_write_rolls_back_every_record(self, make_record, payment_service, record_service, monkeypatch):
        first = make_record(total="5000")
        second = make_record(total="3000")

        original_update = TransportRecordRepository.update
        calls = {"count": 0}

        def failing_update(self, record, expected_version=None):
            calls["count"] += 1
            if calls["count"] == 2:
                raise StoreError("disk full")
            return original_update(self, record, expected_version=expected_version)

        monkeypatch.setattr(TransportRecordRepository, "update", failing_update)

        with pytest.raises(StoreError):
            payment_service.allocate("SHREE GANESH ROADWAYS", Decimal("8000"), "05-03-2025")

        monkeypatch.setattr(TransportRecordRepository, "update", original_update)
        for record in (first, second):
            stored = record_service.get(record.id)
            assert stored.balance_paid_amount == ""
            assert stored.is_balance_paid == UNPAID


class TestLumpSums:
    def test_allocation_updates_records_and_balance(self, make_record, payment_service, record_service):
        record = make_record(total="8000")
        payment = payment_service.create_lump_sum("shree ganesh roadways", Decimal("10000"), "01-03-2025")
        assert payment.remaining_balance == Decimal("10000")
        assert payment.company_name == "SHREE GANESH ROADWAYS"

        outcome = payment_service.allocate_lump_sum(
            payment.id, [AllocationRequest(record.id, Decimal("3000"))], allocation_date="02-03-2025"
        )

        assert outcome.allocated_total == Decimal("3000")
        assert outcome.payment.remaining_balance == Decimal("7000")
        stored = record_service.get(record.id)
        assert stored.lump_sum_allocated_amount == "3000"
        assert stored.net_amount == "5000"
        assert stored.is_balance_paid == UNPAID

        allocations = payment_service.allocations_for_record(record.id)
        assert len(allocations) == 1
        assert allocations[0].allocated_amount == Decimal("3000")
        assert allocations[0].allocation_date == "02-03-2025"

    def test_over_allocation_mutates_nothing(self, make_record, payment_service, record_service):
        first = make_record(total="8000")
        second = make_record(total="8000")
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("10000"), "01-03-2025")

        with pytest.raises(InsufficientBalanceError):
            payment_service.allocate_lump_sum(
                payment.id,
                [AllocationRequest(first.id, Decimal("7000")), AllocationRequest(second.id, Decimal("4000"))],
            )

        assert payment_service.get_lump_sum(payment.id).remaining_balance == Decimal("10000")
        assert payment_service.allocations_for_lump_sum(payment.id) == []
        assert record_service.get(first.id).lump_sum_allocated_amount == "0"
        assert record_service.get(second.id).lump_sum_allocated_amount == "0"

    def test_record_cannot_be_allocated_past_what_it_owes(self, make_record, payment_service, record_service):
        owing = make_record(total="1000")
        settled = make_record(total="500", is_balance_paid="YES")
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("5000"), "01-03-2025")

        with pytest.raises(ValidationError, match="outstanding"):
            payment_service.allocate_lump_sum(payment.id, [AllocationRequest(owing.id, Decimal("4000"))])
        with pytest.raises(ValidationError, match="already paid"):
            payment_service.allocate_lump_sum(
                payment.id,
                [AllocationRequest(owing.id, Decimal("400")), AllocationRequest(settled.id, Decimal("500"))],
            )

        assert payment_service.get_lump_sum(payment.id).remaining_balance == Decimal("5000")
        assert payment_service.allocations_for_lump_sum(payment.id) == []
        for record in (owing, settled):
            stored = record_service.get(record.id)
            assert stored.lump_sum_allocated_amount == "0"
            assert Decimal(stored.net_amount) >= 0

    def test_unknown_record_is_rejected(self, payment_service):
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("100"), "01-03-2025")
        with pytest.raises(ValidationError, match="does not exist"):
            payment_service.allocate_lump_sum(
                payment.id, [AllocationRequest("00000000-0000-0000-0000-000000000000", Decimal("10"))]
            )

    def test_repeated_record_in_one_batch(self, make_record, payment_service, record_service):
        record = make_record(total="8000")
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("1000"), "01-03-2025")

        outcome = payment_service.allocate_lump_sum(
            payment.id, [AllocationRequest(record.id, Decimal("200")), AllocationRequest(record.id, Decimal("300"))]
        )

        assert len(outcome.allocations) == 2
        assert len(outcome.updated_records) == 1
        assert record_service.get(record.id).lump_sum_allocated_amount == "500"

    def test_allocations_list_in_entry_order(self, make_record, payment_service):
        first = make_record(total="8000")
        second = make_record(total="8000")
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("1000"), "01-03-2025")

        amounts = ["30", "10", "20", "40"]
        targets = [second, first, second, first]
        payment_service.allocate_lump_sum(
            payment.id, [AllocationRequest(r.id, Decimal(a)) for r, a in zip(targets, amounts)]
        )

        listed = payment_service.allocations_for_lump_sum(payment.id)
        assert [a.allocated_amount for a in listed] == [Decimal(a) for a in amounts]
        assert [a.transport_record_id for a in listed] == [r.id for r in targets]
        on_first = payment_service.allocations_for_record(first.id)
        assert [a.allocated_amount for a in on_first] == [Decimal("10"), Decimal("40")]

    def test_deleting_record_keeps_its_allocations(self, make_record, payment_service, record_service):
        record = make_record(total="8000")
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("1000"), "01-03-2025")
        payment_service.allocate_lump_sum(payment.id, [AllocationRequest(record.id, Decimal("400"))])

        record_service.delete(record.id)

        with pytest.raises(RecordNotFoundError):
            record_service.get(record.id)
        allocations = payment_service.allocations_for_lump_sum(payment.id)
        assert len(allocations) == 1
        assert allocations[0].transport_record_id is None
        assert payment_service.get_lump_sum(payment.id).remaining_balance == Decimal("600")

    def test_lump_sum_with_allocations_cannot_be_deleted(self, make_record, payment_service):
        record = make_record(total="8000")
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("1000"), "01-03-2025")
        payment_service.allocate_lump_sum(payment.id, [AllocationRequest(record.id, Decimal("400"))])

        with pytest.raises(ValidationError):
            payment_service.delete_lump_sum(payment.id)
        assert payment_service.get_lump_sum(payment.id).amount == Decimal("1000")

    def test_unused_lump_sum_can_be_deleted(self, payment_service):
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("1000"), "01-03-2025")
        payment_service.delete_lump_sum(payment.id)
        with pytest.raises(RecordNotFoundError):
            payment_service.get_lump_sum(payment.id)

    def test_remaining_balance_edit_stays_in_range(self, payment_service):
        payment = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("1000"), "01-03-2025")
        with pytest.raises(ValidationError):
            payment_service.update_lump_sum(payment.id, remaining_balance=Decimal("1500"))

        updated = payment_service.update_lump_sum(payment.id, remaining_balance=Decimal("250"), notes="cheque 4411")
        assert updated.remaining_balance == Decimal("250")
        assert updated.amount == Decimal("1000")
        assert updated.notes == "CHEQUE 4411"

    def test_available_only_hides_exhausted_payments(self, make_record, payment_service):
        record = make_record(total="8000")
        spent = payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("500"), "01-03-2025")
        payment_service.create_lump_sum("SHREE GANESH ROADWAYS", Decimal("700"), "02-03-2025")
        payment_service.allocate_lump_sum(spent.id, [AllocationRequest(record.id, Decimal("500"))])

        available = payment_service.list_lump_sums(available_only=True)
        assert [p.amount for p in available] == [Decimal("700")]
        assert len(payment_service.list_lump_sums()) == 2


class TestOptions:
    def test_duplicate_option_is_rejected(self, db):
        options = OptionService(db)
        options.add(OptionKind.DESTINATIONS, "pune")
        with pytest.raises(DuplicateOptionError, match="already exists in saved destinations"):
            options.add(OptionKind.DESTINATIONS, " PUNE ")
        assert options.list(OptionKind.DESTINATIONS) == ["PUNE"]

    def test_same_value_allowed_for_different_kinds(self, db):
        options = OptionService(db)
        options.add(OptionKind.DESTINATIONS, "GATI")
        options.add(OptionKind.TRANSPORTS, "GATI")
        assert options.list(OptionKind.TRANSPORTS) == ["GATI"]

    def test_sync_backfills_missing_options(self, make_record, db):
        make_record(destination="NASIK")
        make_record(destination="SURAT")
        options = OptionService(db)

        assert options.sync_from_records() == {"trucks": 0, "transports": 0, "destinations": 0}
        assert options.list(OptionKind.DESTINATIONS) == ["NASIK", "SURAT"]
