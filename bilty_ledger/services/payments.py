"""Payment use cases: company payments and lump-sum allocation, each in one transaction"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session

from bilty_ledger.domain.allocation import (
    allocate_payment,
    apply_lump_sum_allocation,
    merge_requests,
    validate_lump_sum_allocations,
)
from bilty_ledger.domain.calculator import recompute_derived_fields
from bilty_ledger.domain.exceptions import ValidationError
from bilty_ledger.domain.models import (
    AllocationRequest,
    AllocationResult,
    LumpSumPayment,
    PaymentAllocation,
    TransportRecord,
)
from bilty_ledger.infrastructure.database.repositories import (
    LumpSumPaymentRepository,
    PaymentAllocationRepository,
    TransportRecordRepository,
)
from bilty_ledger.infrastructure.observability.logging import log_allocation, log_lump_sum_allocation
from bilty_ledger.infrastructure.observability.metrics import record_allocation
from bilty_ledger.services.unit_of_work import transaction
from bilty_ledger.utils.date_utils import coerce_iso, to_display, today_display
from bilty_ledger.utils.text import to_upper


@dataclass
class LumpSumAllocationOutcome:
    """What a processed batch of lump-sum allocations changed"""

    payment: LumpSumPayment
    allocations: List[PaymentAllocation] = field(default_factory=list)
    updated_records: List[TransportRecord] = field(default_factory=list)

    @property
    def allocated_total(self) -> Decimal:
        return sum((a.allocated_amount for a in self.allocations), Decimal("0"))


def _canonical_id(raw_id: str) -> str:
    try:
        return str(uuid.UUID(str(raw_id)))
    except ValueError:
        return str(raw_id)


def _display_date(value: Optional[str], label: str) -> str:
    """Normalize an incoming date (display or ISO) to DD-MM-YYYY"""
    converted = to_display(coerce_iso(value))
    if not converted:
        raise ValidationError(f"{label} must be a DD-MM-YYYY or YYYY-MM-DD date")
    return converted


class PaymentService:
    """Applies payments to transport records"""

    def __init__(self, db: Session, request_id: Optional[str] = None):
        self.db = db
        self.request_id = request_id
        self.records = TransportRecordRepository(db)
        self.lump_sums = LumpSumPaymentRepository(db)
        self.allocations = PaymentAllocationRepository(db)

    # Company payments

    def allocate(self, company_name: str, payment_amount: Decimal, payment_date: str) -> AllocationResult:
        """
        Pay a transport company's unpaid records, oldest first.

        All record updates are committed together; if any write fails none of
        them stick. The part of the payment no record could absorb is returned
        as unallocated_remainder.

        Raises:
            ValidationError: non-positive amount, blank company, bad date
            ConcurrentUpdateError / StoreError: write failed, nothing applied
        """
        if payment_amount <= 0:
            raise ValidationError("Payment amount must be positive")
        paid_on = _display_date(payment_date, "Payment date")

        candidates = self.records.list_unpaid_for_company(company_name)
        result = allocate_payment(candidates, company_name, payment_amount, paid_on)

        with transaction(self.db):
            persisted = [self.records.update(record) for record in result.updated_records]
        result.updated_records = persisted

        record_allocation("company", result.applied_total, len(persisted), result.unallocated_remainder)
        log_allocation(company_name, payment_amount, len(persisted), result.unallocated_remainder, self.request_id)
        return result

    # Lump sums

    def create_lump_sum(self, company_name: str, amount: Decimal, date_received: str, notes: str = "") -> LumpSumPayment:
        if not company_name or not company_name.strip():
            raise ValidationError("Company name is required")
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        payment = LumpSumPayment(
            company_name=to_upper(company_name),
            amount=amount,
            remaining_balance=amount,
            date_received=_display_date(date_received, "Date received"),
            notes=to_upper(notes or ""),
        )
        with transaction(self.db):
            created = self.lump_sums.create(payment)
        return created

    def list_lump_sums(self, available_only: bool = False) -> List[LumpSumPayment]:
        return self.lump_sums.list_payments(available_only=available_only)

    def get_lump_sum(self, payment_id: str) -> LumpSumPayment:
        return self.lump_sums.get(payment_id)

    def update_lump_sum(
        self,
        payment_id: str,
        company_name: Optional[str] = None,
        date_received: Optional[str] = None,
        notes: Optional[str] = None,
        remaining_balance: Optional[Decimal] = None,
        expected_version: Optional[int] = None,
    ) -> LumpSumPayment:
        """Corrective edit; the original amount never changes and 0 <= remaining <= amount holds"""
        with transaction(self.db):
            payment = self.lump_sums.get(payment_id)
            if company_name is not None:
                if not company_name.strip():
                    raise ValidationError("Company name is required")
                payment = replace(payment, company_name=to_upper(company_name))
            if date_received is not None:
                payment = replace(payment, date_received=_display_date(date_received, "Date received"))
            if notes is not None:
                payment = replace(payment, notes=to_upper(notes))
            if remaining_balance is not None:
                if remaining_balance < 0 or remaining_balance > payment.amount:
                    raise ValidationError(f"Remaining balance must be between 0 and {payment.amount}")
                payment = replace(payment, remaining_balance=remaining_balance)
            updated = self.lump_sums.update(payment, expected_version=expected_version)
        return updated

    def delete_lump_sum(self, payment_id: str) -> None:
        """Refused once any of the payment has been allocated"""
        with transaction(self.db):
            if self.allocations.list_for_lump_sum(payment_id):
                raise ValidationError("Lump sum payment has allocations and cannot be deleted")
            self.lump_sums.delete(payment_id)

    def allocate_lump_sum(
        self,
        payment_id: str,
        requests: Sequence[AllocationRequest],
        allocation_date: Optional[str] = None,
    ) -> LumpSumAllocationOutcome:
        """
        Spread part of a lump sum over chosen records.

        The whole batch is validated before anything is written: every amount
        positive, every record present and unpaid, no record given more than
        it still owes, total within the remaining balance.
        Each allocation gets its own row; each record's lump-sum allocated
        amount grows and its derived fields are recomputed (so its net amount
        drops). The paid flag is not touched. The payment's remaining balance
        drops by the batch total. One transaction.

        Raises:
            InsufficientBalanceError: batch total exceeds remaining balance
            ValidationError: empty batch, bad amount, unknown or paid record,
                more than a record owes
        """
        allocated_on = _display_date(allocation_date, "Allocation date") if allocation_date else today_display()

        requests = [replace(r, record_id=_canonical_id(r.record_id)) for r in requests]
        payment = self.lump_sums.get(payment_id)
        record_ids = [r.record_id for r in requests]
        total = validate_lump_sum_allocations(payment, requests, self.records.find_by_ids(record_ids))

        outcome = LumpSumAllocationOutcome(payment=payment)
        with transaction(self.db):
            for request in requests:
                outcome.allocations.append(
                    self.allocations.create(
                        PaymentAllocation(
                            lump_sum_payment_id=payment.id,
                            transport_record_id=request.record_id,
                            allocated_amount=request.amount,
                            allocation_date=allocated_on,
                        )
                    )
                )

            for record_id, amount in merge_requests(requests).items():
                record = self.records.get(record_id)
                record = recompute_derived_fields(apply_lump_sum_allocation(record, amount))
                outcome.updated_records.append(self.records.update(record))

            outcome.payment = self.lump_sums.update(
                replace(payment, remaining_balance=payment.remaining_balance - total)
            )

        record_allocation("lump_sum", total, len(outcome.updated_records))
        log_lump_sum_allocation(
            payment.id, total, len(outcome.allocations), outcome.payment.remaining_balance, self.request_id
        )
        return outcome

    def allocations_for_lump_sum(self, payment_id: str) -> List[PaymentAllocation]:
        self.lump_sums.get(payment_id)
        return self.allocations.list_for_lump_sum(payment_id)

    def allocations_for_record(self, record_id: str) -> List[PaymentAllocation]:
        self.records.get(record_id)
        return self.allocations.list_for_record(record_id)
