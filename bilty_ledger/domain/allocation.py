"""Payment allocation engine - spreads payments across a company's unpaid records"""

from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from bilty_ledger.domain.balances import company_key, record_outstanding
from bilty_ledger.domain.exceptions import InsufficientBalanceError, ValidationError
from bilty_ledger.domain.models import (
    PAID,
    UNPAID,
    AllocationRequest,
    AllocationResult,
    LumpSumPayment,
    TransportRecord,
)
from bilty_ledger.utils.money import ZERO, format_amount, parse_amount


def select_unpaid_for_company(records: Iterable[TransportRecord], company_name: str) -> List[TransportRecord]:
    """Unpaid records of one company, in the order given (callers pass oldest first)"""
    key = company_key(company_name)
    return [
        r for r in records
        if company_key(r.transport_company_name) == key and r.is_balance_paid != PAID
    ]


def apply_to_record(record: TransportRecord, amount: Decimal, payment_date: str) -> TransportRecord:
    """Add a payment to a record's balance paid, flipping it to paid once net is covered"""
    paid = parse_amount(record.balance_paid_amount) + amount
    net = parse_amount(record.net_amount)
    return replace(
        record,
        balance_paid_amount=format_amount(paid),
        balance_paid_date=payment_date,
        is_balance_paid=PAID if paid >= net else UNPAID,
    )


def allocate_payment(
    records: Sequence[TransportRecord],
    company_name: str,
    payment_amount: Decimal,
    payment_date: str,
) -> AllocationResult:
    """
    Distribute a company payment across its unpaid records, oldest first.

    Each record takes min(remaining payment, net - balance paid); records with
    nothing outstanding are skipped. Stops once the payment is used up or the
    records run out. Only balance paid amount, balance paid date and the paid
    flag change. Whatever could not be placed comes back as the remainder.

    Raises:
        ValidationError: blank company, missing date, or non-positive amount
    """
    if not company_key(company_name):
        raise ValidationError("Company name is required")
    if not payment_date:
        raise ValidationError("Payment date is required")
    if payment_amount <= 0:
        raise ValidationError("Payment amount must be positive")

    remaining = payment_amount
    result = AllocationResult()

    for record in select_unpaid_for_company(records, company_name):
        if remaining <= 0:
            break

        outstanding = record_outstanding(record)
        if outstanding <= 0:
            continue

        applied = min(remaining, outstanding)
        result.updated_records.append(apply_to_record(record, applied, payment_date))
        result.applied_by_record[record.id] = applied
        remaining -= applied

    result.unallocated_remainder = remaining
    return result


def validate_lump_sum_allocations(
    payment: LumpSumPayment,
    requests: Sequence[AllocationRequest],
    records: Iterable[TransportRecord],
) -> Decimal:
    """
    Check a batch of lump-sum allocations before anything is written.

    Returns the batch total.

    Raises:
        ValidationError: empty batch, non-positive amount, unknown record,
            record already paid, or more than a record still owes
        InsufficientBalanceError: batch total exceeds the remaining balance
    """
    if not requests:
        raise ValidationError("At least one allocation is required")

    by_id = {r.id: r for r in records}
    total = ZERO
    for request in requests:
        if request.amount <= 0:
            raise ValidationError(f"Allocation for record {request.record_id} must be positive")
        if request.record_id not in by_id:
            raise ValidationError(f"Transport record {request.record_id} does not exist")
        total += request.amount

    if total > payment.remaining_balance:
        raise InsufficientBalanceError(
            f"Total allocation {total} exceeds available balance {payment.remaining_balance}"
        )

    for record_id, amount in merge_requests(requests).items():
        record = by_id[record_id]
        if record.is_balance_paid == PAID:
            raise ValidationError(f"Transport record {record_id} is already paid")
        outstanding = record_outstanding(record)
        if amount > outstanding:
            raise ValidationError(
                f"Allocation {amount} for record {record_id} exceeds its outstanding {max(outstanding, ZERO)}"
            )
    return total


def apply_lump_sum_allocation(record: TransportRecord, amount: Decimal) -> TransportRecord:
    """Raise a record's lump-sum allocated amount; the paid flag is left as is"""
    allocated = parse_amount(record.lump_sum_allocated_amount) + amount
    return replace(record, lump_sum_allocated_amount=format_amount(allocated))


def merge_requests(requests: Sequence[AllocationRequest]) -> Dict[str, Decimal]:
    """Total requested per record, keeping first-seen order"""
    merged: Dict[str, Decimal] = {}
    for request in requests:
        merged[request.record_id] = merged.get(request.record_id, ZERO) + request.amount
    return merged
