"""Data access layer for transport records, lump sums, allocations and saved options"""

import uuid
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Iterator, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from bilty_ledger.infrastructure.database.models import (
    TransportRecordRow,
    LumpSumPaymentRow,
    PaymentAllocationRow,
    SavedOptionRow,
)
from bilty_ledger.domain.exceptions import (
    ConcurrentUpdateError,
    DuplicateOptionError,
    RecordNotFoundError,
    StoreError,
)
from bilty_ledger.domain.models import PAID, LumpSumPayment, PaymentAllocation, TransportRecord, RAW_FIELDS, DERIVED_FIELDS

RECORD_COLUMNS = RAW_FIELDS + DERIVED_FIELDS


class OptionKind(str, Enum):
    TRUCKS = "trucks"
    TRANSPORTS = "transports"
    DESTINATIONS = "destinations"


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate SQLAlchemy failures into domain store errors"""
    try:
        yield
    except StaleDataError as e:
        raise ConcurrentUpdateError("Row was modified by another session") from e
    except SQLAlchemyError as e:
        raise StoreError(f"Record store error: {e.__class__.__name__}") from e


def _parse_id(raw_id: str, entity: str) -> uuid.UUID:
    try:
        return raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id))
    except ValueError:
        raise RecordNotFoundError(f"{entity} {raw_id} not found")


def _record_to_domain(row: TransportRecordRow) -> TransportRecord:
    values = {name: getattr(row, name) for name in RECORD_COLUMNS}
    return TransportRecord(
        id=str(row.id),
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
        **values,
    )


def _payment_to_domain(row: LumpSumPaymentRow) -> LumpSumPayment:
    return LumpSumPayment(
        id=str(row.id),
        company_name=row.company_name,
        amount=Decimal(row.amount),
        remaining_balance=Decimal(row.remaining_balance),
        date_received=row.date_received,
        notes=row.notes,
        created_at=row.created_at,
        version=row.version,
    )


def _allocation_to_domain(row: PaymentAllocationRow) -> PaymentAllocation:
    return PaymentAllocation(
        id=str(row.id),
        lump_sum_payment_id=str(row.lump_sum_payment_id),
        transport_record_id=str(row.transport_record_id) if row.transport_record_id else None,
        allocated_amount=Decimal(row.allocated_amount),
        allocation_date=row.allocation_date,
        created_at=row.created_at,
    )


class TransportRecordRepository:
    """Repository for transport records"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, record_id: str) -> TransportRecordRow:
        row = self.db.get(TransportRecordRow, _parse_id(record_id, "Transport record"))
        if row is None:
            raise RecordNotFoundError(f"Transport record {record_id} not found")
        return row

    def list_records(self, newest_first: bool = True) -> List[TransportRecord]:
        """All records; newest first for listing, oldest first for allocation"""
        order = TransportRecordRow.entry_seq.desc() if newest_first else TransportRecordRow.entry_seq.asc()
        with store_errors():
            rows = self.db.query(TransportRecordRow).order_by(order).all()
        return [_record_to_domain(r) for r in rows]

    def list_unpaid_for_company(self, company_name: str) -> List[TransportRecord]:
        """Unpaid records of one company, oldest first"""
        key = company_name.strip().upper()
        with store_errors():
            rows = (
                self.db.query(TransportRecordRow)
                .filter(func.upper(func.trim(TransportRecordRow.transport_company_name)) == key)
                .filter(TransportRecordRow.is_balance_paid != PAID)
                .order_by(TransportRecordRow.entry_seq.asc())
                .all()
            )
        return [_record_to_domain(r) for r in rows]

    def get(self, record_id: str) -> TransportRecord:
        with store_errors():
            return _record_to_domain(self._get_row(record_id))

    def find_by_ids(self, record_ids: List[str]) -> List[TransportRecord]:
        """Records for whichever of the given ids exist (malformed ids are simply absent)"""
        parsed = []
        for raw in record_ids:
            try:
                parsed.append(uuid.UUID(str(raw)))
            except ValueError:
                continue
        if not parsed:
            return []
        with store_errors():
            rows = self.db.query(TransportRecordRow).filter(TransportRecordRow.id.in_(parsed)).all()
        return [_record_to_domain(r) for r in rows]

    def count(self) -> int:
        with store_errors():
            return self.db.query(func.count(TransportRecordRow.id)).scalar() or 0

    def create(self, record: TransportRecord) -> TransportRecord:
        """Insert a record; flush to get its id without committing"""
        with store_errors():
            next_seq = (self.db.query(func.max(TransportRecordRow.entry_seq)).scalar() or 0) + 1
            row = TransportRecordRow(
                entry_seq=next_seq,
                **{name: getattr(record, name) for name in RECORD_COLUMNS},
            )
            self.db.add(row)
            self.db.flush()
            return _record_to_domain(row)

    def update(self, record: TransportRecord, expected_version: Optional[int] = None) -> TransportRecord:
        """
        Write every field of the record back to its row.

        Raises:
            ConcurrentUpdateError: expected_version given and the row has moved on
        """
        with store_errors():
            row = self._get_row(record.id)
            if expected_version is not None and row.version != expected_version:
                raise ConcurrentUpdateError(
                    f"Transport record {record.id} is at version {row.version}, not {expected_version}"
                )
            for name in RECORD_COLUMNS:
                setattr(row, name, getattr(record, name))
            self.db.flush()
            return _record_to_domain(row)

    def delete(self, record_id: str) -> None:
        with store_errors():
            row = self._get_row(record_id)
            self.db.delete(row)
            self.db.flush()


class LumpSumPaymentRepository:
    """Repository for lump-sum payments"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, payment_id: str) -> LumpSumPaymentRow:
        row = self.db.get(LumpSumPaymentRow, _parse_id(payment_id, "Lump sum payment"))
        if row is None:
            raise RecordNotFoundError(f"Lump sum payment {payment_id} not found")
        return row

    def list_payments(self, available_only: bool = False) -> List[LumpSumPayment]:
        """Newest first; available_only keeps payments with balance left"""
        with store_errors():
            query = self.db.query(LumpSumPaymentRow)
            if available_only:
                query = query.filter(LumpSumPaymentRow.remaining_balance > 0)
            rows = query.order_by(LumpSumPaymentRow.created_at.desc()).all()
        return [_payment_to_domain(r) for r in rows]

    def get(self, payment_id: str) -> LumpSumPayment:
        with store_errors():
            return _payment_to_domain(self._get_row(payment_id))

    def create(self, payment: LumpSumPayment) -> LumpSumPayment:
        with store_errors():
            row = LumpSumPaymentRow(
                company_name=payment.company_name,
                amount=payment.amount,
                remaining_balance=payment.remaining_balance,
                date_received=payment.date_received,
                notes=payment.notes,
            )
            self.db.add(row)
            self.db.flush()
            return _payment_to_domain(row)

    def update(self, payment: LumpSumPayment, expected_version: Optional[int] = None) -> LumpSumPayment:
        with store_errors():
            row = self._get_row(payment.id)
            if expected_version is not None and row.version != expected_version:
                raise ConcurrentUpdateError(
                    f"Lump sum payment {payment.id} is at version {row.version}, not {expected_version}"
                )
            row.company_name = payment.company_name
            row.remaining_balance = payment.remaining_balance
            row.date_received = payment.date_received
            row.notes = payment.notes
            self.db.flush()
            return _payment_to_domain(row)

    def delete(self, payment_id: str) -> None:
        with store_errors():
            row = self._get_row(payment_id)
            self.db.delete(row)
            self.db.flush()


class PaymentAllocationRepository:
    """Repository for lump-sum allocations"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, allocation: PaymentAllocation) -> PaymentAllocation:
        with store_errors():
            next_seq = (self.db.query(func.max(PaymentAllocationRow.entry_seq)).scalar() or 0) + 1
            row = PaymentAllocationRow(
                entry_seq=next_seq,
                lump_sum_payment_id=_parse_id(allocation.lump_sum_payment_id, "Lump sum payment"),
                transport_record_id=_parse_id(allocation.transport_record_id, "Transport record"),
                allocated_amount=allocation.allocated_amount,
                allocation_date=allocation.allocation_date,
            )
            self.db.add(row)
            self.db.flush()
            return _allocation_to_domain(row)

    def list_for_record(self, record_id: str) -> List[PaymentAllocation]:
        with store_errors():
            rows = (
                self.db.query(PaymentAllocationRow)
                .filter(PaymentAllocationRow.transport_record_id == _parse_id(record_id, "Transport record"))
                .order_by(PaymentAllocationRow.entry_seq.asc())
                .all()
            )
        return [_allocation_to_domain(r) for r in rows]

    def list_for_lump_sum(self, payment_id: str) -> List[PaymentAllocation]:
        with store_errors():
            rows = (
                self.db.query(PaymentAllocationRow)
                .filter(PaymentAllocationRow.lump_sum_payment_id == _parse_id(payment_id, "Lump sum payment"))
                .order_by(PaymentAllocationRow.entry_seq.asc())
                .all()
            )
        return [_allocation_to_domain(r) for r in rows]

    def detach_record(self, record_id: str) -> int:
        """Clear the record reference on its allocations; returns how many were touched"""
        with store_errors():
            touched = (
                self.db.query(PaymentAllocationRow)
                .filter(PaymentAllocationRow.transport_record_id == _parse_id(record_id, "Transport record"))
                .update({PaymentAllocationRow.transport_record_id: None}, synchronize_session=False)
            )
            self.db.flush()
        return touched


class SavedOptionRepository:
    """Repository for input suggestions"""

    def __init__(self, db: Session):
        self.db = db

    def list_values(self, kind: OptionKind) -> List[str]:
        with store_errors():
            rows = (
                self.db.query(SavedOptionRow.value)
                .filter(SavedOptionRow.kind == kind.value)
                .order_by(SavedOptionRow.value.asc())
                .all()
            )
        return [r.value for r in rows]

    def exists(self, kind: OptionKind, value: str) -> bool:
        with store_errors():
            return (
                self.db.query(SavedOptionRow.id)
                .filter(SavedOptionRow.kind == kind.value, SavedOptionRow.value == value)
                .first()
                is not None
            )

    def add(self, kind: OptionKind, value: str) -> str:
        """
        Insert an upper-cased option.

        Raises:
            DuplicateOptionError: value already saved for this kind
        """
        normalized = value.strip().upper()
        if self.exists(kind, normalized):
            raise DuplicateOptionError(kind.value, normalized)
        try:
            self.db.add(SavedOptionRow(kind=kind.value, value=normalized))
            self.db.flush()
        except IntegrityError as e:
            raise DuplicateOptionError(kind.value, normalized) from e
        except SQLAlchemyError as e:
            raise StoreError(f"Record store error: {e.__class__.__name__}") from e
        return normalized
