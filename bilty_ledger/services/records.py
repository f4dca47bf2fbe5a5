"""Transport record use cases: entry, edit, delete, listing and summaries"""

import logging
from dataclasses import fields, replace
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from bilty_ledger.config import settings
from bilty_ledger.domain.balances import dashboard_stats, sort_by_outstanding, summarize_outstanding
from bilty_ledger.domain.calculator import recompute_derived_fields
from bilty_ledger.domain.exceptions import ValidationError
from bilty_ledger.domain.filters import StatusFilter, filter_records
from bilty_ledger.domain.models import PAID, UNPAID, RAW_FIELDS, CompanySummary, DashboardStats, TransportRecord
from bilty_ledger.infrastructure.database.repositories import PaymentAllocationRepository, TransportRecordRepository
from bilty_ledger.infrastructure.observability.metrics import records_created_counter
from bilty_ledger.services.options import OptionService
from bilty_ledger.services.unit_of_work import transaction
from bilty_ledger.utils.text import normalize_record_text

logger = logging.getLogger(__name__)

_RECORD_FIELD_NAMES = {f.name for f in fields(TransportRecord)}


def _raw_inputs(data: Dict[str, Any]) -> Dict[str, str]:
    """Keep only operator-editable fields, as trimmed/upper-cased strings"""
    raw = {k: ("" if v is None else str(v)) for k, v in data.items() if k in RAW_FIELDS}
    return normalize_record_text(raw)


def _check_paid_flag(record: TransportRecord) -> None:
    if record.is_balance_paid not in (PAID, UNPAID):
        raise ValidationError("is_balance_paid must be YES or NO")


def build_record(data: Dict[str, Any], base: Optional[TransportRecord] = None) -> TransportRecord:
    """Apply raw inputs to a record (new or existing) and recompute everything derived"""
    unknown = set(data) - _RECORD_FIELD_NAMES
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

    record = replace(base or TransportRecord(), **_raw_inputs(data))
    if not record.lump_sum_allocated_amount:
        record = replace(record, lump_sum_allocated_amount="0")
    if not record.is_balance_paid:
        record = replace(record, is_balance_paid=UNPAID)
    _check_paid_flag(record)
    return recompute_derived_fields(record)


class RecordService:
    """Entry, edit and reporting over transport records"""

    def __init__(self, db: Session):
        self.db = db
        self.records = TransportRecordRepository(db)
        self.allocations = PaymentAllocationRepository(db)
        self.options = OptionService(db)

    def preview(self, data: Dict[str, Any]) -> TransportRecord:
        """Derived fields for a draft, without saving anything"""
        return build_record(data)

    def create(self, data: Dict[str, Any]) -> TransportRecord:
        """
        Save a new record.

        Serial number defaults to the number of existing records + 1. Truck,
        transport and destination are remembered as input suggestions.
        """
        record = build_record(data)
        if not record.transport_company_name:
            raise ValidationError("Transport company name is required")

        with transaction(self.db):
            if not record.serial_number:
                record = replace(record, serial_number=str(self.records.count() + 1))
            created = self.records.create(record)
            self.options.remember_from_record(created)

        records_created_counter.inc()
        logger.info(
            "Transport record created",
            extra={"record_id": created.id, "serial_number": created.serial_number},
        )
        return created

    def update(self, record_id: str, changes: Dict[str, Any], expected_version: Optional[int] = None) -> TransportRecord:
        """Edit raw fields of a record; derived fields are recomputed from the result"""
        with transaction(self.db):
            current = self.records.get(record_id)
            edited = build_record(changes, base=current)
            updated = self.records.update(edited, expected_version=expected_version)

        logger.info("Transport record updated", extra={"record_id": record_id, "fields": sorted(changes)})
        return updated

    def delete(self, record_id: str) -> None:
        """Delete unconditionally; its lump-sum allocations stay on file without the record link"""
        with transaction(self.db):
            detached = self.allocations.detach_record(record_id)
            self.records.delete(record_id)

        logger.info(
            "Transport record deleted",
            extra={"record_id": record_id, "allocations_detached": detached},
        )

    def get(self, record_id: str) -> TransportRecord:
        return self.records.get(record_id)

    def list(
        self,
        search: str = "",
        status: StatusFilter = StatusFilter.ALL,
        date_text: str = "",
    ) -> List[TransportRecord]:
        return filter_records(self.records.list_records(), search=search, status=status, date_text=date_text)

    def company_summaries(self, sort: bool = True) -> List[CompanySummary]:
        summaries = summarize_outstanding(self.records.list_records(newest_first=False))
        return sort_by_outstanding(summaries) if sort else summaries

    def dashboard(self) -> DashboardStats:
        return dashboard_stats(self.records.list_records(), recent_limit=settings.dashboard_recent_limit)
