"""Saved input suggestions: truck numbers, transport names, destinations"""

import logging
from typing import Dict, List
from sqlalchemy.orm import Session

from bilty_ledger.domain.exceptions import ValidationError
from bilty_ledger.domain.models import TransportRecord
from bilty_ledger.infrastructure.database.repositories import (
    OptionKind,
    SavedOptionRepository,
    TransportRecordRepository,
)
from bilty_ledger.services.unit_of_work import transaction

logger = logging.getLogger(__name__)

_RECORD_ATTRIBUTE = {
    OptionKind.TRUCKS: "truck_number",
    OptionKind.TRANSPORTS: "transport_company_name",
    OptionKind.DESTINATIONS: "destination",
}


class OptionService:
    def __init__(self, db: Session):
        self.db = db
        self.options = SavedOptionRepository(db)

    def list(self, kind: OptionKind) -> List[str]:
        return self.options.list_values(kind)

    def add(self, kind: OptionKind, value: str) -> str:
        """Save one suggestion; DuplicateOptionError if it is already there"""
        if not value or not value.strip():
            raise ValidationError("Option value is required")
        with transaction(self.db):
            saved = self.options.add(kind, value)
        return saved

    def remember_from_record(self, record: TransportRecord) -> None:
        """Save the record's truck/transport/destination if new (caller commits)"""
        for kind, attribute in _RECORD_ATTRIBUTE.items():
            value = (getattr(record, attribute) or "").strip().upper()
            if value and not self.options.exists(kind, value):
                self.options.add(kind, value)

    def sync_from_records(self) -> Dict[str, int]:
        """Backfill suggestions from every stored record; returns how many were added per kind"""
        added = {kind.value: 0 for kind in OptionKind}
        records = TransportRecordRepository(self.db).list_records(newest_first=False)

        with transaction(self.db):
            for kind, attribute in _RECORD_ATTRIBUTE.items():
                seen = set()
                for record in records:
                    value = (getattr(record, attribute) or "").strip().upper()
                    if not value or value in seen:
                        continue
                    seen.add(value)
                    if not self.options.exists(kind, value):
                        self.options.add(kind, value)
                        added[kind.value] += 1

        logger.info("Saved options synced from records", extra={"added": added})
        return added
