"""CSV export of transport records"""

import csv
import io
from datetime import date
from typing import Iterable, List, Tuple

from bilty_ledger.domain.models import TransportRecord

# (header, attribute) in export column order
COLUMNS: List[Tuple[str, str]] = [
    ("SR NO", "serial_number"),
    ("SMS DATE", "sms_date"),
    ("LR DATE", "lr_date"),
    ("BILTY NO", "bilty_number"),
    ("TRUCK NO", "truck_number"),
    ("TRANSPORT", "transport_company_name"),
    ("DESTINATION", "destination"),
    ("WEIGHT", "weight"),
    ("RATE", "rate"),
    ("TOTAL", "total"),
    ("BILTY CHARGE", "bilty_charge"),
    ("FREIGHT AMOUNT", "freight_amount"),
    ("ADVANCE", "advance"),
    ("ADVANCE DATE", "advance_date"),
    ("COMMISSION", "commission"),
    ("BALANCE PAID AMOUNT", "balance_paid_amount"),
    ("BALANCE PAID DATE", "balance_paid_date"),
    ("LUMP SUM ALLOCATED AMOUNT", "lump_sum_allocated_amount"),
    ("NET AMOUNT", "net_amount"),
    ("IS BALANCE PAID", "is_balance_paid"),
    ("DATE OF REACH", "date_of_reach"),
    ("DATE OF UNLOAD", "date_of_unload"),
    ("DAYS IN HOLD", "days_in_hold"),
    ("HOLDING CHARGE", "holding_charge_per_day"),
    ("TOTAL HOLDING AMOUNT", "total_holding_amount"),
    ("COURIER DATE", "courier_date"),
    ("CREATED AT", "created_at"),
]


def _cell(record: TransportRecord, attribute: str) -> str:
    value = getattr(record, attribute)
    if value is None:
        return ""
    if attribute == "created_at":
        return value.strftime("%d-%m-%Y %H:%M:%S")
    return str(value)


def records_to_csv(records: Iterable[TransportRecord]) -> str:
    """Every field of every record, all cells quoted"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([header for header, _ in COLUMNS])
    for record in records:
        writer.writerow([_cell(record, attribute) for _, attribute in COLUMNS])
    return buffer.getvalue()


def export_filename(prefix: str, on: date | None = None) -> str:
    return f"{prefix}_{(on or date.today()).isoformat()}.csv"
