"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Union

PAID = "YES"
UNPAID = "NO"


@dataclass
class TransportRecord:
    """One freight consignment (bilty) and its running account with a transport company"""

    id: Optional[str] = None
    serial_number: str = ""
    bilty_number: str = ""

    truck_number: str = ""
    transport_company_name: str = ""
    destination: str = ""

    # Display form DD-MM-YYYY
    sms_date: str = ""
    lr_date: str = ""
    advance_date: str = ""
    balance_paid_date: str = ""
    date_of_reach: str = ""
    date_of_unload: str = ""
    courier_date: str = ""

    weight: str = ""
    rate: str = ""  # contains "FIX" when the total is entered by hand

    total: str = ""
    bilty_charge: str = ""
    freight_amount: str = ""
    advance: str = ""
    commission: str = ""
    balance_paid_amount: str = ""
    lump_sum_allocated_amount: str = "0"
    net_amount: str = ""

    holding_charge_per_day: str = ""
    days_in_hold: str = ""
    total_holding_amount: str = ""

    is_balance_paid: str = UNPAID

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 1

    @property
    def is_paid(self) -> bool:
        return self.is_balance_paid == PAID


# Fields an operator types in; everything else is derived or store-managed
RAW_FIELDS = (
    "serial_number",
    "bilty_number",
    "truck_number",
    "transport_company_name",
    "destination",
    "sms_date",
    "lr_date",
    "advance_date",
    "balance_paid_date",
    "date_of_reach",
    "date_of_unload",
    "courier_date",
    "weight",
    "rate",
    "total",
    "bilty_charge",
    "advance",
    "commission",
    "balance_paid_amount",
    "lump_sum_allocated_amount",
    "holding_charge_per_day",
    "is_balance_paid",
)

DERIVED_FIELDS = (
    "freight_amount",
    "days_in_hold",
    "total_holding_amount",
    "net_amount",
)


class RateModeKind(str, Enum):
    """Whether a record's total is typed by the operator or computed from weight × rate"""

    FIXED = "FIXED"
    COMPUTED = "COMPUTED"


@dataclass(frozen=True)
class FixedRate:
    """Rate marked "FIX": the operator's total stands as entered"""

    kind: ClassVar[RateModeKind] = RateModeKind.FIXED
    manual_total: str


@dataclass(frozen=True)
class ComputedRate:
    """Total follows weight × rate whenever both are positive"""

    kind: ClassVar[RateModeKind] = RateModeKind.COMPUTED
    weight: Decimal
    rate: Decimal


RateMode = Union[FixedRate, ComputedRate]


@dataclass
class LumpSumPayment:
    """Bulk payment for a transport company, distributed by hand across records"""

    company_name: str
    amount: Decimal
    remaining_balance: Decimal
    date_received: str
    notes: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    version: int = 1

    @property
    def allocated_total(self) -> Decimal:
        return self.amount - self.remaining_balance


@dataclass
class PaymentAllocation:
    """One lump sum's contribution to one transport record"""

    lump_sum_payment_id: str
    transport_record_id: Optional[str]  # cleared when the record is deleted
    allocated_amount: Decimal
    allocation_date: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AllocationRequest:
    """Operator's instruction to move part of a lump sum onto a record"""

    record_id: str
    amount: Decimal


@dataclass
class AllocationResult:
    """Outcome of applying a company payment"""

    updated_records: List[TransportRecord] = field(default_factory=list)
    unallocated_remainder: Decimal = Decimal("0")
    applied_by_record: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def applied_total(self) -> Decimal:
        return sum(self.applied_by_record.values(), Decimal("0"))


@dataclass
class CompanySummary:
    """Outstanding position of one transport company"""

    company_name: str
    outstanding: Decimal = Decimal("0")
    total_records: int = 0
    paid_records: int = 0

    @property
    def pending_records(self) -> int:
        return self.total_records - self.paid_records


@dataclass
class DashboardStats:
    """Headline figures for the records dashboard"""

    total_records: int
    total_amount: Decimal
    paid_amount: Decimal
    unpaid_amount: Decimal
    unique_trucks: int
    unique_transports: int
    unique_destinations: int
    average_amount: Decimal
    paid_percentage: float
    recent_records: List[TransportRecord] = field(default_factory=list)
