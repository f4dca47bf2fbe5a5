"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from bilty_ledger.domain.calculator import is_total_editable, rate_mode
from bilty_ledger.domain.models import (
    CompanySummary,
    DashboardStats,
    LumpSumPayment,
    PaymentAllocation,
    RateModeKind,
    TransportRecord,
)


class TransportRecordFields(BaseModel):
    """Operator-entered fields; anything left out keeps its current value"""

    serial_number: Optional[str] = None
    bilty_number: Optional[str] = None
    truck_number: Optional[str] = None
    transport_company_name: Optional[str] = None
    destination: Optional[str] = None
    sms_date: Optional[str] = None
    lr_date: Optional[str] = None
    advance_date: Optional[str] = None
    balance_paid_date: Optional[str] = None
    date_of_reach: Optional[str] = None
    date_of_unload: Optional[str] = None
    courier_date: Optional[str] = None
    weight: Optional[str] = None
    rate: Optional[str] = None
    total: Optional[str] = None
    bilty_charge: Optional[str] = None
    advance: Optional[str] = None
    commission: Optional[str] = None
    balance_paid_amount: Optional[str] = None
    lump_sum_allocated_amount: Optional[str] = None
    holding_charge_per_day: Optional[str] = None
    is_balance_paid: Optional[str] = Field(None, pattern="^(YES|NO|yes|no)$")


class TransportRecordUpdate(TransportRecordFields):
    """PUT body; version guards against overwriting someone else's edit"""

    version: Optional[int] = Field(None, ge=1)


class TransportRecordResponse(BaseModel):
    id: Optional[str] = None
    serial_number: str
    bilty_number: str
    truck_number: str
    transport_company_name: str
    destination: str
    sms_date: str
    lr_date: str
    advance_date: str
    balance_paid_date: str
    date_of_reach: str
    date_of_unload: str
    courier_date: str
    weight: str
    rate: str
    total: str
    bilty_charge: str
    freight_amount: str
    advance: str
    commission: str
    balance_paid_amount: str
    lump_sum_allocated_amount: str
    net_amount: str
    holding_charge_per_day: str
    days_in_hold: str
    total_holding_amount: str
    is_balance_paid: str
    rate_mode: RateModeKind
    total_editable: bool
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, record: TransportRecord) -> "TransportRecordResponse":
        data = {name: getattr(record, name) for name in cls.model_fields if hasattr(record, name)}
        return cls(
            **data,
            rate_mode=rate_mode(record).kind,
            total_editable=is_total_editable(record),
        )


class RecordListResponse(BaseModel):
    count: int
    records: List[TransportRecordResponse]


class CompanyPaymentRequest(BaseModel):
    """Request body for POST /v1/payments/company"""

    company_name: str = Field(..., min_length=1, description="Transport company to pay")
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2, description="Payment amount")
    payment_date: str = Field(..., min_length=8, description="DD-MM-YYYY or YYYY-MM-DD")


class CompanyPaymentResponse(BaseModel):
    company_name: str
    applied_total: Decimal
    unallocated_remainder: Decimal
    updated_records: List[TransportRecordResponse]


class LumpSumCreate(BaseModel):
    company_name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    date_received: str = Field(..., min_length=8)
    notes: str = ""


class LumpSumUpdate(BaseModel):
    company_name: Optional[str] = None
    date_received: Optional[str] = None
    notes: Optional[str] = None
    remaining_balance: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    version: Optional[int] = Field(None, ge=1)


class LumpSumResponse(BaseModel):
    id: str
    company_name: str
    amount: Decimal
    remaining_balance: Decimal
    allocated_total: Decimal
    date_received: str
    notes: str
    version: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, payment: LumpSumPayment) -> "LumpSumResponse":
        return cls(
            id=payment.id,
            company_name=payment.company_name,
            amount=payment.amount,
            remaining_balance=payment.remaining_balance,
            allocated_total=payment.allocated_total,
            date_received=payment.date_received,
            notes=payment.notes,
            version=payment.version,
            created_at=payment.created_at,
        )


class AllocationItem(BaseModel):
    record_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., max_digits=14, decimal_places=2)


class LumpSumAllocationRequest(BaseModel):
    allocations: List[AllocationItem]
    allocation_date: Optional[str] = None


class AllocationResponse(BaseModel):
    id: str
    lump_sum_payment_id: str
    transport_record_id: Optional[str] = None
    allocated_amount: Decimal
    allocation_date: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, allocation: PaymentAllocation) -> "AllocationResponse":
        return cls(
            id=allocation.id,
            lump_sum_payment_id=allocation.lump_sum_payment_id,
            transport_record_id=allocation.transport_record_id,
            allocated_amount=allocation.allocated_amount,
            allocation_date=allocation.allocation_date,
            created_at=allocation.created_at,
        )


class LumpSumAllocationResponse(BaseModel):
    payment: LumpSumResponse
    allocated_total: Decimal
    allocations: List[AllocationResponse]
    updated_records: List[TransportRecordResponse]


class CompanySummaryResponse(BaseModel):
    company_name: str
    outstanding: Decimal
    total_records: int
    paid_records: int
    pending_records: int

    @classmethod
    def from_domain(cls, summary: CompanySummary) -> "CompanySummaryResponse":
        return cls(
            company_name=summary.company_name,
            outstanding=summary.outstanding,
            total_records=summary.total_records,
            paid_records=summary.paid_records,
            pending_records=summary.pending_records,
        )


class OutstandingResponse(BaseModel):
    total_outstanding: Decimal
    companies: List[CompanySummaryResponse]


class DashboardResponse(BaseModel):
    total_records: int
    total_amount: Decimal
    paid_amount: Decimal
    unpaid_amount: Decimal
    unique_trucks: int
    unique_transports: int
    unique_destinations: int
    average_amount: Decimal
    paid_percentage: float
    recent_records: List[TransportRecordResponse]

    @classmethod
    def from_domain(cls, stats: DashboardStats) -> "DashboardResponse":
        return cls(
            total_records=stats.total_records,
            total_amount=stats.total_amount,
            paid_amount=stats.paid_amount,
            unpaid_amount=stats.unpaid_amount,
            unique_trucks=stats.unique_trucks,
            unique_transports=stats.unique_transports,
            unique_destinations=stats.unique_destinations,
            average_amount=stats.average_amount,
            paid_percentage=stats.paid_percentage,
            recent_records=[TransportRecordResponse.from_domain(r) for r in stats.recent_records],
        )


class OptionCreate(BaseModel):
    value: str = Field(..., min_length=1)


class OptionsResponse(BaseModel):
    kind: str
    values: List[str]


class OptionSyncResponse(BaseModel):
    added: Dict[str, int]
