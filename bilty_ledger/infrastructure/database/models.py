"""SQLAlchemy ORM models for the record store"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Numeric, DateTime, Integer, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransportRecordRow(Base):
    """Bilty / consignment record; free-form amounts are kept as entered"""

    __tablename__ = "transport_record"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_seq = Column(Integer, nullable=False, index=True)  # insertion order, oldest first
    serial_number = Column(Text, nullable=False, default="")
    bilty_number = Column(Text, nullable=False, default="")

    truck_number = Column(Text, nullable=False, default="", index=True)
    transport_company_name = Column(Text, nullable=False, default="", index=True)
    destination = Column(Text, nullable=False, default="")

    sms_date = Column(String(10), nullable=False, default="")
    lr_date = Column(String(10), nullable=False, default="")
    advance_date = Column(String(10), nullable=False, default="")
    balance_paid_date = Column(String(10), nullable=False, default="")
    date_of_reach = Column(String(10), nullable=False, default="")
    date_of_unload = Column(String(10), nullable=False, default="")
    courier_date = Column(String(10), nullable=False, default="")

    weight = Column(Text, nullable=False, default="")
    rate = Column(Text, nullable=False, default="")
    total = Column(Text, nullable=False, default="")
    bilty_charge = Column(Text, nullable=False, default="")
    freight_amount = Column(Text, nullable=False, default="")
    advance = Column(Text, nullable=False, default="")
    commission = Column(Text, nullable=False, default="")
    balance_paid_amount = Column(Text, nullable=False, default="")
    lump_sum_allocated_amount = Column(Text, nullable=False, default="0")
    net_amount = Column(Text, nullable=False, default="")

    holding_charge_per_day = Column(Text, nullable=False, default="")
    days_in_hold = Column(Text, nullable=False, default="")
    total_holding_amount = Column(Text, nullable=False, default="")

    is_balance_paid = Column(String(3), nullable=False, default="NO")

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    __mapper_args__ = {"version_id_col": version}


class LumpSumPaymentRow(Base):
    """Bulk payment waiting to be spread across records"""

    __tablename__ = "lump_sum_payment"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_name = Column(Text, nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    remaining_balance = Column(Numeric(14, 2), nullable=False)
    date_received = Column(String(10), nullable=False)
    notes = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    allocations = relationship("PaymentAllocationRow", back_populates="lump_sum_payment")

    __mapper_args__ = {"version_id_col": version}


class PaymentAllocationRow(Base):
    """Join row: part of a lump sum applied to one record"""

    __tablename__ = "payment_allocation"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entry_seq = Column(Integer, nullable=False, index=True)  # insertion order
    lump_sum_payment_id = Column(
        UUID(as_uuid=True), ForeignKey("lump_sum_payment.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # Non-owning: deleting the record leaves the allocation with a NULL reference
    transport_record_id = Column(
        UUID(as_uuid=True), ForeignKey("transport_record.id", ondelete="SET NULL"), nullable=True, index=True
    )
    allocated_amount = Column(Numeric(14, 2), nullable=False)
    allocation_date = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    lump_sum_payment = relationship("LumpSumPaymentRow", back_populates="allocations")


class SavedOptionRow(Base):
    """Input suggestion (truck number, transport name or destination)"""

    __tablename__ = "saved_option"
    __table_args__ = (UniqueConstraint("kind", "value", name="uq_saved_option_kind_value"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    kind = Column(String(16), nullable=False)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
