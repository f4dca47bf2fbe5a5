"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from bilty_ledger.infrastructure.database.session import get_db
from bilty_ledger.services.options import OptionService
from bilty_ledger.services.payments import PaymentService
from bilty_ledger.services.records import RecordService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_record_service(db: Session = Depends(get_db)) -> RecordService:
    return RecordService(db)


def get_payment_service(request: Request, db: Session = Depends(get_db)) -> PaymentService:
    """Payment service tagged with the request ID for its log lines"""
    return PaymentService(db, request_id=get_request_id(request))


def get_option_service(db: Session = Depends(get_db)) -> OptionService:
    return OptionService(db)
