"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from bilty_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_allocation(
    company_name: str,
    payment_amount: Decimal,
    records_updated: int,
    unallocated_remainder: Decimal,
    request_id: str | None = None,
) -> None:
    """Log the outcome of a company payment"""
    logging.getLogger("bilty_ledger.payments").info(
        "Company payment allocated",
        extra={
            "request_id": request_id,
            "step": "company_allocation_complete",
            "company_name": company_name,
            "payment_amount": str(payment_amount),
            "records_updated": records_updated,
            "unallocated_remainder": str(unallocated_remainder),
            "overpaid": unallocated_remainder > 0,
        },
    )


def log_lump_sum_allocation(
    lump_sum_payment_id: str,
    allocated_total: Decimal,
    allocation_count: int,
    remaining_balance: Decimal,
    request_id: str | None = None,
) -> None:
    """Log a processed batch of lump-sum allocations"""
    logging.getLogger("bilty_ledger.payments").info(
        "Lump sum allocations processed",
        extra={
            "request_id": request_id,
            "step": "lump_sum_allocation_complete",
            "lump_sum_payment_id": lump_sum_payment_id,
            "allocated_total": str(allocated_total),
            "allocation_count": allocation_count,
            "remaining_balance": str(remaining_balance),
        },
    )
