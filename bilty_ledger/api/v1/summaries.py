"""GET /v1/summaries/* - outstanding balances per company and dashboard totals"""

from decimal import Decimal
from fastapi import APIRouter, Depends

from bilty_ledger.api.dependencies import get_record_service
from bilty_ledger.api.v1.schemas import CompanySummaryResponse, DashboardResponse, OutstandingResponse
from bilty_ledger.services.records import RecordService

router = APIRouter()


@router.get("/summaries/outstanding", response_model=OutstandingResponse)
def outstanding_by_company(service: RecordService = Depends(get_record_service)):
    """
    Per-company outstanding amounts, highest debt first.

    Returns:
        Every company with at least one record, fully paid ones included
    """
    summaries = service.company_summaries(sort=True)
    return OutstandingResponse(
        total_outstanding=sum((s.outstanding for s in summaries), Decimal("0")),
        companies=[CompanySummaryResponse.from_domain(s) for s in summaries],
    )


@router.get("/summaries/dashboard", response_model=DashboardResponse)
def dashboard(service: RecordService = Depends(get_record_service)):
    return DashboardResponse.from_domain(service.dashboard())
