"""Payment endpoints - company payments and lump-sum allocation"""

from fastapi import APIRouter, Depends, Query
from starlette.responses import Response

from bilty_ledger.api.dependencies import get_payment_service
from bilty_ledger.api.v1.schemas import (
    AllocationResponse,
    CompanyPaymentRequest,
    CompanyPaymentResponse,
    LumpSumAllocationRequest,
    LumpSumAllocationResponse,
    LumpSumCreate,
    LumpSumResponse,
    LumpSumUpdate,
    TransportRecordResponse,
)
from bilty_ledger.domain.models import AllocationRequest
from bilty_ledger.services.payments import PaymentService

router = APIRouter()


@router.post("/payments/company", response_model=CompanyPaymentResponse)
def pay_company(
    body: CompanyPaymentRequest,
    service: PaymentService = Depends(get_payment_service),
):
    """
    Apply a payment to a company's unpaid records, oldest first.

    Any amount left after every unpaid record is covered is reported back as
    unallocated_remainder.
    """
    result = service.allocate(body.company_name, body.amount, body.payment_date)
    return CompanyPaymentResponse(
        company_name=body.company_name,
        applied_total=result.applied_total,
        unallocated_remainder=result.unallocated_remainder,
        updated_records=[TransportRecordResponse.from_domain(r) for r in result.updated_records],
    )


@router.get("/lump-sums", response_model=list[LumpSumResponse])
def list_lump_sums(
    available_only: bool = Query(False, description="Only payments with balance left"),
    service: PaymentService = Depends(get_payment_service),
):
    return [LumpSumResponse.from_domain(p) for p in service.list_lump_sums(available_only=available_only)]


@router.post("/lump-sums", response_model=LumpSumResponse, status_code=201)
def create_lump_sum(body: LumpSumCreate, service: PaymentService = Depends(get_payment_service)):
    payment = service.create_lump_sum(body.company_name, body.amount, body.date_received, body.notes)
    return LumpSumResponse.from_domain(payment)


@router.get("/lump-sums/{payment_id}", response_model=LumpSumResponse)
def get_lump_sum(payment_id: str, service: PaymentService = Depends(get_payment_service)):
    return LumpSumResponse.from_domain(service.get_lump_sum(payment_id))


@router.put("/lump-sums/{payment_id}", response_model=LumpSumResponse)
def update_lump_sum(
    payment_id: str,
    body: LumpSumUpdate,
    service: PaymentService = Depends(get_payment_service),
):
    payment = service.update_lump_sum(
        payment_id,
        company_name=body.company_name,
        date_received=body.date_received,
        notes=body.notes,
        remaining_balance=body.remaining_balance,
        expected_version=body.version,
    )
    return LumpSumResponse.from_domain(payment)


@router.delete("/lump-sums/{payment_id}", status_code=204)
def delete_lump_sum(payment_id: str, service: PaymentService = Depends(get_payment_service)):
    service.delete_lump_sum(payment_id)
    return Response(status_code=204)


@router.post("/lump-sums/{payment_id}/allocations", response_model=LumpSumAllocationResponse)
def allocate_lump_sum(
    payment_id: str,
    body: LumpSumAllocationRequest,
    service: PaymentService = Depends(get_payment_service),
):
    """Spread part of a lump sum across chosen records (all or nothing)"""
    requests = [AllocationRequest(record_id=item.record_id, amount=item.amount) for item in body.allocations]
    outcome = service.allocate_lump_sum(payment_id, requests, allocation_date=body.allocation_date)
    return LumpSumAllocationResponse(
        payment=LumpSumResponse.from_domain(outcome.payment),
        allocated_total=outcome.allocated_total,
        allocations=[AllocationResponse.from_domain(a) for a in outcome.allocations],
        updated_records=[TransportRecordResponse.from_domain(r) for r in outcome.updated_records],
    )


@router.get("/lump-sums/{payment_id}/allocations", response_model=list[AllocationResponse])
def lump_sum_allocations(payment_id: str, service: PaymentService = Depends(get_payment_service)):
    return [AllocationResponse.from_domain(a) for a in service.allocations_for_lump_sum(payment_id)]
