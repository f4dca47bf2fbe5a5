"""Transport record endpoints - entry, edit, delete, listing, CSV export"""

from fastapi import APIRouter, Depends, Query
from starlette.responses import Response

from bilty_ledger.api.dependencies import get_payment_service, get_record_service
from bilty_ledger.api.v1.schemas import (
    AllocationResponse,
    RecordListResponse,
    TransportRecordFields,
    TransportRecordResponse,
    TransportRecordUpdate,
)
from bilty_ledger.config import settings
from bilty_ledger.domain.filters import StatusFilter
from bilty_ledger.services.payments import PaymentService
from bilty_ledger.services.records import RecordService
from bilty_ledger.utils.export import export_filename, records_to_csv

router = APIRouter()


@router.get("/records", response_model=RecordListResponse)
def list_records(
    search: str = Query("", description="Matches truck, transport, destination or bilty number"),
    status: StatusFilter = Query(StatusFilter.ALL),
    date: str = Query("", description="Substring of LR or SMS date"),
    service: RecordService = Depends(get_record_service),
):
    """List records, newest first"""
    records = service.list(search=search, status=status, date_text=date)
    return RecordListResponse(
        count=len(records),
        records=[TransportRecordResponse.from_domain(r) for r in records],
    )


@router.get("/records/export.csv")
def export_records(
    search: str = Query(""),
    status: StatusFilter = Query(StatusFilter.ALL),
    date: str = Query(""),
    service: RecordService = Depends(get_record_service),
):
    """Download the (filtered) records as CSV"""
    records = service.list(search=search, status=status, date_text=date)
    filename = export_filename(settings.export_filename_prefix)
    return Response(
        content=records_to_csv(records),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/records/preview", response_model=TransportRecordResponse)
def preview_record(
    body: TransportRecordFields,
    service: RecordService = Depends(get_record_service),
):
    """
    Recalculate derived fields for a draft without saving it.

    Called on every field change by the entry form.
    """
    return TransportRecordResponse.from_domain(service.preview(body.model_dump(exclude_none=True)))


@router.post("/records", response_model=TransportRecordResponse, status_code=201)
def create_record(
    body: TransportRecordFields,
    service: RecordService = Depends(get_record_service),
):
    record = service.create(body.model_dump(exclude_none=True))
    return TransportRecordResponse.from_domain(record)


@router.get("/records/{record_id}", response_model=TransportRecordResponse)
def get_record(record_id: str, service: RecordService = Depends(get_record_service)):
    return TransportRecordResponse.from_domain(service.get(record_id))


@router.put("/records/{record_id}", response_model=TransportRecordResponse)
def update_record(
    record_id: str,
    body: TransportRecordUpdate,
    service: RecordService = Depends(get_record_service),
):
    changes = body.model_dump(exclude_none=True, exclude={"version"})
    record = service.update(record_id, changes, expected_version=body.version)
    return TransportRecordResponse.from_domain(record)


@router.delete("/records/{record_id}", status_code=204)
def delete_record(record_id: str, service: RecordService = Depends(get_record_service)):
    service.delete(record_id)
    return Response(status_code=204)


@router.get("/records/{record_id}/allocations", response_model=list[AllocationResponse])
def record_allocations(record_id: str, service: PaymentService = Depends(get_payment_service)):
    """Lump-sum allocations applied to one record"""
    return [AllocationResponse.from_domain(a) for a in service.allocations_for_record(record_id)]
