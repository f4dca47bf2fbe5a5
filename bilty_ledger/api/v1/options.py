"""Saved option endpoints - suggestions for truck, transport and destination inputs"""

from fastapi import APIRouter, Depends

from bilty_ledger.api.dependencies import get_option_service
from bilty_ledger.api.v1.schemas import OptionCreate, OptionsResponse, OptionSyncResponse
from bilty_ledger.infrastructure.database.repositories import OptionKind
from bilty_ledger.services.options import OptionService

router = APIRouter()


@router.post("/options/sync", response_model=OptionSyncResponse)
def sync_options(service: OptionService = Depends(get_option_service)):
    """Add any truck/transport/destination found on records but not yet saved"""
    return OptionSyncResponse(added=service.sync_from_records())


@router.get("/options/{kind}", response_model=OptionsResponse)
def list_options(kind: OptionKind, service: OptionService = Depends(get_option_service)):
    return OptionsResponse(kind=kind.value, values=service.list(kind))


@router.post("/options/{kind}", response_model=OptionsResponse, status_code=201)
def add_option(kind: OptionKind, body: OptionCreate, service: OptionService = Depends(get_option_service)):
    """Save a suggestion; 409 when it already exists"""
    service.add(kind, body.value)
    return OptionsResponse(kind=kind.value, values=service.list(kind))
