"""Record listing endpoints used to populate the route-planning selectors."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, status

from ...data.records_repository import RecordsRepository
from ...schemas.records import (
    LodgingListResponse,
    LodgingModel,
    VehicleListResponse,
    WorkOrderListResponse,
    WorkSiteListResponse,
    WorkSiteModel,
)
from ...schemas.routing import VehicleModel, WorkOrderModel

router = APIRouter(prefix="/records", tags=["records"])


def _upstream_error(label: str, exc: Exception) -> HTTPException:
    logging.warning(f"Failed to load {label}: {exc}")
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Could not load {label}: {exc}",
    )


@router.get("/lodgings", response_model=LodgingListResponse)
def list_lodgings() -> LodgingListResponse:
    try:
        lodgings = RecordsRepository().list_lodgings()
    except (ConnectionError, ValueError) as exc:
        raise _upstream_error("lodgings", exc) from exc
    items = [
        LodgingModel(
            id=lodging.id,
            street=lodging.street,
            number=lodging.number,
            neighborhood=lodging.neighborhood,
            city=lodging.city,
            postal_code=lodging.postal_code,
            residents=lodging.residents,
            display_name=lodging.display_name,
        )
        for lodging in lodgings
    ]
    return LodgingListResponse(items=items, total=len(items))


@router.get("/worksites", response_model=WorkSiteListResponse)
def list_worksites() -> WorkSiteListResponse:
    try:
        worksites = RecordsRepository().list_worksites()
    except (ConnectionError, ValueError) as exc:
        raise _upstream_error("work sites", exc) from exc
    items = [WorkSiteModel(**asdict(worksite), display_name=worksite.display_name) for worksite in worksites]
    return WorkSiteListResponse(items=items, total=len(items))


@router.get("/work-orders", response_model=WorkOrderListResponse)
def list_work_orders() -> WorkOrderListResponse:
    try:
        work_orders = RecordsRepository().list_work_orders()
    except (ConnectionError, ValueError) as exc:
        raise _upstream_error("work orders", exc) from exc
    items = [WorkOrderModel(**asdict(work_order)) for work_order in work_orders]
    return WorkOrderListResponse(items=items, total=len(items))


@router.get("/vehicles", response_model=VehicleListResponse)
def list_vehicles() -> VehicleListResponse:
    try:
        vehicles = RecordsRepository().list_vehicles()
    except (ConnectionError, ValueError) as exc:
        raise _upstream_error("vehicles", exc) from exc
    items = [VehicleModel(**asdict(vehicle)) for vehicle in vehicles]
    return VehicleListResponse(items=items, total=len(items))
