"""Record listing schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from .routing import VehicleModel, WorkOrderModel


class LodgingModel(BaseModel):
    id: int
    street: str
    number: str
    neighborhood: str
    city: str
    postal_code: str
    residents: Optional[int] = None
    display_name: str


class WorkSiteModel(BaseModel):
    id: int
    code: str
    responsible: str
    street: str
    number: str
    neighborhood: str
    city: str
    postal_code: str
    state: Optional[str] = None
    complement: Optional[str] = None
    status: str
    display_name: str


class LodgingListResponse(BaseModel):
    items: List[LodgingModel]
    total: int


class WorkSiteListResponse(BaseModel):
    items: List[WorkSiteModel]
    total: int


class WorkOrderListResponse(BaseModel):
    items: List[WorkOrderModel]
    total: int


class VehicleListResponse(BaseModel):
    items: List[VehicleModel]
    total: int
