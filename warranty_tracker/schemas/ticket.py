from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict


class TicketStatus(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    MANAGER_REVIEW = "manager_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SCHEDULED = "scheduled"


StageState = Literal["completed", "current", "pending", "rejected"]


class UserData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None = None


class ProductData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand: str | None = None
    model: str | None = None
    warranty_months: int | None = None


class PurchaseData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    purchase_date: datetime
    invoice_file_url: str | None = None


class ManagerActionData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    approved: bool
    remarks: str | None = None
    action_date: datetime


class ServiceAppointmentData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_center: str | None = None
    appointment_date: datetime


class TicketData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tracking_code: uuid.UUID
    status: TicketStatus
    issue_type: str
    description: str | None = None
    created_at: datetime
    user: UserData
    product: ProductData
    purchase: PurchaseData
    manager_action: ManagerActionData | None = None
    appointment: ServiceAppointmentData | None = None


class TimelineStage(BaseModel):
    id: str
    label: str
    state: StageState
    description: str | None = None
    timestamp: datetime | None = None


class StatusInfo(BaseModel):
    label: str
    color: str
    description: str


class TrackedTicketOut(TicketData):
    """Public lookup payload: sanitised ticket plus its derived display data."""

    timeline: list[TimelineStage]
    status_info: StatusInfo


class TrackingCodeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tracking_code: uuid.UUID
    status: str | None = None
    created_at: datetime
    issue_type: str
