from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from warranty_tracker.schemas.ticket import (
    StageState,
    StatusInfo,
    TicketData,
    TicketStatus,
    TimelineStage,
    TrackedTicketOut,
)

STATUS_ORDER: tuple[TicketStatus, ...] = (
    TicketStatus.PENDING,
    TicketStatus.VALIDATED,
    TicketStatus.MANAGER_REVIEW,
    TicketStatus.APPROVED,
    TicketStatus.SCHEDULED,
)


@dataclass(frozen=True)
class StatusConfig:
    label: str
    color: str
    description: str


STATUS_CONFIG: dict[TicketStatus, StatusConfig] = {
    TicketStatus.PENDING: StatusConfig(
        label="Submitted",
        color="muted",
        description="Your warranty claim has been submitted and is awaiting initial processing.",
    ),
    TicketStatus.VALIDATED: StatusConfig(
        label="Under Review",
        color="info",
        description="Our automated system is extracting and validating your claim details.",
    ),
    TicketStatus.MANAGER_REVIEW: StatusConfig(
        label="Manager Review",
        color="warning",
        description="Your claim is being reviewed by our warranty team for approval.",
    ),
    TicketStatus.APPROVED: StatusConfig(
        label="Approved",
        color="success",
        description=(
            "Your warranty claim has been approved and service center "
            "assignment is in progress."
        ),
    ),
    TicketStatus.REJECTED: StatusConfig(
        label="Rejected",
        color="destructive",
        description="Your warranty claim has been rejected. Please review the details below.",
    ),
    TicketStatus.SCHEDULED: StatusConfig(
        label="Service Scheduled",
        color="primary",
        description=(
            "Your service appointment has been scheduled. "
            "Please check the details below."
        ),
    ),
}


def get_status_config(status: TicketStatus | str) -> StatusConfig:
    return STATUS_CONFIG[TicketStatus(status)]


def get_status_info(status: TicketStatus | str) -> StatusInfo:
    config = get_status_config(status)
    return StatusInfo(label=config.label, color=config.color, description=config.description)


def get_stage_state(current_status: TicketStatus, stage_status: TicketStatus) -> StageState:
    if current_status == TicketStatus.REJECTED and stage_status == TicketStatus.MANAGER_REVIEW:
        return "rejected"
    stage_index = STATUS_ORDER.index(stage_status)
    # Rejected has no slot in the order; it sorts before every stage.
    current_index = (
        STATUS_ORDER.index(current_status) if current_status in STATUS_ORDER else -1
    )
    if current_index > stage_index:
        return "completed"
    if current_index == stage_index:
        return "current"
    return "pending"


def generate_timeline_stages(
    current_status: TicketStatus | str,
    created_at: datetime,
    manager_action_date: datetime | None = None,
    appointment_date: datetime | None = None,
) -> list[TimelineStage]:
    """Project a ticket status onto the five display stages.

    Rejection is assumed to happen only at manager review: the manager
    review stage is marked rejected and every later stage stays pending.
    """
    current = TicketStatus(current_status)
    stages = [
        TimelineStage(
            id="submitted",
            label="Submitted",
            state="completed",
            description="Warranty claim submitted",
            timestamp=created_at,
        ),
        TimelineStage(
            id="under_review",
            label="Under Review",
            state=get_stage_state(current, TicketStatus.VALIDATED),
            description="Automated validation in progress",
        ),
        TimelineStage(
            id="manager_review",
            label="Manager Review",
            state=get_stage_state(current, TicketStatus.MANAGER_REVIEW),
            description="Awaiting manager approval",
        ),
        TimelineStage(
            id="approved",
            label="Approved",
            state=get_stage_state(current, TicketStatus.APPROVED),
            description="Claim approved, scheduling service",
            timestamp=manager_action_date,
        ),
        TimelineStage(
            id="scheduled",
            label="Service Scheduled",
            state=get_stage_state(current, TicketStatus.SCHEDULED),
            description="Service appointment confirmed",
            timestamp=appointment_date,
        ),
    ]

    if current == TicketStatus.REJECTED:
        rejected_index = next(
            index for index, stage in enumerate(stages) if stage.id == "manager_review"
        )
        stages[rejected_index] = stages[rejected_index].model_copy(
            update={
                "state": "rejected",
                "description": "Claim rejected by manager",
                "timestamp": manager_action_date,
            }
        )
        for index in range(rejected_index + 1, len(stages)):
            stages[index] = stages[index].model_copy(update={"state": "pending"})

    return stages


def project_ticket_timeline(ticket: TicketData) -> list[TimelineStage]:
    return generate_timeline_stages(
        ticket.status,
        ticket.created_at,
        ticket.manager_action.action_date if ticket.manager_action else None,
        ticket.appointment.appointment_date if ticket.appointment else None,
    )


def build_tracked_ticket(ticket: TicketData) -> TrackedTicketOut:
    return TrackedTicketOut(
        **ticket.model_dump(),
        timeline=project_ticket_timeline(ticket),
        status_info=get_status_info(ticket.status),
    )
