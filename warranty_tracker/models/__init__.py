from warranty_tracker.models.agent_log import AgentLog
from warranty_tracker.models.base import Base, TimestampMixin
from warranty_tracker.models.manager_action import ManagerAction
from warranty_tracker.models.product import Product
from warranty_tracker.models.purchase import Purchase
from warranty_tracker.models.service_appointment import ServiceAppointment
from warranty_tracker.models.ticket import Ticket
from warranty_tracker.models.user import User

__all__ = [
    "AgentLog",
    "Base",
    "TimestampMixin",
    "ManagerAction",
    "Product",
    "Purchase",
    "ServiceAppointment",
    "Ticket",
    "User",
]
