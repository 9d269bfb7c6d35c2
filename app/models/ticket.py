from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Uuid, Enum as SQLEnum
from app.database import Base
import uuid
from enum import Enum


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "inprogress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


REVIEWABLE_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(SQLEnum(TicketStatus, values_callable=_enum_values), default=TicketStatus.OPEN, nullable=False)
    priority = Column(SQLEnum(TicketPriority, values_callable=_enum_values), default=TicketPriority.MEDIUM, nullable=False)

    # Requester and assignee names are snapshots taken at write time
    customer_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=False)
    assigned_agent_id = Column(Uuid, ForeignKey("users.id"), index=True)
    assigned_agent_name = Column(String(200))

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    resolved_at = Column(DateTime)
