from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Uuid, Enum as SQLEnum
from app.database import Base
from app.core.permissions import Role


class Message(Base):
    """A chat entry on a ticket. Integer ids double as the insertion order."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Uuid, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    sender_name = Column(String(200), nullable=False)
    sender_role = Column(SQLEnum(Role, values_callable=lambda e: [m.value for m in e]), nullable=False)
    message = Column(Text, nullable=False)
    edited = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime)
