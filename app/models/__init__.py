from app.models.user import User
from app.models.ticket import Ticket, TicketStatus, TicketPriority
from app.models.message import Message
from app.models.review import Review
from app.models.blog import BlogPost

__all__ = [
    "User",
    "Ticket",
    "TicketStatus",
    "TicketPriority",
    "Message",
    "Review",
    "BlogPost",
]
