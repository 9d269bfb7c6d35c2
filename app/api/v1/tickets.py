from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID
from app.api.deps import get_current_user, get_ticket_service
from app.models.user import User
from app.models.ticket import TicketStatus, TicketPriority
from app.schemas.ticket import TicketCreate, TicketUpdate, TicketResponse
from app.services.ticket_service import TicketService

router = APIRouter()


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket_data: TicketCreate,
    current_user: User = Depends(get_current_user),
    tickets: TicketService = Depends(get_ticket_service),
):
    """Open a support ticket; requester details come from the token, not the body"""
    return await tickets.create(
        current_user,
        title=ticket_data.title,
        description=ticket_data.description,
        priority=ticket_data.priority,
    )


@router.get("", response_model=List[TicketResponse])
async def list_tickets(
    customer_id: Optional[UUID] = Query(None),
    assigned_agent_id: Optional[UUID] = Query(None),
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    priority: Optional[TicketPriority] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    tickets: TicketService = Depends(get_ticket_service),
):
    """List tickets. Customers always get their own; agents and admins may filter."""
    return await tickets.list(
        current_user,
        customer_id=customer_id,
        assigned_agent_id=assigned_agent_id,
        status=status_filter,
        priority=priority,
        search=search,
    )


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(
    ticket_id: UUID,
    current_user: User = Depends(get_current_user),
    tickets: TicketService = Depends(get_ticket_service),
):
    return await tickets.get(ticket_id, current_user)


@router.put("/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: UUID,
    ticket_data: TicketUpdate,
    current_user: User = Depends(get_current_user),
    tickets: TicketService = Depends(get_ticket_service),
):
    """Change status, priority or assignment"""
    changes = {}
    if "assigned_agent_id" in ticket_data.model_fields_set:
        changes["assigned_agent_id"] = ticket_data.assigned_agent_id
    return await tickets.update(
        ticket_id,
        current_user,
        status=ticket_data.status,
        priority=ticket_data.priority,
        **changes,
    )


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ticket(
    ticket_id: UUID,
    current_user: User = Depends(get_current_user),
    tickets: TicketService = Depends(get_ticket_service),
):
    """Delete a ticket together with its chat history and reviews"""
    await tickets.delete(ticket_id, current_user)
