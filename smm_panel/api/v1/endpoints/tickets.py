from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.dependencies import get_current_user, require_client, require_staff
from smm_panel.models import Ticket, TicketMessage, TicketStatus, User, UserRole
from smm_panel.schemas.ticket import (
    TicketCreate,
    TicketDetail,
    TicketOut,
    TicketReply,
    TicketsResponse,
    TicketStatusUpdate,
)
from smm_panel.utils.pagination import check_paging, page_payload

router = APIRouter()


def _coerce_status(value: Optional[str]) -> Optional[TicketStatus]:
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    for member in TicketStatus:
        if raw.lower() == member.value or raw.upper() == member.name:
            return member
    raise HTTPException(status_code=400, detail="Invalid status")


def _ticket_out(ticket: Ticket, username: Optional[str] = None, email: Optional[str] = None) -> dict:
    return {
        "id": ticket.id,
        "user_id": ticket.user_id,
        "username": username,
        "email": email,
        "subject": ticket.subject,
        "status": ticket.status,
        "priority": ticket.priority,
        "created_at": ticket.created_at,
        "updated_at": ticket.updated_at,
    }


def _load_ticket(db: Session, ticket_id: int, user: User) -> Ticket:
    query = db.query(Ticket).filter(Ticket.id == ticket_id)
    if user.role == UserRole.CLIENT:
        query = query.filter(Ticket.user_id == user.id)
    ticket = query.first()
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return ticket


@router.get("/", response_model=TicketsResponse)
def list_tickets(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
):
    check_paging(page, page_size)
    status_enum = _coerce_status(status)

    query = db.query(Ticket, User.username, User.email).join(User, Ticket.user_id == User.id)
    if user.role == UserRole.CLIENT:
        query = query.filter(Ticket.user_id == user.id)
    if status_enum is not None:
        query = query.filter(Ticket.status == status_enum)

    total = query.count()
    rows = (
        query.order_by(Ticket.created_at.desc(), Ticket.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    staff_view = user.role != UserRole.CLIENT
    items = [
        _ticket_out(ticket, username if staff_view else None, email if staff_view else None)
        for ticket, username, email in rows
    ]
    return page_payload(items, total, page, page_size)


@router.get("/{ticket_id}", response_model=TicketDetail)
def get_ticket(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ticket = _load_ticket(db, ticket_id, user)
    owner = db.query(User).filter(User.id == ticket.user_id).first()

    rows = (
        db.query(TicketMessage, User.username, User.email)
        .join(User, TicketMessage.user_id == User.id)
        .filter(TicketMessage.ticket_id == ticket.id)
        .order_by(TicketMessage.created_at.asc(), TicketMessage.id.asc())
        .all()
    )
    detail = _ticket_out(ticket, owner.username if owner else None, owner.email if owner else None)
    detail["messages"] = [
        {
            "id": message.id,
            "user_id": message.user_id,
            "username": username,
            "email": email,
            "message": message.message,
            "is_admin": bool(message.is_admin),
            "created_at": message.created_at,
        }
        for message, username, email in rows
    ]
    return detail


@router.post("/", response_model=TicketOut, status_code=status.HTTP_201_CREATED)
def create_ticket(payload: TicketCreate, db: Session = Depends(get_db), user: User = Depends(require_client)):
    ticket = Ticket(
        user_id=user.id,
        subject=payload.subject.strip(),
        status=TicketStatus.OPEN,
        priority=payload.priority,
    )
    db.add(ticket)
    db.flush()
    db.add(TicketMessage(ticket_id=ticket.id, user_id=user.id, message=payload.message, is_admin=False))
    db.commit()
    db.refresh(ticket)
    return _ticket_out(ticket, user.username, user.email)


@router.post("/{ticket_id}/messages", response_model=TicketOut, status_code=status.HTTP_201_CREATED)
def reply_to_ticket(
    ticket_id: int,
    payload: TicketReply,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    is_staff = user.role in (UserRole.SELLER, UserRole.ADMIN)
    if not is_staff and ticket.user_id != user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    db.add(TicketMessage(ticket_id=ticket.id, user_id=user.id, message=payload.message, is_admin=is_staff))
    if ticket.status == TicketStatus.CLOSED:
        ticket.status = TicketStatus.OPEN
    else:
        ticket.status = TicketStatus.ANSWERED if is_staff else TicketStatus.OPEN
    db.commit()
    db.refresh(ticket)
    return _ticket_out(ticket)


@router.patch("/{ticket_id}/status", response_model=TicketOut)
def update_ticket_status(
    ticket_id: int,
    payload: TicketStatusUpdate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    ticket.status = payload.status
    db.commit()
    db.refresh(ticket)
    return _ticket_out(ticket)
