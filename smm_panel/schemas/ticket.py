from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from smm_panel.models.ticket import TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketReply(BaseModel):
    message: str = Field(..., min_length=1)


class TicketStatusUpdate(BaseModel):
    status: TicketStatus


class TicketMessageOut(BaseModel):
    id: int
    user_id: int
    username: Optional[str] = None
    email: Optional[str] = None
    message: str
    is_admin: bool
    created_at: Optional[datetime] = None


class TicketOut(BaseModel):
    id: int
    user_id: int
    username: Optional[str] = None
    email: Optional[str] = None
    subject: str
    status: TicketStatus
    priority: TicketPriority
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TicketDetail(TicketOut):
    messages: list[TicketMessageOut] = []


class TicketsResponse(BaseModel):
    items: list[TicketOut]
    total: int
    page: int
    page_size: int
    pages: int
