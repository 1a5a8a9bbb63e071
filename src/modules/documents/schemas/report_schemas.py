from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ReportStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


class RecentSignature(BaseModel):
    id: str
    document_id: str
    document_title: str
    user_name: str
    signed_at: datetime


class PendingAction(BaseModel):
    id: str
    document_title: str
    deadline: datetime
    days_left: int


class DashboardStats(BaseModel):
    total_documents: int
    total_users: int
    signed_by_me: int
    pending_for_me: int
    recent_signatures: List[RecentSignature]
    pending_actions: List[PendingAction]


class SignerEntry(BaseModel):
    user_id: str
    user_name: str
    user_email: str
    signed_at: datetime


class SignatureReport(BaseModel):
    document_id: str
    document_title: str
    created_by: str
    creator_name: str
    total_signatures: int
    required_signatures: int
    signatures: List[SignerEntry]
    status: ReportStatus


class DocumentStats(BaseModel):
    total: int
    draft: int
    active: int
    archived: int
    signed_by_me: int
    pending: int
    total_users: Optional[int] = None
