from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from modules.documents.models.document import DocumentStatus


class UserSummary(BaseModel):
    id: str
    name: str
    email: str

    model_config = {"from_attributes": True}


class SignatureResponse(BaseModel):
    id: str
    document_id: str
    user_id: str
    signed_at: datetime
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


class DocumentResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    file_name: str
    file_size: int
    mime_type: str
    status: DocumentStatus
    deadline: Optional[datetime] = None
    created_by: str
    created_at: datetime
    updated_at: datetime
    creator: Optional[UserSummary] = None
    signatures: List[SignatureResponse] = []

    model_config = {"from_attributes": True}


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]
    total: int


class DocumentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[DocumentStatus] = None
    deadline: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str
