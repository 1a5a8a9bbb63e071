from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user, require_permission
from modules.documents.models.user import User
from modules.documents.schemas.document_schemas import (
    DocumentListResponse, DocumentResponse, DocumentUpdate, MessageResponse
)
from modules.documents.schemas.report_schemas import DocumentStats
from modules.documents.services.document_service import DocumentService
from modules.documents.services.permission import Capability
from modules.documents.services.report_service import ReportService
from modules.documents.services.storage import LocalBlobStore, get_blob_store

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=DocumentListResponse)
def list_documents(
    status_filter: Optional[str] = Query(None, alias="status", description="draft, active or archived"),
    search: Optional[str] = Query(None, description="Case-insensitive title search"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    documents = DocumentService.list_documents(db, status=status_filter, search=search)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents],
        total=len(documents),
    )


@router.post("/upload", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    deadline: Optional[datetime] = Form(None),
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
    current_user: User = Depends(require_permission(Capability.UPLOAD_DOCUMENTS)),
):
    contents = await file.read()
    return DocumentService.upload_document(
        db, store, current_user, contents, file.filename, file.content_type,
        title=title, description=description, deadline=deadline,
    )


# Declared before /{document_id} so "stats" is not taken for an id
@router.get("/stats", response_model=DocumentStats)
def document_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ReportService.document_stats(db, current_user)


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return DocumentService.get_document(db, document_id)


@router.put("/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: str,
    data: DocumentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partial update by the owner or an admin"""
    return DocumentService.update_document(
        db, current_user, document_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{document_id}", response_model=MessageResponse)
def delete_document(
    document_id: str,
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user),
):
    DocumentService.delete_document(db, store, current_user, document_id)
    return MessageResponse(message="Document deleted")


@router.get("/{document_id}/download")
def download_document(
    document_id: str,
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user),
):
    document = DocumentService.get_downloadable(db, store, document_id)
    return FileResponse(document.file_path, media_type=document.mime_type, filename=document.file_name)
