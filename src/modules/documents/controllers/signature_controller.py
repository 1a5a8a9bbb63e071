# src/modules/documents/controllers/signature_controller.py
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user
from modules.documents.models.user import User
from modules.documents.schemas.document_schemas import SignatureResponse
from modules.documents.services.document_service import DocumentService
from modules.documents.services.export_service import ExportKind, ExportService
from modules.documents.services.storage import LocalBlobStore, get_blob_store

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/{document_id}/sign", response_model=SignatureResponse, status_code=status.HTTP_201_CREATED)
def sign_document(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Acknowledge an active document; once per user."""
    return DocumentService.sign_document(db, current_user, document_id)


@router.get("/download/signed")
def download_signed_documents(
    db: Session = Depends(get_db),
    store: LocalBlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user),
):
    """
    Every document the current user signed: the file itself when there is
    only one, a ZIP archive otherwise.
    """
    export = ExportService.export_signed_documents(db, store, current_user)
    headers = {"X-Export-Kind": export.kind.value}
    if export.skipped:
        headers["X-Export-Skipped"] = str(len(export.skipped))

    if export.kind == ExportKind.ARCHIVE:
        headers["Content-Disposition"] = f'attachment; filename="{export.filename}"'
        return Response(content=export.content, media_type=export.media_type, headers=headers)

    return FileResponse(
        export.path, media_type=export.media_type, filename=export.filename, headers=headers
    )
