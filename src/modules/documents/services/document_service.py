import io
import logging
from datetime import datetime
from typing import List, Optional

from PyPDF2 import PdfReader
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from config import settings
from modules.common.errors import (
    ConflictError, ForbiddenError, NotFoundError, ValidationError
)
from modules.common.timeutils import to_naive_utc, utcnow
from modules.documents.models.document import Document, DocumentStatus
from modules.documents.models.signature import Signature
from modules.documents.models.user import User
from modules.documents.services.document_state_service import DocumentStateService
from modules.documents.services.filenames import decode_filename, safe_storage_name, strip_extension
from modules.documents.services.permission import can_modify_document
from modules.documents.services.storage import LocalBlobStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "status", "deadline")


class DocumentService:

    @staticmethod
    def upload_document(
        session: Session,
        store: LocalBlobStore,
        actor: User,
        file_contents: bytes,
        filename: str,
        content_type: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        deadline: Optional[datetime] = None,
    ) -> Document:
        """
        Stores an uploaded file and creates its document record:
        - validates the file
        - recovers the original filename
        - writes the blob
        - creates the record in draft status
        """
        DocumentService._validate_file(file_contents, content_type)

        original_name = decode_filename(filename or "")
        if not original_name:
            raise ValidationError("Uploaded file has no name")

        file_path = store.put(file_contents, safe_storage_name(original_name))

        document = Document(
            title=(title or "").strip() or strip_extension(original_name),
            description=description or None,
            file_path=file_path,
            file_name=original_name,
            file_size=len(file_contents),
            mime_type=content_type,
            created_by=actor.id,
            status=DocumentStatus.DRAFT,
            deadline=to_naive_utc(deadline),
        )
        session.add(document)
        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            store.delete(file_path)
            raise
        session.refresh(document)

        logger.info("Document %s uploaded by %s (%s, %d bytes)",
                    document.id, actor.email, original_name, document.file_size)
        return document

    @staticmethod
    def _validate_file(file_contents: bytes, content_type: str):
        if content_type not in settings.ALLOWED_MIME_TYPES:
            raise ValidationError(f"Unsupported file type '{content_type}'")

        if not file_contents:
            raise ValidationError("Uploaded file is empty")

        if len(file_contents) > settings.MAX_UPLOAD_SIZE:
            raise ValidationError(
                f"Maximum file size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB"
            )

        if content_type == "application/pdf":
            try:
                reader = PdfReader(io.BytesIO(file_contents))
                _ = reader.pages
            except Exception:
                raise ValidationError("Invalid or damaged PDF")

    @staticmethod
    def list_documents(
        session: Session,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Document]:
        """Newest first; unknown status values are ignored"""
        query = session.query(Document).options(
            selectinload(Document.creator),
            selectinload(Document.signatures).selectinload(Signature.user),
        )

        if status in {s.value for s in DocumentStatus}:
            query = query.filter(Document.status == DocumentStatus(status))

        if search:
            pattern = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            query = query.filter(Document.title.ilike(f"%{pattern}%", escape="\\"))

        return query.order_by(Document.created_at.desc()).all()

    @staticmethod
    def get_document(session: Session, document_id: str) -> Document:
        document = session.get(Document, document_id)
        if document is None:
            raise NotFoundError("Document not found")
        return document

    @staticmethod
    def _get_modifiable(session: Session, actor: User, document_id: str) -> Document:
        document = DocumentService.get_document(session, document_id)
        if not can_modify_document(actor, document):
            raise ForbiddenError("Insufficient permissions for this document")
        return document

    @staticmethod
    def update_document(session: Session, actor: User, document_id: str, changes: dict) -> Document:
        """Applies only the supplied fields"""
        document = DocumentService._get_modifiable(session, actor, document_id)

        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if field == "status":
                if value is None:
                    raise ValidationError("Field 'status' cannot be null")
                DocumentStateService.change_document_status(document, value)
            elif field == "title":
                if value is None or not value.strip():
                    raise ValidationError("Field 'title' cannot be empty")
                document.title = value.strip()
            elif field == "deadline":
                document.deadline = to_naive_utc(value)
            else:
                setattr(document, field, value)

        session.commit()
        session.refresh(document)
        logger.info("Document %s updated by %s", document.id, actor.email)
        return document

    @staticmethod
    def delete_document(session: Session, store: LocalBlobStore, actor: User, document_id: str) -> None:
        document = DocumentService._get_modifiable(session, actor, document_id)
        file_path = document.file_path

        # Record first: a crash afterwards leaves an orphaned blob for the sweep
        session.delete(document)
        session.commit()

        if not store.delete(file_path):
            logger.warning("Blob %s of document %s was already missing", file_path, document_id)
        logger.info("Document %s deleted by %s", document_id, actor.email)

    @staticmethod
    def _find_signature(session: Session, document_id: str, user_id: str) -> Optional[Signature]:
        return (
            session.query(Signature)
            .filter(Signature.document_id == document_id, Signature.user_id == user_id)
            .first()
        )

    @staticmethod
    def sign_document(session: Session, actor: User, document_id: str) -> Signature:
        """Records the actor's acknowledgement of an active document."""
        document = DocumentService.get_document(session, document_id)
        DocumentStateService.ensure_signable(document)

        if DocumentService._find_signature(session, document_id, actor.id) is not None:
            raise ConflictError("You have already signed this document")

        signature = Signature(document_id=document_id, user_id=actor.id, signed_at=utcnow())
        session.add(signature)
        try:
            session.commit()
        except IntegrityError:
            # Concurrent duplicate: the unique constraint is authoritative
            session.rollback()
            raise ConflictError("You have already signed this document")
        session.refresh(signature)

        logger.info("Document %s signed by %s", document_id, actor.email)
        return signature

    @staticmethod
    def get_downloadable(session: Session, store: LocalBlobStore, document_id: str) -> Document:
        document = DocumentService.get_document(session, document_id)
        if not store.exists(document.file_path):
            logger.warning("Blob %s of document %s is missing", document.file_path, document.id)
            raise NotFoundError("Document file not found")
        return document
