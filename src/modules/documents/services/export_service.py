import io
import logging
import os
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer
from sqlalchemy.orm import Session

from config import settings
from modules.common.errors import NotFoundError
from modules.common.timeutils import utcnow
from modules.documents.models.document import Document
from modules.documents.models.signature import Signature
from modules.documents.models.user import User
from modules.documents.services.report_service import ReportService
from modules.documents.services.storage import LocalBlobStore

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "signed-documents.zip"
DATE_FORMAT = "%d.%m.%Y"
DATETIME_FORMAT = "%d.%m.%Y %H:%M:%S"
# Styles the report uses; all of them switch to the configured font
REPORT_STYLES = ("Title", "Normal", "Heading2", "Heading3")


@lru_cache()
def _register_report_font(path: str) -> Optional[str]:
    """Register the TTF at path once and return its font name, None if it cannot be loaded"""
    font_name = "Report-" + os.path.splitext(os.path.basename(path))[0]
    try:
        pdfmetrics.registerFont(TTFont(font_name, path))
    except (TTFError, OSError):
        logger.error("Cannot load PDF font %s, falling back to Helvetica", path, exc_info=True)
        return None
    logger.info("Registered PDF font %s from %s", font_name, path)
    return font_name


def _report_styles():
    styles = getSampleStyleSheet()
    font_name = _register_report_font(settings.PDF_FONT_PATH) if settings.PDF_FONT_PATH else None
    if font_name:
        for style_name in REPORT_STYLES:
            styles[style_name].fontName = font_name
    return styles


class ExportKind(str, Enum):
    SINGLE = "single"
    ARCHIVE = "archive"
    # Archive could not be built; the first available file is delivered instead
    DEGRADED = "degraded"


@dataclass
class SignedExport:
    kind: ExportKind
    filename: str
    media_type: str
    path: Optional[str] = None
    content: Optional[bytes] = None
    skipped: List[str] = field(default_factory=list)


class ExportService:

    @staticmethod
    def signature_report_pdf(
        session: Session,
        actor: User,
        document_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bytes:
        """Signature report as PDF, one document per page."""
        now = now or utcnow()
        documents = ReportService.visible_documents(session, actor, document_id)

        styles = _report_styles()
        buffer = io.BytesIO()
        pdf = SimpleDocTemplate(
            buffer, pagesize=A4,
            leftMargin=18 * mm, rightMargin=18 * mm, topMargin=18 * mm, bottomMargin=18 * mm,
            title="Signature report",
        )

        story = [
            Paragraph("Document signature report", styles["Title"]),
            Paragraph(f"Generated: {now.strftime(DATETIME_FORMAT)} UTC", styles["Normal"]),
            Spacer(1, 8 * mm),
        ]
        if not documents:
            story.append(Paragraph("No documents to report.", styles["Normal"]))

        for index, document in enumerate(documents):
            story.extend(ExportService._document_section(document, index + 1, styles))
            if index < len(documents) - 1:
                story.append(PageBreak())

        pdf.build(story)
        logger.info("Signature report PDF built for %s (%d documents)", actor.email, len(documents))
        return buffer.getvalue()

    @staticmethod
    def _document_section(document: Document, number: int, styles) -> list:
        creator = document.creator
        body = styles["Normal"]
        section = [
            Paragraph(f"{number}. {escape(document.title)}", styles["Heading2"]),
            Paragraph(f"Creator: {escape(creator.name)} ({escape(creator.email)})", body),
            Paragraph(f"Created: {document.created_at.strftime(DATE_FORMAT)}", body),
            Paragraph(f"Status: {document.status.value}", body),
        ]
        if document.deadline is not None:
            section.append(Paragraph(f"Deadline: {document.deadline.strftime(DATE_FORMAT)}", body))

        section.append(Spacer(1, 4 * mm))
        section.append(Paragraph("Signatures:", styles["Heading3"]))
        if document.signatures:
            for sig_index, signature in enumerate(document.signatures, start=1):
                section.append(Paragraph(
                    f"{sig_index}. {escape(signature.user.name)} ({escape(signature.user.email)})"
                    f" - signed {signature.signed_at.strftime(DATETIME_FORMAT)}",
                    body,
                ))
        else:
            section.append(Paragraph('<font color="red">No signatures</font>', body))
        return section

    @staticmethod
    def signed_documents(session: Session, actor: User) -> List[Document]:
        return (
            session.query(Document)
            .join(Signature, Signature.document_id == Document.id)
            .filter(Signature.user_id == actor.id)
            .order_by(Signature.signed_at.desc())
            .all()
        )

    @staticmethod
    def export_signed_documents(session: Session, store: LocalBlobStore, actor: User) -> SignedExport:
        """
        Every document the actor signed: the file itself when there is only
        one, otherwise a ZIP keyed by original filename. Missing blobs are
        skipped.
        """
        documents = ExportService.signed_documents(session, actor)
        if not documents:
            raise NotFoundError("You have not signed any documents")

        if len(documents) == 1:
            document = documents[0]
            if not store.exists(document.file_path):
                logger.warning("Blob %s of document %s is missing", document.file_path, document.id)
                raise NotFoundError("Document file not found")
            return SignedExport(
                kind=ExportKind.SINGLE,
                filename=document.file_name,
                media_type=document.mime_type,
                path=document.file_path,
            )

        available, skipped = [], []
        for document in documents:
            if store.exists(document.file_path):
                available.append(document)
            else:
                logger.warning("Skipping missing blob %s of document %s", document.file_path, document.id)
                skipped.append(document.file_name)

        if not available:
            raise NotFoundError("None of the signed document files were found")

        try:
            content = ExportService._build_archive(store, available)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            logger.error("Could not build archive for %s, sending a single file: %s", actor.email, e)
            first = available[0]
            return SignedExport(
                kind=ExportKind.DEGRADED,
                filename=first.file_name,
                media_type=first.mime_type,
                path=first.file_path,
                skipped=skipped + [d.file_name for d in available[1:]],
            )

        logger.info("Archive of %d signed documents built for %s", len(available), actor.email)
        return SignedExport(
            kind=ExportKind.ARCHIVE,
            filename=ARCHIVE_NAME,
            media_type="application/zip",
            content=content,
            skipped=skipped,
        )

    @staticmethod
    def _build_archive(store: LocalBlobStore, documents: List[Document]) -> bytes:
        buffer = io.BytesIO()
        used_names = set()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for document in documents:
                data = store.get(document.file_path)
                if data is None:
                    # Vanished between the existence check and the read
                    logger.warning("Skipping missing blob %s of document %s", document.file_path, document.id)
                    continue
                archive.writestr(_unique_entry_name(document.file_name, used_names), data)
        return buffer.getvalue()


def _unique_entry_name(filename: str, used_names: set) -> str:
    name = filename
    base, ext = os.path.splitext(filename)
    counter = 2
    while name in used_names:
        name = f"{base} ({counter}){ext}"
        counter += 1
    used_names.add(name)
    return name
