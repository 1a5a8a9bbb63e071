import math
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from modules.common.timeutils import utcnow
from modules.documents.models.document import Document, DocumentStatus
from modules.documents.models.signature import Signature
from modules.documents.models.user import User
from modules.documents.schemas.report_schemas import (
    DashboardStats, DocumentStats, PendingAction, RecentSignature,
    ReportStatus, SignatureReport, SignerEntry
)
from modules.documents.services.permission import Capability, can_perform_action

DASHBOARD_LIMIT = 5
REQUIRED_SIGNATURES = 1
SECONDS_PER_DAY = 24 * 60 * 60


def days_left(deadline: datetime, now: datetime) -> int:
    return math.ceil((deadline - now).total_seconds() / SECONDS_PER_DAY)


def report_status(document: Document, now: datetime) -> ReportStatus:
    if document.deadline is not None and document.deadline < now:
        return ReportStatus.EXPIRED
    if document.signatures:
        return ReportStatus.COMPLETED
    return ReportStatus.PENDING


def _signed_by(user_id: str):
    return Document.signatures.any(Signature.user_id == user_id)


class ReportService:

    @staticmethod
    def dashboard_stats(session: Session, actor: User, now: Optional[datetime] = None) -> DashboardStats:
        now = now or utcnow()

        total_documents = session.query(func.count(Document.id)).scalar()
        total_users = session.query(func.count(User.id)).scalar()
        signed_by_me = (
            session.query(func.count(Signature.id))
            .filter(Signature.user_id == actor.id)
            .scalar()
        )
        # Source definition kept: active documents the actor created and has not signed
        pending_for_me = (
            session.query(func.count(Document.id))
            .filter(
                Document.created_by == actor.id,
                Document.status == DocumentStatus.ACTIVE,
                ~_signed_by(actor.id),
            )
            .scalar()
        )

        recent = (
            session.query(Signature)
            .options(selectinload(Signature.document), selectinload(Signature.user))
            .filter(Signature.user_id == actor.id)
            .order_by(Signature.signed_at.desc())
            .limit(DASHBOARD_LIMIT)
            .all()
        )

        pending_docs = (
            session.query(Document)
            .filter(
                Document.status == DocumentStatus.ACTIVE,
                Document.deadline.isnot(None),
                Document.deadline > now,
                ~_signed_by(actor.id),
            )
            .order_by(Document.deadline.asc())
            .limit(DASHBOARD_LIMIT)
            .all()
        )

        return DashboardStats(
            total_documents=total_documents,
            total_users=total_users,
            signed_by_me=signed_by_me,
            pending_for_me=pending_for_me,
            recent_signatures=[
                RecentSignature(
                    id=sig.id,
                    document_id=sig.document_id,
                    document_title=sig.document.title,
                    user_name=sig.user.name,
                    signed_at=sig.signed_at,
                )
                for sig in recent
            ],
            pending_actions=[
                PendingAction(
                    id=doc.id,
                    document_title=doc.title,
                    deadline=doc.deadline,
                    days_left=days_left(doc.deadline, now),
                )
                for doc in pending_docs
            ],
        )

    @staticmethod
    def visible_documents(session: Session, actor: User, document_id: Optional[str] = None) -> List[Document]:
        """Documents whose reports the actor may see, newest first."""
        query = session.query(Document).options(
            selectinload(Document.creator),
            selectinload(Document.signatures).selectinload(Signature.user),
        )
        if document_id is not None:
            query = query.filter(Document.id == document_id)
        if not can_perform_action(actor.role, Capability.VIEW_ALL_REPORTS):
            query = query.filter(Document.created_by == actor.id)
        return query.order_by(Document.created_at.desc()).all()

    @staticmethod
    def build_report(document: Document, now: datetime) -> SignatureReport:
        return SignatureReport(
            document_id=document.id,
            document_title=document.title,
            created_by=document.created_by,
            creator_name=document.creator.name,
            total_signatures=len(document.signatures),
            required_signatures=REQUIRED_SIGNATURES,
            signatures=[
                SignerEntry(
                    user_id=sig.user_id,
                    user_name=sig.user.name,
                    user_email=sig.user.email,
                    signed_at=sig.signed_at,
                )
                for sig in document.signatures
            ],
            status=report_status(document, now),
        )

    @staticmethod
    def signature_reports(session: Session, actor: User, now: Optional[datetime] = None) -> List[SignatureReport]:
        now = now or utcnow()
        return [ReportService.build_report(doc, now) for doc in ReportService.visible_documents(session, actor)]

    @staticmethod
    def signature_report(
        session: Session, actor: User, document_id: str, now: Optional[datetime] = None
    ) -> Optional[SignatureReport]:
        """Report of one document, None when it is absent or not visible."""
        now = now or utcnow()
        documents = ReportService.visible_documents(session, actor, document_id)
        if not documents:
            return None
        return ReportService.build_report(documents[0], now)

    @staticmethod
    def document_stats(session: Session, actor: User) -> DocumentStats:
        """
        Counts per status plus a role-dependent "pending" figure.

        Admins see the raw number of active documents as pending; users see
        active documents they neither created nor signed. The two metrics
        differ on purpose until product settles on one definition.
        """
        counts = {s: 0 for s in DocumentStatus}
        for status, count in (
            session.query(Document.status, func.count(Document.id))
            .group_by(Document.status)
            .all()
        ):
            counts[status] = count

        signed_by_me = (
            session.query(func.count(func.distinct(Signature.document_id)))
            .filter(Signature.user_id == actor.id)
            .scalar()
        )

        stats = DocumentStats(
            total=sum(counts.values()),
            draft=counts[DocumentStatus.DRAFT],
            active=counts[DocumentStatus.ACTIVE],
            archived=counts[DocumentStatus.ARCHIVED],
            signed_by_me=signed_by_me,
            pending=0,
        )

        if can_perform_action(actor.role, Capability.VIEW_SYSTEM_STATS):
            stats.total_users = session.query(func.count(User.id)).scalar()
            stats.pending = counts[DocumentStatus.ACTIVE]
        else:
            stats.pending = (
                session.query(func.count(Document.id))
                .filter(
                    Document.status == DocumentStatus.ACTIVE,
                    Document.created_by != actor.id,
                    ~_signed_by(actor.id),
                )
                .scalar()
            )
        return stats
