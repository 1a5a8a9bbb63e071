from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user
from modules.documents.models.user import User
from modules.documents.schemas.report_schemas import DashboardStats, SignatureReport
from modules.documents.services.export_service import ExportService
from modules.documents.services.report_service import ReportService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ReportService.dashboard_stats(db, current_user)


@router.get("/reports/signatures", response_model=List[SignatureReport])
def signature_reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Own documents, or every document for admins"""
    return ReportService.signature_reports(db, current_user)


@router.get("/reports/signatures/pdf")
def signature_report_pdf(
    document_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    content = ExportService.signature_report_pdf(db, current_user, document_id)
    filename = f"signature-report-{document_id or 'all'}.pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/reports/signatures/{document_id}", response_model=Optional[SignatureReport])
def signature_report(
    document_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Report of one document; null when it is absent or not visible"""
    return ReportService.signature_report(db, current_user, document_id)
