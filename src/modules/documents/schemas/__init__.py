from .document_schemas import (
    UserSummary, SignatureResponse, DocumentResponse, DocumentListResponse,
    DocumentUpdate, MessageResponse
)
from .report_schemas import (
    ReportStatus, RecentSignature, PendingAction, DashboardStats,
    SignerEntry, SignatureReport, DocumentStats
)

__all__ = [
    'UserSummary', 'SignatureResponse', 'DocumentResponse', 'DocumentListResponse',
    'DocumentUpdate', 'MessageResponse',
    'ReportStatus', 'RecentSignature', 'PendingAction', 'DashboardStats',
    'SignerEntry', 'SignatureReport', 'DocumentStats'
]
