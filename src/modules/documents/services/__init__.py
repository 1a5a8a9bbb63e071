from .cleanup import delete_orphaned_blobs
from .document_service import DocumentService
from .document_state_service import DocumentStateService
from .export_service import ExportService, ExportKind, SignedExport
from .report_service import ReportService

__all__ = [
    'delete_orphaned_blobs', 'DocumentService', 'DocumentStateService',
    'ExportService', 'ExportKind', 'SignedExport', 'ReportService'
]
