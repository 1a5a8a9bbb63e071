from .user import User, UserRole
from .document import Document, DocumentStatus
from .signature import Signature
from .system_flag import SystemFlag

__all__ = ['User', 'UserRole', 'Document', 'DocumentStatus', 'Signature', 'SystemFlag']
