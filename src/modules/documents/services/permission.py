from enum import Enum

from modules.common.errors import ForbiddenError
from modules.documents.models.document import Document
from modules.documents.models.user import User, UserRole


class Capability(str, Enum):
    UPLOAD_DOCUMENTS = "upload_documents"
    MANAGE_ALL_DOCUMENTS = "manage_all_documents"
    VIEW_ALL_REPORTS = "view_all_reports"
    MANAGE_USERS = "manage_users"
    VIEW_SYSTEM_STATS = "view_system_stats"


ROLE_CAPABILITIES = {
    UserRole.ADMIN: {
        Capability.UPLOAD_DOCUMENTS,
        Capability.MANAGE_ALL_DOCUMENTS,
        Capability.VIEW_ALL_REPORTS,
        Capability.MANAGE_USERS,
        Capability.VIEW_SYSTEM_STATS,
    },
    UserRole.USER: set(),
}


def can_perform_action(user_role: UserRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(user_role, set())


def roles_with(capability: Capability) -> tuple:
    return tuple(role for role, capabilities in ROLE_CAPABILITIES.items() if capability in capabilities)


def authorize(user: User, *allowed_roles: UserRole) -> User:
    if user.role not in allowed_roles:
        raise ForbiddenError(f"Role '{user.role.value}' cannot perform this action")
    return user


def can_modify_document(user: User, document: Document) -> bool:
    """Owner of the document or anyone allowed to manage every document."""
    return (
        document.created_by == user.id
        or can_perform_action(user.role, Capability.MANAGE_ALL_DOCUMENTS)
    )
