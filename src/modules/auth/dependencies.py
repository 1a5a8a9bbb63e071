from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.services.auth_service import AuthService
from modules.documents.models.user import User
from modules.documents.services.permission import Capability, authorize, roles_with

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Dependency resolving the bearer token to a live user"""
    token = credentials.credentials if credentials else None
    return AuthService.get_current_user(db, token)


def require_permission(capability: Capability):
    """Gate a route on the roles that hold the capability"""
    allowed_roles = roles_with(capability)

    def dependency(current_user: User = Depends(get_current_user)):
        return authorize(current_user, *allowed_roles)
    return dependency
