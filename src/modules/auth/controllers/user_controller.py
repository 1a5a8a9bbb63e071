from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.auth.dependencies import get_current_user, require_permission
from modules.auth.schemas.auth_schemas import UserListResponse, UserResponse, UserUpdate
from modules.auth.services.auth_service import AuthService
from modules.documents.models.user import User
from modules.documents.services.permission import Capability

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Capability.MANAGE_USERS)),
):
    users = AuthService.list_users(db)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return AuthService.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Capability.MANAGE_USERS)),
):
    """Change name, role or password (admins only)"""
    return AuthService.update_user(db, user_id, data.model_dump(exclude_unset=True))
