from .auth_schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse,
    UserUpdate, UserListResponse
)

__all__ = [
    'RegisterRequest', 'LoginRequest', 'TokenResponse', 'UserResponse',
    'UserUpdate', 'UserListResponse'
]
