import logging
import re
from datetime import timedelta
from typing import Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from modules.common.errors import AuthError, ConflictError, NotFoundError, ValidationError
from modules.common.timeutils import utcnow
from modules.documents.models.system_flag import SystemFlag
from modules.documents.models.user import User, UserRole

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
INVALID_CREDENTIALS = "Invalid email or password"
FIRST_ADMIN_FLAG = "first_admin"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


class AuthService:

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
        """Signed JWT carrying the user id, email and role."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "exp": utcnow() + expires_delta,
        }
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Claims of a valid token, None for invalid or expired ones."""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except JWTError:
            return None
        if payload.get("sub") is None:
            return None
        return payload

    @staticmethod
    def register(session: Session, email: str, password: str, name: str) -> Tuple[str, User]:
        email = AuthService.normalize_email(email)
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")

        name = name.strip()
        if len(name) < 2:
            raise ValidationError("Name must be at least 2 characters")

        if session.query(User).filter(User.email == email).first():
            raise ConflictError("A user with this email already exists")

        user = User(
            email=email,
            name=name,
            password_hash=AuthService.get_password_hash(password),
            role=UserRole.USER,
        )
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            session.rollback()
            raise ConflictError("A user with this email already exists")

        # The first user of the system becomes admin
        if session.query(func.count(User.id)).scalar() == 1 and AuthService._claim_first_admin(session, user):
            user.role = UserRole.ADMIN
            logger.info("First user %s promoted to admin", email)

        session.commit()
        session.refresh(user)
        logger.info("User registered: %s", email)
        return AuthService.create_access_token(user), user

    @staticmethod
    def _claim_first_admin(session: Session, user: User) -> bool:
        """Insert the first-admin marker; the primary key lets only one registration win.

        Concurrent registrations into an empty table each count only their own
        row, so the count alone cannot decide. The losing insert blocks on the
        key until the winner commits and then fails.
        """
        try:
            with session.begin_nested():
                session.add(SystemFlag(key=FIRST_ADMIN_FLAG, user_id=user.id))
        except IntegrityError:
            logger.info("First admin already claimed, %s stays a regular user", user.email)
            return False
        return True

    @staticmethod
    def login(session: Session, email: str, password: str) -> Tuple[str, User]:
        user = AuthService.authenticate_user(session, email, password)
        if user is None:
            raise AuthError(INVALID_CREDENTIALS)
        logger.info("User logged in: %s", user.email)
        return AuthService.create_access_token(user), user

    @staticmethod
    def authenticate_user(session: Session, email: str, password: str) -> Optional[User]:
        """User for matching credentials, None otherwise"""
        user = session.query(User).filter(User.email == AuthService.normalize_email(email)).first()
        if not user:
            # Same hashing cost whether or not the email exists
            pwd_context.dummy_verify()
            logger.info("Failed login for unknown email")
            return None
        if not AuthService.verify_password(password, user.password_hash):
            logger.info("Failed login for %s", user.email)
            return None
        return user

    @staticmethod
    def get_current_user(session: Session, token: Optional[str]) -> User:
        if not token:
            raise AuthError("Authentication required")
        claims = AuthService.verify_token(token)
        if claims is None:
            raise AuthError("Invalid or expired token")
        user = session.get(User, claims["sub"])
        if user is None:
            raise AuthError("User not found")
        return user

    @staticmethod
    def list_users(session: Session) -> list[User]:
        return session.query(User).order_by(User.created_at.desc()).all()

    @staticmethod
    def get_user(session: Session, user_id: str) -> User:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_user(session: Session, user_id: str, changes: dict) -> User:
        """Partial update of name, role and password; a new password is re-hashed."""
        user = AuthService.get_user(session, user_id)
        for field, value in changes.items():
            if value is None:
                raise ValidationError(f"Field '{field}' cannot be null")

        for field, value in changes.items():
            if field == "password":
                user.password_hash = AuthService.get_password_hash(value)
            elif field == "name":
                user.name = value.strip()
            else:
                setattr(user, field, value)

        session.commit()
        session.refresh(user)
        logger.info("User %s updated (%s)", user.email, ", ".join(sorted(changes)))
        return user
