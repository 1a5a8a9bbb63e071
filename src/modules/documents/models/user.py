import uuid

from sqlalchemy import Column, String, Enum, DateTime
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from database import Base
from modules.common.timeutils import utcnow


class UserRole(str, PyEnum):
    ADMIN = "admin"
    USER = "user"


class User(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Documents uploaded by this user
    documents = relationship("Document", back_populates="creator")

    signatures = relationship("Signature", back_populates="user")
