# src/modules/documents/models/signature.py
import uuid

from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from modules.common.timeutils import utcnow


class Signature(Base):
    __tablename__ = "signatures"
    __table_args__ = (
        # One acknowledgement per (document, user)
        UniqueConstraint("document_id", "user_id", name="uq_signatures_document_user"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    user_id     = Column(String(36), ForeignKey("users.id"), nullable=False)
    signed_at   = Column(DateTime, default=utcnow, nullable=False)

    document = relationship("Document", back_populates="signatures")
    user     = relationship("User", back_populates="signatures")
