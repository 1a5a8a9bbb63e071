from sqlalchemy import Column, String, DateTime
from database import Base
from modules.common.timeutils import utcnow


class SystemFlag(Base):
    """One-time, system-wide markers. The primary key makes each claim exclusive."""
    __tablename__ = 'system_flags'

    key = Column(String(64), primary_key=True)
    user_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
