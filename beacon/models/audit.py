"""
Audit log model: one row per recorded decision.
"""

from datetime import UTC, datetime

from sqlalchemy import TIMESTAMP, Column, Integer, String, Text

from ..database import Base


def utcnow():
    return datetime.now(UTC)


class BlockingLog(Base):
    """Append-only record of a decision returned to the browser agent."""

    __tablename__ = "blocking_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    url = Column(Text, nullable=False)
    domain = Column(String(255), nullable=False)
    decision = Column(String(10), nullable=False)  # 'ALLOW' | 'BLOCK'
    reason = Column(String(50), nullable=False)
    page_title = Column(Text, default="")
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<BlockingLog(user_id={self.user_id}, decision={self.decision}, reason={self.reason})>"
