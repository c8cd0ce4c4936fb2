"""
Rule store model: one policy record per API key.
"""

from sqlalchemy import JSON, TIMESTAMP, Column, Integer, String, Text

from ..database import Base


class Rule(Base):
    """A user's policy, keyed by the API key the browser agent sends."""

    __tablename__ = "rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    api_key = Column(String(255), unique=True, nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    prompt = Column(Text)
    blocked_categories = Column(JSON)  # {"social": true, ...}
    allow_list = Column(JSON)  # ["example.com", ...]
    block_list = Column(JSON)
    # Touched only by the heartbeat endpoint
    last_seen = Column(TIMESTAMP(timezone=True))

    def __repr__(self):
        return f"<Rule(user_id={self.user_id})>"
