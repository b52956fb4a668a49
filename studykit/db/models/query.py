"""Query model: a user's research request."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from studykit.db.base import Base


class Query(Base):
    __tablename__ = "queries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False, index=True)

    query_text = Column(Text, nullable=False)
    topic = Column(String(255), nullable=True)
    complexity_level = Column(String(20), nullable=False, default="college")  # ComplexityLevel value
    status = Column(String(20), nullable=False, default="pending")  # QueryStatus value

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
