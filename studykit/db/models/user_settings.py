"""UserSettings model: per-user plan tier."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from studykit.db.base import Base


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), unique=True, nullable=False, index=True)

    # Plan slug: "free" or "pro" (unset or unknown reads as free)
    plan = Column(String(20), nullable=True, default="free")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
