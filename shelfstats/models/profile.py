from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from shelfstats.db.base import Base


class Profile(Base):
    """Per-user preferences read by the stats endpoints."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_stats_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    week_start_day: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
