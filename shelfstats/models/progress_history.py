"""
ReadingProgressHistory: one row per recorded progress update.

Append-only. pages_read is the delta since the previous recorded point,
never the cumulative position (that lives in `progress`).
"""
import uuid
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfstats.db.base import Base
from shelfstats.models.user_book import UserBook


class ReadingProgressHistory(Base):
    __tablename__ = "reading_progress_history"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    user_book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    pages_read: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    user_book: Mapped[UserBook] = relationship(UserBook, lazy="joined")
