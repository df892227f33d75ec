"""
Shared pytest fixtures.

Uses a SQLite file database so no Postgres is required for tests.
Every test seeds its own users (fresh uuids), so no test can see
another test's reading history.
"""
import os
import uuid
from datetime import datetime, timezone

SQLITE_URL = "sqlite:///./test_shelfstats.db"
os.environ.setdefault("DATABASE_URL", SQLITE_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from shelfstats.db.base import Base, get_db  # noqa: E402
from shelfstats.main import app  # noqa: E402
from shelfstats.models import (  # noqa: E402
    Profile,
    ReadingProgressHistory,
    ReadingStatus,
    UserBook,
)

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_reader(db):
    """Create a profile and return its user id."""
    def _make(is_stats_public: bool = False, week_start_day: str | None = None) -> str:
        user_id = str(uuid.uuid4())
        db.add(Profile(
            id=user_id,
            username=f"reader-{user_id[:8]}",
            is_stats_public=is_stats_public,
            week_start_day=week_start_day,
        ))
        db.commit()
        return user_id
    return _make


@pytest.fixture()
def add_book(db):
    def _add(
        user_id: str,
        title: str,
        status: ReadingStatus = ReadingStatus.READING,
        updated_at: datetime | None = None,
        cover: str | None = None,
    ) -> UserBook:
        book = UserBook(user_id=user_id, title=title, status=status, cover=cover)
        if updated_at is not None:
            book.updated_at = updated_at
        db.add(book)
        db.commit()
        db.refresh(book)
        return book
    return _add


@pytest.fixture()
def add_progress(db):
    def _add(
        user_id: str,
        book: UserBook,
        pages_read: int,
        recorded_at: datetime | None = None,
    ) -> ReadingProgressHistory:
        row = ReadingProgressHistory(
            user_id=user_id,
            user_book_id=book.id,
            status=ReadingStatus.READING.value,
            pages_read=pages_read,
            progress=pages_read,
            recorded_at=recorded_at or datetime.now(tz=timezone.utc),
        )
        db.add(row)
        db.commit()
        return row
    return _add
