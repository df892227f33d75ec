from .profile import Profile
from .user_book import UserBook, ReadingStatus
from .progress_history import ReadingProgressHistory

__all__ = [
    "Profile",
    "UserBook",
    "ReadingStatus",
    "ReadingProgressHistory",
]
