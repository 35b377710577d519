import datetime as dt
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from .config import DEFAULT_EMOJI


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# ----- Models -----
class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password_hash: str


class Streak(SQLModel, table=True):
    __tablename__ = "streaks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    author: Optional[str] = None
    difficulty: Optional[str] = Field(default=None, index=True)
    description: Optional[str] = None
    participant_count: int = Field(default=0, index=True)
    emoji: str = Field(default=DEFAULT_EMOJI)
    created_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Membership(SQLModel, table=True):
    __tablename__ = "user_streaks"
    __table_args__ = (UniqueConstraint("user_id", "streak_id", name="uq_user_streak"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    streak_id: int = Field(foreign_key="streaks.id", index=True)
    joined_at: dt.datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class ProgressEntry(SQLModel, table=True):
    __tablename__ = "streak_progress"
    __table_args__ = (UniqueConstraint("user_id", "streak_id", "date", name="uq_progress_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    streak_id: int = Field(foreign_key="streaks.id", index=True)
    date: dt.date
    done: bool = True
