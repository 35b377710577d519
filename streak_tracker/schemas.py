import datetime as dt
from typing import Optional

from pydantic import BaseModel

from .models import Streak, User


# ----- Pydantic schemas -----
# Request fields are optional; the handlers enforce required ones with 400s.
class SignupIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class SigninIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserRead(BaseModel):
    id: int
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(id=user.id, name=user.name, email=user.email)


class AuthOut(BaseModel):
    user: UserRead
    token: str


class StreakCreate(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    difficulty: Optional[str] = None
    description: Optional[str] = None
    participantCount: Optional[int] = None
    emoji: Optional[str] = None


class StreakRead(BaseModel):
    id: int
    title: str
    author: Optional[str]
    difficulty: Optional[str]
    description: Optional[str]
    participantCount: int
    emoji: str

    @classmethod
    def from_streak(cls, streak: Streak) -> "StreakRead":
        return cls(
            id=streak.id,
            title=streak.title,
            author=streak.author,
            difficulty=streak.difficulty,
            description=streak.description,
            participantCount=streak.participant_count,
            emoji=streak.emoji,
        )


class UserStreakRead(StreakRead):
    joined_at: dt.datetime


class JoinIn(BaseModel):
    userId: Optional[int] = None


class MarkDoneIn(BaseModel):
    userId: Optional[int] = None
    date: Optional[dt.date] = None


class ProgressSummary(BaseModel):
    totalDays: int
    currentStreak: int
    longestStreak: int
