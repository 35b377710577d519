"""Streak catalog: list, fetch and create streak definitions."""

import logging
from typing import List, Optional

from sqlmodel import Session, select

from .config import DEFAULT_EMOJI, DEFAULT_PAGE_SIZE
from .errors import NotFoundError, ValidationError
from .models import Streak

logger = logging.getLogger("streak_tracker.catalog")

ORDERINGS = ("popular", "recent")


def list_streaks(
    session: Session,
    offset: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
    difficulty: Optional[str] = None,
    order: str = "popular",
) -> List[Streak]:
    if order not in ORDERINGS:
        raise ValidationError(f"order must be one of: {', '.join(ORDERINGS)}")
    statement = select(Streak)
    if difficulty:
        statement = statement.where(Streak.difficulty == difficulty)
    if order == "recent":
        statement = statement.order_by(Streak.created_at.desc(), Streak.id.desc())
    else:
        statement = statement.order_by(Streak.participant_count.desc(), Streak.id.asc())
    statement = statement.offset(offset).limit(limit)
    return list(session.exec(statement).all())


def get_streak(session: Session, streak_id: int) -> Streak:
    streak = session.get(Streak, streak_id)
    if streak is None:
        raise NotFoundError("Streak not found")
    return streak


def create_streak(
    session: Session,
    title: str,
    author: Optional[str] = None,
    difficulty: Optional[str] = None,
    description: Optional[str] = None,
    participant_count: int = 0,
    emoji: Optional[str] = None,
) -> Streak:
    streak = Streak(
        title=title,
        author=author,
        difficulty=difficulty,
        description=description,
        participant_count=participant_count or 0,
        emoji=emoji or DEFAULT_EMOJI,
    )
    session.add(streak)
    session.commit()
    session.refresh(streak)
    logger.info("created streak %s (%s)", streak.id, streak.title)
    return streak
