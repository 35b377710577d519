"""Progress ledger: one done-row per (user, streak, day).

An entry is either absent or done. ``mark_done`` moves it to done and is a
no-op when it already is; ``delete_progress`` moves it back to absent and is a
no-op when it already is.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import delete, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .config import PROGRESS_WINDOW_DAYS
from .errors import NotFoundError, ValidationError
from .models import ProgressEntry, Streak

logger = logging.getLogger("streak_tracker.progress")

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _upsert_done(session: Session, user_id: int, streak_id: int, day: date) -> None:
    insert = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
    if insert is not None:
        statement = (
            insert(ProgressEntry)
            .values(user_id=user_id, streak_id=streak_id, date=day, done=True)
            .on_conflict_do_update(
                index_elements=["user_id", "streak_id", "date"],
                set_={"done": True},
            )
        )
        session.execute(statement)
        return

    # No native upsert: try the insert inside a savepoint, update on conflict.
    try:
        with session.begin_nested():
            session.add(ProgressEntry(user_id=user_id, streak_id=streak_id, date=day, done=True))
    except IntegrityError:
        session.execute(
            update(ProgressEntry)
            .where(
                ProgressEntry.user_id == user_id,
                ProgressEntry.streak_id == streak_id,
                ProgressEntry.date == day,
            )
            .values(done=True)
        )


def mark_done(session: Session, user_id: int, streak_id: int, day: Optional[date] = None) -> date:
    day = day or date.today()
    if session.get(Streak, streak_id) is None:
        raise NotFoundError("Streak not found")
    try:
        _upsert_done(session, user_id, streak_id, day)
        session.commit()
    except IntegrityError:
        # The streak exists, so the user foreign key rejected the row.
        session.rollback()
        logger.warning("progress rejected for user %s streak %s", user_id, streak_id)
        raise NotFoundError("User not found")
    logger.info("user %s marked streak %s done on %s", user_id, streak_id, day)
    return day


def resolve_range(
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
    window_days: int = PROGRESS_WINDOW_DAYS,
) -> Tuple[date, date]:
    """Fill in a missing bound: the window trails ``end``, or today."""
    today = today or date.today()
    if start is None and end is None:
        end = today
        start = today - timedelta(days=window_days)
    elif start is None:
        start = end - timedelta(days=window_days)
    elif end is None:
        if start > today:
            raise ValidationError("start must not be in the future when end is omitted")
        end = today
    if start > end:
        raise ValidationError("start must not be after end")
    return start, end


def get_progress(
    session: Session,
    user_id: int,
    streak_id: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> List[date]:
    start, end = resolve_range(start, end, today=today)
    statement = (
        select(ProgressEntry.date)
        .where(
            ProgressEntry.user_id == user_id,
            ProgressEntry.streak_id == streak_id,
            ProgressEntry.done.is_(True),
            ProgressEntry.date >= start,
            ProgressEntry.date <= end,
        )
        .order_by(ProgressEntry.date.asc())
    )
    return list(session.exec(statement).all())


def delete_progress(session: Session, user_id: int, streak_id: int, day: date) -> None:
    result = session.execute(
        delete(ProgressEntry).where(
            ProgressEntry.user_id == user_id,
            ProgressEntry.streak_id == streak_id,
            ProgressEntry.date == day,
        )
    )
    session.commit()
    logger.info(
        "user %s cleared streak %s on %s (%d row(s))", user_id, streak_id, day, result.rowcount
    )


def progress_summary(session: Session, user_id: int, streak_id: int, today: Optional[date] = None) -> dict:
    today = today or date.today()
    statement = (
        select(ProgressEntry.date)
        .where(
            ProgressEntry.user_id == user_id,
            ProgressEntry.streak_id == streak_id,
            ProgressEntry.done.is_(True),
            ProgressEntry.date <= today,
        )
        .order_by(ProgressEntry.date.asc())
    )
    days = list(session.exec(statement).all())

    longest = run = 0
    previous = None
    for d in days:
        run = run + 1 if previous is not None and d - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = d

    # the current run may end yesterday if today isn't marked yet
    current = 0
    marked = set(days)
    cursor = today if today in marked else today - timedelta(days=1)
    while cursor in marked:
        current += 1
        cursor -= timedelta(days=1)

    return {"totalDays": len(days), "currentStreak": current, "longestStreak": longest}
