"""Membership tracker: joining streaks and the participant counter.

The membership insert and the ``participant_count`` increment commit in a
single transaction. The ``user_streaks`` unique constraint is the final word
on "already joined"; a violation from a concurrent join is reported the same
way as a duplicate found by the earlier read.
"""

import logging
from datetime import datetime
from typing import List, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .errors import AlreadyJoinedError, NotFoundError, StorageError
from .models import Membership, Streak, utcnow

logger = logging.getLogger("streak_tracker.membership")


def _membership_exists(session: Session, user_id: int, streak_id: int) -> bool:
    statement = select(Membership.id).where(
        Membership.user_id == user_id, Membership.streak_id == streak_id
    )
    return session.exec(statement).first() is not None


def join_streak(session: Session, user_id: int, streak_id: int) -> Membership:
    if session.get(Streak, streak_id) is None:
        raise NotFoundError("Streak not found")
    if _membership_exists(session, user_id, streak_id):
        raise AlreadyJoinedError()

    membership = Membership(user_id=user_id, streak_id=streak_id, joined_at=utcnow())
    try:
        session.add(membership)
        session.flush()
        session.execute(
            update(Streak)
            .where(Streak.id == streak_id)
            .values(participant_count=Streak.participant_count + 1)
        )
        session.commit()
    except IntegrityError:
        session.rollback()
        if _membership_exists(session, user_id, streak_id):
            raise AlreadyJoinedError()
        # Not a duplicate, so a foreign key (e.g. unknown user) rejected the row.
        logger.warning("membership insert rejected for user %s streak %s", user_id, streak_id)
        raise NotFoundError("User not found")
    except SQLAlchemyError:
        session.rollback()
        logger.exception("join failed for user %s streak %s", user_id, streak_id)
        raise StorageError()

    logger.info("user %s joined streak %s", user_id, streak_id)
    return membership


def list_user_streaks(session: Session, user_id: int) -> List[Tuple[Streak, datetime]]:
    statement = (
        select(Streak, Membership.joined_at)
        .join(Membership, Membership.streak_id == Streak.id)
        .where(Membership.user_id == user_id)
        .order_by(Membership.joined_at.desc(), Membership.id.desc())
    )
    return [(streak, joined_at) for streak, joined_at in session.exec(statement).all()]
