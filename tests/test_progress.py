from datetime import date, timedelta

import pytest
from sqlmodel import select

from streak_tracker import progress
from streak_tracker.errors import NotFoundError, ValidationError
from streak_tracker.models import ProgressEntry


def _rows(session):
    return session.exec(select(ProgressEntry)).all()


def test_mark_done_is_idempotent(session, user, make_streak):
    streak = make_streak()
    day = date(2025, 10, 1)

    assert progress.mark_done(session, user.id, streak.id, day) == day
    assert progress.mark_done(session, user.id, streak.id, day) == day

    rows = _rows(session)
    assert len(rows) == 1
    assert rows[0].done is True


def test_mark_done_defaults_to_today(session, user, make_streak):
    streak = make_streak()
    assert progress.mark_done(session, user.id, streak.id) == date.today()


def test_delete_then_delete_again(session, user, make_streak):
    streak = make_streak()
    day = date(2025, 10, 1)
    progress.mark_done(session, user.id, streak.id, day)

    progress.delete_progress(session, user.id, streak.id, day)
    assert _rows(session) == []
    # absent -> absent
    progress.delete_progress(session, user.id, streak.id, day)
    assert _rows(session) == []


def test_default_window_is_trailing_ninety_days(session, user, make_streak):
    streak = make_streak()
    today = date(2025, 10, 1)
    for offset in (91, 90, 30, 0):
        progress.mark_done(session, user.id, streak.id, today - timedelta(days=offset))
    progress.mark_done(session, user.id, streak.id, today + timedelta(days=1))

    days = progress.get_progress(session, user.id, streak.id, today=today)
    assert days == [today - timedelta(days=90), today - timedelta(days=30), today]


def test_explicit_range_is_inclusive(session, user, make_streak):
    streak = make_streak()
    for d in (1, 5, 10, 15):
        progress.mark_done(session, user.id, streak.id, date(2025, 3, d))

    days = progress.get_progress(session, user.id, streak.id, start=date(2025, 3, 5), end=date(2025, 3, 10))
    assert days == [date(2025, 3, 5), date(2025, 3, 10)]


def test_progress_scoped_to_user_and_streak(session, user, make_user, make_streak):
    someone_else = make_user(name="Bob")
    mine = make_streak(title="mine")
    other = make_streak(title="other")
    day = date(2025, 3, 1)
    progress.mark_done(session, user.id, mine.id, day)
    progress.mark_done(session, someone_else.id, mine.id, day)
    progress.mark_done(session, user.id, other.id, day + timedelta(days=1))

    assert progress.get_progress(session, user.id, mine.id, start=day, end=day + timedelta(days=5)) == [day]


def test_resolve_range_partial_bounds():
    today = date(2025, 6, 30)
    assert progress.resolve_range(start=date(2025, 6, 1), today=today) == (date(2025, 6, 1), today)
    assert progress.resolve_range(end=date(2025, 4, 1), today=today) == (
        date(2025, 4, 1) - timedelta(days=90),
        date(2025, 4, 1),
    )
    with pytest.raises(ValidationError):
        progress.resolve_range(start=date(2025, 6, 2), end=date(2025, 6, 1))
    with pytest.raises(ValidationError, match="end is omitted"):
        progress.resolve_range(start=date(2025, 7, 1), today=today)


def test_summary_counts_runs(session, user, make_streak):
    streak = make_streak()
    today = date(2025, 5, 20)
    for d in (1, 2, 3, 4, 10, 18, 19):
        progress.mark_done(session, user.id, streak.id, date(2025, 5, d))

    summary = progress.progress_summary(session, user.id, streak.id, today=today)
    # today isn't marked yet, so the run ending yesterday still counts
    assert summary == {"totalDays": 7, "currentStreak": 2, "longestStreak": 4}

    progress.mark_done(session, user.id, streak.id, today)
    assert progress.progress_summary(session, user.id, streak.id, today=today)["currentStreak"] == 3


def test_summary_broken_run(session, user, make_streak):
    streak = make_streak()
    progress.mark_done(session, user.id, streak.id, date(2025, 5, 1))

    summary = progress.progress_summary(session, user.id, streak.id, today=date(2025, 5, 20))
    assert summary == {"totalDays": 1, "currentStreak": 0, "longestStreak": 1}


def test_mark_done_unknown_streak(session, user):
    with pytest.raises(NotFoundError, match="Streak not found"):
        progress.mark_done(session, user.id, 999, date(2025, 1, 1))


def test_mark_done_unknown_user_leaves_no_row(session, make_streak):
    streak = make_streak()

    with pytest.raises(NotFoundError, match="User not found"):
        progress.mark_done(session, 4040, streak.id, date(2025, 1, 1))
    assert _rows(session) == []
