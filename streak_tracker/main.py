import logging
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from . import catalog, membership, progress, security
from .config import CORS_ORIGINS, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, configure_logging
from .database import create_db_and_tables, get_session
from .errors import ValidationError, install_error_handlers
from .models import User
from .schemas import (
    AuthOut,
    JoinIn,
    MarkDoneIn,
    ProgressSummary,
    SigninIn,
    SignupIn,
    StreakCreate,
    StreakRead,
    UserRead,
    UserStreakRead,
)

logger = logging.getLogger("streak_tracker")

# ----- App -----
app = FastAPI(title="Streak Tracker API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_error_handlers(app)


@app.on_event("startup")
def on_startup():
    configure_logging()
    create_db_and_tables()
    logger.info("Streak Tracker API ready")


def _require_user_id(user_id: Optional[int]) -> int:
    if user_id is None:
        raise ValidationError("User ID is required")
    return user_id


# ----- Auth endpoints -----
@app.post("/signup", response_model=AuthOut)
def signup(user_in: SignupIn, session: Session = Depends(get_session)):
    if not user_in.name or not user_in.email or not user_in.password:
        raise ValidationError("All fields are required")
    user, token = security.register(session, user_in.name, user_in.email, user_in.password)
    return AuthOut(user=UserRead.from_user(user), token=token)


@app.post("/signin", response_model=AuthOut)
def signin(credentials: SigninIn, session: Session = Depends(get_session)):
    if not credentials.email or not credentials.password:
        raise ValidationError("All fields are required")
    user, token = security.authenticate(session, credentials.email, credentials.password)
    return AuthOut(user=UserRead.from_user(user), token=token)


@app.get("/me", response_model=UserRead)
def me(current_user: User = Depends(security.get_current_user)):
    return UserRead.from_user(current_user)


# ----- Streak catalog endpoints -----
@app.get("/streaks", response_model=List[StreakRead])
def list_streaks(
    offset: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    difficulty: Optional[str] = None,
    order: str = "popular",
    session: Session = Depends(get_session),
):
    streaks = catalog.list_streaks(session, offset=offset, limit=limit, difficulty=difficulty, order=order)
    return [StreakRead.from_streak(s) for s in streaks]


@app.post("/streaks", response_model=StreakRead, status_code=201)
def create_streak(streak_in: StreakCreate, session: Session = Depends(get_session)):
    if not streak_in.title:
        raise ValidationError("Title is required")
    streak = catalog.create_streak(
        session,
        title=streak_in.title,
        author=streak_in.author,
        difficulty=streak_in.difficulty,
        description=streak_in.description,
        participant_count=streak_in.participantCount or 0,
        emoji=streak_in.emoji,
    )
    return StreakRead.from_streak(streak)


@app.get("/streak/{streak_id}", response_model=StreakRead)
def get_streak(streak_id: int, session: Session = Depends(get_session)):
    return StreakRead.from_streak(catalog.get_streak(session, streak_id))


# ----- Membership endpoints -----
@app.post("/streak/{streak_id}/join")
def join_streak(streak_id: int, join_in: JoinIn, session: Session = Depends(get_session)):
    user_id = _require_user_id(join_in.userId)
    membership.join_streak(session, user_id, streak_id)
    return {"message": "Streak joined successfully"}


@app.get("/user/{user_id}/streaks", response_model=List[UserStreakRead])
def user_streaks(user_id: int, session: Session = Depends(get_session)):
    rows = membership.list_user_streaks(session, user_id)
    return [
        UserStreakRead(**StreakRead.from_streak(streak).model_dump(), joined_at=joined_at)
        for streak, joined_at in rows
    ]


# ----- Progress endpoints -----
@app.get("/streak/{streak_id}/progress", response_model=List[date])
def get_progress(
    streak_id: int,
    user_id: Optional[int] = Query(None, alias="userId"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
):
    user_id = _require_user_id(user_id)
    return progress.get_progress(session, user_id, streak_id, start=start, end=end)


@app.post("/streak/{streak_id}/progress")
def mark_done(streak_id: int, mark_in: MarkDoneIn, session: Session = Depends(get_session)):
    user_id = _require_user_id(mark_in.userId)
    day = progress.mark_done(session, user_id, streak_id, mark_in.date)
    return {"message": "Marked done", "date": day.isoformat()}


@app.delete("/streak/{streak_id}/progress")
def delete_progress(
    streak_id: int,
    user_id: Optional[int] = Query(None, alias="userId"),
    day: Optional[date] = Query(None, alias="date"),
    session: Session = Depends(get_session),
):
    user_id = _require_user_id(user_id)
    if day is None:
        raise ValidationError("Date is required")
    progress.delete_progress(session, user_id, streak_id, day)
    return {"success": True}


@app.get("/streak/{streak_id}/progress/summary", response_model=ProgressSummary)
def progress_summary(
    streak_id: int,
    user_id: Optional[int] = Query(None, alias="userId"),
    session: Session = Depends(get_session),
):
    user_id = _require_user_id(user_id)
    return progress.progress_summary(session, user_id, streak_id)
