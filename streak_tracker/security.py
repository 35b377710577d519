"""Credential service: password hashing, sign-up/sign-in and JWT tokens."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from .database import get_session
from .errors import ConflictError, InvalidCredentialsError
from .models import User

logger = logging.getLogger("streak_tracker.security")

# ----- Security -----
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/signin")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def issue_token(user: User) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": str(user.id), "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def register(session: Session, name: str, email: str, password: str) -> Tuple[User, str]:
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise ConflictError("Email already registered")
    user = User(name=name, email=email, password_hash=get_password_hash(password))
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent sign-up for the same email.
        session.rollback()
        raise ConflictError("Email already registered")
    session.refresh(user)
    logger.info("registered user %s", user.id)
    return user, issue_token(user)


def authenticate(session: Session, email: str, password: str) -> Tuple[User, str]:
    user = session.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    return user, issue_token(user)


def get_current_user(token: str = Depends(oauth2_scheme), session: Session = Depends(get_session)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        user_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception
    user = session.get(User, user_id)
    if user is None:
        raise credentials_exception
    return user
