import logging
import os

from dotenv import load_dotenv

load_dotenv()

# ----- Configuration -----
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./streaks.db")
SQL_ECHO = os.environ.get("SQL_ECHO", "false").lower() in ("1", "true", "yes")

SECRET_KEY = os.environ.get("JWT_SECRET", "supersecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", 8))
MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", 100))
PROGRESS_WINDOW_DAYS = int(os.environ.get("PROGRESS_WINDOW_DAYS", 90))

DEFAULT_EMOJI = "🎯"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
