# backend/wellness/config.py
import os
import logging.config
from dotenv import load_dotenv

load_dotenv(dotenv_path=os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./wellness.db")
CREATE_TABLES_ON_STARTUP = os.getenv("CREATE_TABLES_ON_STARTUP", "true").lower() == "true"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
OPENAI_TIMEOUT_S = float(os.getenv("OPENAI_TIMEOUT_S", "15"))

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:8081,http://localhost:19006").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

WELLNESS_COACH_SYSTEM_PROMPT = """You are an empathetic and professional mental wellness coach. Your responses should be:
1. Supportive and encouraging
2. Based on positive psychology principles
3. Focused on practical solutions
4. Brief but meaningful (50-100 words)
5. Never provide medical advice
6. Use emojis occasionally for warmth
"""

JOURNAL_ASSISTANT_SYSTEM_PROMPT = (
    "You are an empathetic journaling assistant. Provide brief, insightful reflections "
    "and gentle questions based on the journal entry. Keep responses under 100 words."
)


def configure_logging(level: str | None = None) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
        },
        "loggers": {
            "wellness": {"handlers": ["console"], "level": level or LOG_LEVEL, "propagate": False},
        },
    })
