# compliancetrack/core/config.py
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv, find_dotenv

# ---------------------------
# Env loading (root .env first, then compliancetrack/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./compliancetrack.db")
ENABLE_CREATE_ALL = os.getenv("ENABLE_CREATE_ALL", "1") == "1"

# --- Auth ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
MAX_FAILED_ATTEMPTS = _int_env("MAX_FAILED_ATTEMPTS", 5)
LOCKOUT_MINUTES = _int_env("LOCKOUT_MINUTES", 15)

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Scheduler ---
ENABLE_SCHEDULER = os.getenv("ENABLE_SCHEDULER", "1") == "1"
APP_TIMEZONE = os.getenv("APP_TIMEZONE")
APP_SCHEDULER_HOUR = _int_env("APP_SCHEDULER_HOUR", 7)
APP_SCHEDULER_MINUTE = _int_env("APP_SCHEDULER_MINUTE", 0)

# --- LLM gateway (OpenAI-compatible chat completions) ---
AI_GATEWAY_URL = os.getenv("AI_GATEWAY_URL", "")
AI_GATEWAY_API_KEY = os.getenv("AI_GATEWAY_API_KEY", "")
AI_GATEWAY_MODEL = os.getenv("AI_GATEWAY_MODEL", "google/gemini-2.5-flash")
AI_GATEWAY_TIMEOUT = float(os.getenv("AI_GATEWAY_TIMEOUT", "60"))
AI_RATE_LIMIT_PER_MINUTE = _int_env("AI_RATE_LIMIT_PER_MINUTE", 10)

# --- Transactional e-mail API ---
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "https://api.resend.com/emails")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "ComplianceTrack <no-reply@compliancetrack.app>")
EMAIL_TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", "15"))
APP_PUBLIC_URL = os.getenv("APP_PUBLIC_URL", "http://localhost:5173")
DEADLINE_EMAIL_WINDOW_DAYS = _int_env("DEADLINE_EMAIL_WINDOW_DAYS", 7)
