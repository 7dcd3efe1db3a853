"""
Application settings.

Values are read from the environment (and backend/.env when present).
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


class Settings:
    """Environment-backed settings for the API and its model integrations."""

    # Gemini
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL") or "gemini-2.5-flash"

    # Timeouts for the remote model calls (seconds)
    AI_MATCHING_TIMEOUT: float = _get_float("AI_MATCHING_TIMEOUT", 20.0)
    SCRIPT_ANALYSIS_TIMEOUT: float = _get_float("SCRIPT_ANALYSIS_TIMEOUT", 30.0)

    # Supabase (media catalog + workflow state)
    SUPABASE_URL: Optional[str] = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # Auth
    AUTH_JWT_SECRET: Optional[str] = os.getenv("AUTH_JWT_SECRET")
    AUTH_JWT_AUDIENCE: str = os.getenv("AUTH_JWT_AUDIENCE") or "authenticated"

    LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").upper()

    # Vercel previews and local dev servers
    CORS_ORIGIN_REGEX: str = (
        os.getenv("CORS_ORIGIN_REGEX")
        or r"^https:\/\/.*\.vercel\.app$|^http:\/\/localhost:\d+$|^http:\/\/127\.0\.0\.1:\d+$"
    )

    @classmethod
    def get_gemini_api_key(cls) -> str:
        if not cls.GEMINI_API_KEY:
            raise ValueError(
                "GEMINI_API_KEY not found in environment variables. "
                "Set it in backend/.env to enable script analysis and AI matching."
            )
        return cls.GEMINI_API_KEY
