"""Environment-driven settings for the app and CLI."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from stddrinks.calculations import EliminationProfile, Sex

DEFAULT_WEIGHT_KG = 80.0
DEFAULT_FIRST_HOUR_BURN = 1.0
DEFAULT_SUBSEQUENT_HOUR_BURN = 1.0


def _float_from_env(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


@dataclass(frozen=True)
class AppConfig:
    secret_key: str
    session_cookie_secure: bool
    gemini_api_key: str
    gemini_model: str
    log_level: str
    log_json: bool
    default_profile: EliminationProfile


def load_config() -> AppConfig:
    """Read settings from the environment; malformed numbers fall back to defaults."""
    return AppConfig(
        secret_key=os.environ.get("APP_SECRET_KEY", "dev-only-change-me"),
        session_cookie_secure=os.environ.get("SESSION_COOKIE_SECURE", "0") == "1",
        gemini_api_key=os.environ.get("GEMINI_API_KEY", ""),
        gemini_model=os.environ.get("GEMINI_MODEL", "gemini-2.5-flash"),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_json=os.environ.get("LOG_JSON", "0").strip().lower() in {"1", "true", "yes", "on"},
        default_profile=EliminationProfile(
            first_hour_burn=_float_from_env("DEFAULT_FIRST_HOUR_BURN", DEFAULT_FIRST_HOUR_BURN),
            subsequent_hour_burn=_float_from_env("DEFAULT_SUBSEQUENT_HOUR_BURN", DEFAULT_SUBSEQUENT_HOUR_BURN),
            weight_kg=_float_from_env("DEFAULT_WEIGHT_KG", DEFAULT_WEIGHT_KG),
            sex=Sex.parse(os.environ.get("DEFAULT_SEX"), default=Sex.MALE),
        ),
    )
