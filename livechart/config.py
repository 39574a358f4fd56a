# livechart/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Loads variables from a local .env file into environment variables (dev only).
load_dotenv()


@dataclass(frozen=True)
class Settings:
    # App config
    app_env: str = "local"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    # Chart window config
    window_capacity: int = 100
    tick_interval_ms: int = 1000
    start_price: float = 100.0
    random_seed: Optional[int] = None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None


def get_settings() -> Settings:
    """
    Reads env vars and returns a Settings object.
    """
    capacity = _env_int("WINDOW_CAPACITY", 100)
    if capacity < 1:
        raise RuntimeError(f"WINDOW_CAPACITY must be >= 1, got {capacity}")

    interval_ms = _env_int("TICK_INTERVAL_MS", 1000)
    if interval_ms <= 0:
        raise RuntimeError(f"TICK_INTERVAL_MS must be > 0, got {interval_ms}")

    seed_raw = os.getenv("RANDOM_SEED", "").strip()
    seed = _env_int("RANDOM_SEED", 0) if seed_raw else None

    return Settings(
        app_env=os.getenv("APP_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_env_int("PORT", 8000),
        window_capacity=capacity,
        tick_interval_ms=interval_ms,
        start_price=_env_float("START_PRICE", 100.0),
        random_seed=seed,
    )
