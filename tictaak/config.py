from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    timezone: str = "Europe/Amsterdam"
    printer_host: str = "192.168.50.195"
    printer_port: int = 9100
    printer_timeout: int = 10
    upcoming_days: int = 30


load_env()

# The store is optional to configure; tickets are kept in a local SQLite file by default.
DATABASE_URL = os.getenv("DATABASE_URL", "").strip() or f"sqlite:///{PROJECT_ROOT / 'tictaak.db'}"

SETTINGS = Settings(
    database_url=DATABASE_URL,
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    timezone=os.getenv("TICTAAK_TIMEZONE", "Europe/Amsterdam").strip() or "Europe/Amsterdam",
    printer_host=os.getenv("PRINTER_HOST", "192.168.50.195"),
    printer_port=int(os.getenv("PRINTER_PORT", "9100")),
    printer_timeout=int(os.getenv("PRINTER_TIMEOUT", "10")),
    upcoming_days=int(os.getenv("UPCOMING_DAYS", "30")),
)
