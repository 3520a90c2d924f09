# viewer_core/config.py
from __future__ import annotations
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

APP_DIR = Path(__file__).resolve().parents[1] / "viewer_app"
DEFAULT_HINTS = APP_DIR / "sql_hints.txt"

@dataclass
class Settings:
    db_path: str
    hints_path: Path
    max_history: int
    max_plots: int
    cell_width: int
    log_level: str

def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        val = int(raw)
    except ValueError:
        return default
    return val if val > 0 else default

def get_settings() -> Settings:
    db_path = os.getenv("SQLITE_VIEWER_DB", "").strip()
    hints = os.getenv("SQLITE_VIEWER_HINTS", "").strip()
    log_level = os.getenv("SQLITE_VIEWER_LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        db_path=db_path,
        hints_path=Path(hints) if hints else DEFAULT_HINTS,
        max_history=_int_env("SQLITE_VIEWER_HISTORY", 10),
        max_plots=_int_env("SQLITE_VIEWER_MAX_PLOTS", 3),
        cell_width=_int_env("SQLITE_VIEWER_CELL_WIDTH", 15),
        log_level=log_level,
    )

def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
