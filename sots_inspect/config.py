"""Runtime settings, read from the environment (and a local .env file).

    SOTS_DATA_DIR     default data directory for the CLI
    SOTS_EVENTS_FILE  events document name inside the data directory
    SOTS_LOG_LEVEL    log level used by the CLI
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_EVENTS_FILE = "event_data.asset"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    data_dir: Path | None = None
    events_file: str = DEFAULT_EVENTS_FILE
    log_level: str = DEFAULT_LOG_LEVEL


def get_settings() -> Settings:
    data_dir = os.getenv("SOTS_DATA_DIR", "")
    return Settings(
        data_dir=Path(data_dir) if data_dir else None,
        events_file=os.getenv("SOTS_EVENTS_FILE", DEFAULT_EVENTS_FILE),
        log_level=os.getenv("SOTS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
