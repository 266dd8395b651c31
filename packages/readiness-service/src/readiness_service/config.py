"""
Service settings, read from the environment (and a ``.env`` file if present).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_STATE_PATH = Path.home() / ".exit-readiness" / "state.json"


@dataclass(frozen=True)
class Settings:
    spec_source: str = "packaged"
    spec_path: Optional[str] = None
    state_path: str = str(DEFAULT_STATE_PATH)
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Current settings; read on every call so tests can patch the environment."""
    return Settings(
        spec_source=os.getenv("READINESS_SPEC_SOURCE", "packaged"),
        spec_path=os.getenv("READINESS_SPEC_PATH") or None,
        state_path=os.getenv("READINESS_STATE_PATH", str(DEFAULT_STATE_PATH)),
        log_level=os.getenv("READINESS_LOG_LEVEL", "INFO").upper(),
    )
