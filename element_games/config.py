from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import InvalidConfigError

# =========================================================
# Environment-driven settings
# ELEMENT_GAMES_DATA_PATH        -> element dataset (PeriodicTableJSON.json)
# ELEMENT_GAMES_LOG_LEVEL        -> DEBUG / INFO / WARNING ...
# ELEMENT_GAMES_LIGHTNING_SECONDS -> lightning time budget
# STREAMLIT_ENV = "prod"         -> hides the debug panel in the app
# =========================================================
DEFAULT_DATA_PATH = "PeriodicTableJSON.json"
DEFAULT_LIGHTNING_SECONDS = 60


@dataclass(frozen=True)
class GameSettings:
    data_path: str = DEFAULT_DATA_PATH
    log_level: str = "INFO"
    lightning_seconds: int = DEFAULT_LIGHTNING_SECONDS
    is_production: bool = False

    def __post_init__(self):
        if self.lightning_seconds <= 0:
            raise InvalidConfigError("lightning_seconds must be positive")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise InvalidConfigError(f"unknown log level {self.log_level!r}")

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameSettings":
        env = os.environ if environ is None else environ
        raw_seconds = env.get("ELEMENT_GAMES_LIGHTNING_SECONDS", str(DEFAULT_LIGHTNING_SECONDS))
        try:
            seconds = int(raw_seconds)
        except ValueError as exc:
            raise InvalidConfigError(f"ELEMENT_GAMES_LIGHTNING_SECONDS is not an integer: {raw_seconds!r}") from exc
        return cls(
            data_path=env.get("ELEMENT_GAMES_DATA_PATH", DEFAULT_DATA_PATH),
            log_level=env.get("ELEMENT_GAMES_LOG_LEVEL", "INFO"),
            lightning_seconds=seconds,
            is_production=env.get("STREAMLIT_ENV") == "prod",
        )


def configure_logging(settings: GameSettings) -> None:
    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
