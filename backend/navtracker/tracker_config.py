"""Tracker configuration loaded from tracker.yaml.

Supports:
- Tracked funds: display name -> AMFI scheme code
- Market holidays (ISO dates); weekends are always non-trading
- Signal parameters: MA periods, dip thresholds, scoring weights
- Backward compatible: no YAML file = the default five funds, no holidays
"""

import logging
from datetime import date
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from navcore.calendar import TradingCalendar
from navcore.errors import ConfigurationError
from navcore.models import Instrument, SignalConfig

logger = logging.getLogger(__name__)

DEFAULT_INSTRUMENTS = {
    "ICICI Pru BA": "120377",  # Balanced Advantage Fund
    "HDFC Mid-Cap": "118989",  # Mid Cap Opportunities
    "Nippon Small Cap": "118778",  # Small Cap Fund
    "UTI Nifty 50": "120716",  # Index Fund
    "PPFAS Flexi Cap": "122639",  # Flexicap Fund
}


class TrackerConfig(BaseModel):
    """Top-level tracker.yaml configuration."""

    instruments: dict[str, str] = dict(DEFAULT_INSTRUMENTS)
    holidays: list[date] = []
    signals: SignalConfig = SignalConfig()

    @field_validator("instruments", mode="before")
    @classmethod
    def _validate_instruments(cls, value) -> dict[str, str]:
        # YAML reads unquoted scheme codes as integers
        if not isinstance(value, dict):
            raise ValueError("instruments must be a mapping of name to scheme code")
        if not value:
            raise ValueError("at least one instrument must be configured")
        codes = [str(code).strip() for code in value.values()]
        if any(not code for code in codes):
            raise ValueError("instrument codes must not be empty")
        if len(set(codes)) != len(codes):
            raise ValueError("instrument codes must be unique")
        return {str(name): str(code).strip() for name, code in value.items()}

    def get_instruments(self) -> list[Instrument]:
        return [Instrument(id=name, code=code) for name, code in self.instruments.items()]

    def get_calendar(self) -> TradingCalendar:
        return TradingCalendar(self.holidays)


def load_tracker_config(path: Path | None = None) -> TrackerConfig:
    """Load tracker config from a YAML file.

    Falls back to defaults if the file doesn't exist. Raises
    ConfigurationError if it exists but is unreadable or invalid.
    """
    if path is None:
        from navtracker.config import get_settings

        path = get_settings().tracker_config_path

    load_dotenv(path.parent / ".env", override=False)

    if not path.exists():
        logger.info(f"No tracker config at {path}, using defaults")
        return TrackerConfig()

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read tracker config {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Tracker config {path} must be a mapping")

    try:
        config = TrackerConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid tracker config {path}: {e}") from e

    logger.info(
        f"Loaded tracker config: {len(config.instruments)} instruments, "
        f"{len(config.holidays)} holidays"
    )
    return config
