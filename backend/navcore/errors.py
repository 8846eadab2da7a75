"""Exception taxonomy for the NAV tracker."""

from __future__ import annotations

from datetime import date


class NavTrackerError(Exception):
    """Base class for all NAV tracker errors."""


class ConfigurationError(NavTrackerError):
    """Tracker configuration is missing or invalid. Halts the run."""


class ProviderUnavailable(NavTrackerError):
    """The market data provider produced no usable report for one date."""

    def __init__(self, day: date, reason: str):
        self.day = day
        self.reason = reason
        super().__init__(f"No usable report for {day.isoformat()}: {reason}")


class NoTradingDataFound(NavTrackerError):
    """Every candidate date in the lookback budget failed. Fatal to the run."""

    def __init__(self, searched: list[date]):
        self.searched = searched
        if searched:
            span = f"{searched[-1].isoformat()}..{searched[0].isoformat()}"
        else:
            span = "no trading days in range"
        super().__init__(
            f"No complete trading data found ({len(searched)} dates tried, {span})"
        )


class DuplicateDate(NavTrackerError):
    """A row for this date is already stored."""

    def __init__(self, day: date):
        self.day = day
        super().__init__(f"Row for {day.isoformat()} already exists")


class IncompleteRow(NavTrackerError):
    """One or more instruments could not be resolved for a date."""

    def __init__(self, day: date, missing: list[str]):
        self.day = day
        self.missing = missing
        super().__init__(
            f"Incomplete row for {day.isoformat()}: missing {', '.join(missing)}"
        )


class RepairNotFound(NavTrackerError):
    """A missing cell could not be healed within the lookback budget."""

    def __init__(self, day: date, instrument: str):
        self.day = day
        self.instrument = instrument
        super().__init__(f"No value found for {instrument} on {day.isoformat()}")
