"""Shared report retrieval for the resolver and gap repair.

A report is usable only if the provider answered with a success status,
a non-empty body and no "no data found" marker. Anything else is a
ProviderUnavailable for that date and the caller moves on to an earlier
date; the same date is never re-requested reactively.
"""

from __future__ import annotations

import logging
from datetime import date

from navcore.errors import ProviderUnavailable
from navcore.models import ProviderResponse
from navcore.protocol import MarketDataProvider

logger = logging.getLogger(__name__)


def ensure_usable(response: ProviderResponse, day: date) -> list[str]:
    """Return the report lines, or raise ProviderUnavailable."""
    if not response.status_ok:
        raise ProviderUnavailable(day, f"status {response.status_code}")
    if response.is_empty:
        raise ProviderUnavailable(day, "empty body")
    if response.not_found:
        raise ProviderUnavailable(day, "no data found")
    return response.lines


class ReportReader:
    """Fetches usable report lines per date.

    With cache=True, a date's outcome (lines or failure) is remembered so
    one pass never requests the same date twice.
    """

    def __init__(self, provider: MarketDataProvider, cache: bool = False):
        self._provider = provider
        self._cache: dict[date, list[str] | None] | None = {} if cache else None
        self.requests = 0

    async def read(self, day: date) -> list[str] | None:
        """Usable lines for the date, or None if the provider had none."""
        if self._cache is not None and day in self._cache:
            return self._cache[day]

        lines: list[str] | None
        try:
            self.requests += 1
            response = await self._provider.fetch(day)
            lines = ensure_usable(response, day)
            logger.info(f"Fetched report for {day.isoformat()} ({len(lines)} lines)")
        except ProviderUnavailable as e:
            logger.warning(f"{e}")
            lines = None

        if self._cache is not None:
            self._cache[day] = lines
        return lines
