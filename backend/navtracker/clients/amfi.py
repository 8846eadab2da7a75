"""AMFI NAV history report client."""

import logging
from datetime import date

import httpx

from navcore.errors import ProviderUnavailable
from navcore.models import ProviderResponse
from navtracker.config import AMFI_NAV_HISTORY_URL

logger = logging.getLogger(__name__)

NO_DATA_SENTINEL = "No data found"


def format_report_date(day: date) -> str:
    """AMFI expects dd-Mon-yyyy, e.g. 05-Mar-2025."""
    return day.strftime("%d-%b-%Y")


class AmfiClient:
    """Fetches the daily NAV history report for a date.

    HTTP status codes are reported on the response rather than raised, so
    the caller can treat every failure as "try an earlier date".
    """

    def __init__(
        self,
        base_url: str = AMFI_NAV_HISTORY_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AmfiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def fetch(self, day: date) -> ProviderResponse:
        """
        Fetch the NAV report for one date.

        Args:
            day: Report date

        Returns:
            ProviderResponse with status, body lines and the no-data flag

        Raises:
            ProviderUnavailable: On transport errors (timeouts, DNS, resets)
        """
        client = await self._get_client()
        params = {"frmdt": format_report_date(day)}
        try:
            response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise ProviderUnavailable(day, f"{type(e).__name__}: {e}") from e

        text = response.text
        logger.debug(
            f"AMFI {params['frmdt']}: HTTP {response.status_code}, {len(text)} bytes"
        )
        return ProviderResponse(
            status_ok=response.status_code == 200,
            status_code=response.status_code,
            lines=text.splitlines(),
            not_found=NO_DATA_SENTINEL.lower() in text.lower(),
        )
