"""Market data provider clients."""

from navtracker.clients.amfi import AmfiClient

__all__ = ["AmfiClient"]
