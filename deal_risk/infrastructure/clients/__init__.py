"""External API client implementations."""

from .deal_data_client import HttpDealDataClient

__all__ = [
    "HttpDealDataClient",
]
