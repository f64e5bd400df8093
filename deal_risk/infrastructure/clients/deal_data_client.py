"""HTTP implementation of DealDataClient."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx
import structlog

from deal_risk.core.config import settings
from deal_risk.core.metrics import record_deal_fetch_failure, track_deal_fetch_latency
from deal_risk.domain.entities import Deal, DealHistory, Payment, PaymentStatus
from deal_risk.domain.exceptions import (
    DealDataAccessException,
    DealDataTimeoutException,
    DealNotFoundException,
)
from deal_risk.domain.interfaces import DealDataClient

logger = structlog.get_logger(__name__)


class HttpDealDataClient(DealDataClient):
    """
    HTTP client for the deal data API.

    Makes exactly one attempt per call. Retrying is left to the caller,
    which for bulk runs means the failed deal is reported and the
    operator re-runs it.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.deal_api_url).rstrip("/")
        self._timeout = timeout or settings.deal_api_timeout
        self._transport = transport

    async def fetch_deal_history(self, deal_id: str, team_id: str) -> DealHistory:
        """Fetch a deal and all of its payments."""
        data = await self._get(
            f"/deals/{deal_id}/history",
            params={"team_id": team_id},
            not_found=lambda: DealNotFoundException(deal_id, team_id),
        )
        try:
            return self._parse_history(data, team_id)
        except (KeyError, TypeError, ValueError) as e:
            record_deal_fetch_failure("invalid_payload")
            raise DealDataAccessException(f"Malformed deal history for {deal_id}: {e}") from e

    async def list_deal_ids(self, team_id: str) -> List[str]:
        """List the identifiers of every deal of a team."""
        data = await self._get("/deals", params={"team_id": team_id})
        try:
            return [str(item["deal_id"]) for item in data["deals"]]
        except (KeyError, TypeError) as e:
            record_deal_fetch_failure("invalid_payload")
            raise DealDataAccessException(f"Malformed deal list for team {team_id}: {e}") from e

    async def _get(self, path: str, params: Dict[str, str], not_found=None) -> Any:
        url = f"{self._base_url}{path}"

        try:
            with track_deal_fetch_latency():
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            record_deal_fetch_failure("timeout")
            logger.warning("deal_api_timeout", path=path, **params)
            raise DealDataTimeoutException() from e
        except httpx.HTTPError as e:
            record_deal_fetch_failure("error")
            logger.error("deal_api_error", path=path, error=str(e), **params)
            raise DealDataAccessException(f"Deal API request failed: {e}") from e

        if response.status_code == 404 and not_found is not None:
            record_deal_fetch_failure("not_found")
            raise not_found()

        if response.status_code >= 400:
            record_deal_fetch_failure("error")
            raise DealDataAccessException(
                message=f"Deal API error: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            record_deal_fetch_failure("invalid_payload")
            raise DealDataAccessException("Deal API returned invalid JSON") from e

    def _parse_history(self, data: Dict[str, Any], team_id: str) -> DealHistory:
        """Parse raw API response into deal entities."""
        raw_deal = data["deal"]

        deal = Deal(
            deal_id=str(raw_deal["deal_id"]),
            team_id=str(raw_deal.get("team_id", team_id)),
            funding_amount_cents=_cents(raw_deal, "funding_amount"),
            payback_amount_cents=_cents(raw_deal, "payback_amount"),
            total_paid_cents=_cents(raw_deal, "total_paid"),
            daily_payment_cents=_cents(raw_deal, "daily_payment"),
            funded_at=_parse_date(raw_deal.get("funded_at")),
            term_days=_term_days(raw_deal.get("term_days")),
            status=raw_deal.get("status", "active"),
        )

        payments = tuple(
            Payment(
                payment_id=str(item["payment_id"]),
                amount_cents=_cents(item, "amount"),
                payment_date=_parse_date(item["payment_date"]),
                status=PaymentStatus(item.get("status", PaymentStatus.COMPLETED.value)),
                nsf_at=_parse_date(item.get("nsf_at")),
            )
            for item in data.get("payments", [])
        )

        return DealHistory(deal=deal, payments=payments)


def _cents(item: Dict[str, Any], name: str) -> int:
    """Read ``<name>_cents``, falling back to a dollar amount under ``<name>``."""
    cents = item.get(f"{name}_cents")
    if cents is not None:
        if isinstance(cents, bool) or not isinstance(cents, int):
            raise ValueError(f"{name}_cents must be an integer, got {cents!r}")
        return cents
    amount = item.get(name)
    if amount is None:
        return 0
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValueError(f"{name} must be a number, got {amount!r}")
    return int(round(amount * 100))


def _term_days(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"term_days must be a positive integer, got {value!r}")
    return value


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    if "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return datetime.strptime(value, "%Y-%m-%d").date()
