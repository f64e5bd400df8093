"""Builders for deal histories used across the test suite."""

from datetime import date, timedelta
from typing import List, Optional, Sequence

from deal_risk.domain.entities import Deal, DealHistory, Payment, PaymentStatus

AS_OF = date(2024, 6, 30)
DAILY_PAYMENT_CENTS = 10_000


def make_deal(
    deal_id: str = "deal_1",
    team_id: str = "team_1",
    payback_amount_cents: int = 1_200_000,
    total_paid_cents: int = 0,
    daily_payment_cents: int = DAILY_PAYMENT_CENTS,
    funded_days_ago: Optional[int] = 60,
    term_days: Optional[int] = 120,
    as_of: date = AS_OF,
) -> Deal:
    """Create a deal funded ``funded_days_ago`` days before ``as_of``."""
    return Deal(
        deal_id=deal_id,
        team_id=team_id,
        funding_amount_cents=int(payback_amount_cents / 1.4),
        payback_amount_cents=payback_amount_cents,
        total_paid_cents=total_paid_cents,
        daily_payment_cents=daily_payment_cents,
        funded_at=None if funded_days_ago is None else as_of - timedelta(days=funded_days_ago),
        term_days=term_days,
    )


def payment(
    days_ago: int,
    amount_cents: int = DAILY_PAYMENT_CENTS,
    status: PaymentStatus = PaymentStatus.COMPLETED,
    as_of: date = AS_OF,
    payment_id: Optional[str] = None,
) -> Payment:
    """Create a payment dated ``days_ago`` days before ``as_of``."""
    return Payment(
        payment_id=payment_id or f"pay_{days_ago:04d}",
        amount_cents=amount_cents,
        payment_date=as_of - timedelta(days=days_ago),
        status=status,
    )


def statuses_to_payments(
    statuses: Sequence[PaymentStatus],
    as_of: date = AS_OF,
    amount_cents: int = DAILY_PAYMENT_CENTS,
) -> List[Payment]:
    """
    One payment per day ending on ``as_of``; the last status is the most recent.
    """
    count = len(statuses)
    return [
        payment(count - 1 - i, amount_cents=amount_cents, status=status, as_of=as_of)
        for i, status in enumerate(statuses)
    ]


def clean_history(
    deal_id: str = "deal_1",
    team_id: str = "team_1",
    as_of: date = AS_OF,
) -> DealHistory:
    """Sixty on-time payments, exactly on schedule for a 120-day term."""
    payments = statuses_to_payments([PaymentStatus.COMPLETED] * 60, as_of=as_of)
    deal = make_deal(
        deal_id=deal_id,
        team_id=team_id,
        total_paid_cents=60 * DAILY_PAYMENT_CENTS,
        as_of=as_of,
    )
    return DealHistory(deal=deal, payments=tuple(payments))


def troubled_history(
    deal_id: str = "deal_1",
    team_id: str = "team_1",
    as_of: date = AS_OF,
) -> DealHistory:
    """On time for 55 days, then five straight misses ending on ``as_of``."""
    statuses = [PaymentStatus.COMPLETED] * 55 + [PaymentStatus.MISSED] * 5
    payments = statuses_to_payments(statuses, as_of=as_of)
    deal = make_deal(
        deal_id=deal_id,
        team_id=team_id,
        total_paid_cents=55 * DAILY_PAYMENT_CENTS,
        as_of=as_of,
    )
    return DealHistory(deal=deal, payments=tuple(payments))


def empty_history(deal_id: str = "deal_1", team_id: str = "team_1") -> DealHistory:
    """An unfunded deal without payments: no factor has any evidence."""
    deal = make_deal(
        deal_id=deal_id,
        team_id=team_id,
        daily_payment_cents=0,
        funded_days_ago=None,
    )
    return DealHistory(deal=deal)


def bounced_history(
    deal_id: str = "deal_1",
    team_id: str = "team_1",
    as_of: date = AS_OF,
) -> DealHistory:
    """Ten straight returned payments and nothing collected."""
    payments = statuses_to_payments([PaymentStatus.RETURNED] * 10, as_of=as_of)
    deal = make_deal(deal_id=deal_id, team_id=team_id, total_paid_cents=0, as_of=as_of)
    return DealHistory(deal=deal, payments=tuple(payments))
