"""Deal and payment entities supplied by the deal data collaborator."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class PaymentStatus(str, Enum):
    """Settlement status of a deal payment."""

    COMPLETED = "completed"
    PENDING = "pending"
    RETURNED = "returned"  # Bounced after initially clearing (NSF)
    FAILED = "failed"
    MISSED = "missed"


@dataclass(frozen=True)
class Payment:
    """
    Immutable representation of a single payment against a deal.

    Attributes:
        payment_id: Collaborator-side payment identifier
        amount_cents: Amount collected in cents
        payment_date: Date the payment was due or collected
        status: Settlement status
        nsf_at: Date the payment was flagged as NSF, if it was
    """

    payment_id: str
    amount_cents: int
    payment_date: date
    status: PaymentStatus = PaymentStatus.COMPLETED
    nsf_at: Optional[date] = None

    @property
    def is_nsf(self) -> bool:
        return self.status == PaymentStatus.RETURNED or self.nsf_at is not None

    @property
    def is_missed(self) -> bool:
        return self.status in (PaymentStatus.MISSED, PaymentStatus.FAILED)

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED


@dataclass(frozen=True)
class Deal:
    """
    A funded deal as seen by the risk engine.

    All monetary values are in cents. ``term_days`` is the expected
    repayment term; when unknown the engine falls back to its default.
    """

    deal_id: str
    team_id: str
    funding_amount_cents: int
    payback_amount_cents: int
    total_paid_cents: int = 0
    daily_payment_cents: int = 0
    funded_at: Optional[date] = None
    term_days: Optional[int] = None
    status: str = "active"

    @property
    def percent_paid(self) -> float:
        """Fraction of the payback amount collected so far."""
        if self.payback_amount_cents <= 0:
            return 0.0
        return self.total_paid_cents / self.payback_amount_cents


@dataclass(frozen=True)
class DealHistory:
    """A deal together with its full payment history."""

    deal: Deal
    payments: Tuple[Payment, ...] = field(default_factory=tuple)

    @property
    def deal_id(self) -> str:
        return self.deal.deal_id

    def sorted_payments(self) -> Tuple[Payment, ...]:
        """Payments in chronological order (oldest first)."""
        return tuple(sorted(self.payments, key=lambda p: (p.payment_date, p.payment_id)))
