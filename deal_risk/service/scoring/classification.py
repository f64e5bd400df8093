"""
Payment Classification for the Deal Risk Engine.

Labels every payment of a deal so the payment-based factors can read a
uniform stream of on-time payments, shortfalls, misses and recoveries.
"""

from typing import List, Tuple

from deal_risk.domain.entities import DealHistory

from .models import ClassifiedPayment, PaymentClass
from .settings import ScoringSettings, scoring_settings


def classify_payments(
    history: DealHistory,
    settings: ScoringSettings = scoring_settings,
) -> Tuple[ClassifiedPayment, ...]:
    """
    Classify a deal's payments in chronological order.

    Algorithm:
        1. Sort payments oldest first
        2. Returned payments or payments with an NSF date -> nsf
        3. Missed or failed payments -> missed
        4. Any other non-completed payment (e.g. pending) is skipped
        5. The first completed payment after one or more misses -> recovery
        6. Otherwise compare the amount with the expected daily payment:
           below (1 - tolerance) -> partial, above (1 + tolerance) ->
           overpayment, else on_time

    Without an expected daily payment every cleared payment that is not
    a recovery counts as on_time.

    Args:
        history: The deal and its payments
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Classified payments, oldest first
    """
    expected = max(0, history.deal.daily_payment_cents)
    tolerance = settings.payment_tolerance

    classified: List[ClassifiedPayment] = []
    consecutive_misses = 0

    for payment in history.sorted_payments():
        if payment.is_nsf:
            kind = PaymentClass.NSF
        elif payment.is_missed:
            kind = PaymentClass.MISSED
        elif not payment.is_completed:
            continue
        elif consecutive_misses > 0:
            kind = PaymentClass.RECOVERY
        elif expected > 0 and payment.amount_cents < expected * (1 - tolerance):
            kind = PaymentClass.PARTIAL
        elif expected > 0 and payment.amount_cents > expected * (1 + tolerance):
            kind = PaymentClass.OVERPAYMENT
        else:
            kind = PaymentClass.ON_TIME

        consecutive_misses = consecutive_misses + 1 if kind.is_miss else 0

        classified.append(
            ClassifiedPayment(
                payment_id=payment.payment_id,
                payment_date=payment.payment_date,
                kind=kind,
                amount_cents=payment.amount_cents,
                expected_cents=expected,
            )
        )

    return tuple(classified)
