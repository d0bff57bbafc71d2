"""Driver payout calculation.

CRITICAL BUSINESS LOGIC:
- The customer fare already includes 10% tax, 10% GST and a 25% margin
- The stack is reversed with a single divisor (1.45), not three subtractions
- Payouts are rounded half-up to cents, never banker's rounding
- The payout is fixed when the job is assigned and carried into the completed store
"""

from decimal import ROUND_HALF_UP, Decimal

from app.config import settings

CENTS = Decimal("0.01")


def calculate_driver_payout(fare: Decimal | float | str, divisor: Decimal | None = None) -> Decimal:
    """Calculate what the driver is paid for a job.

    Args:
        fare: Customer-facing total fare
        divisor: Override for the tax/margin divisor (defaults to settings)

    Returns:
        Decimal: Payout rounded to 2 decimal places
    """
    divisor = divisor if divisor is not None else settings.payout_divisor
    net = Decimal(str(fare)) / Decimal(str(divisor))
    return net.quantize(CENTS, rounding=ROUND_HALF_UP)
