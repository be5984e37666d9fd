"""Payment (premium receipt) model."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Payment:
    """Recorded premium payment; immutable once recorded."""

    payment_id: int | None
    customer_id: int
    policy_number: str
    payment_amount: Decimal
    payment_date: str | None  # YYYY-MM-DD
    payment_period: str = "Monthly"
    payment_method: str = "Cash"
    receipt_filename: str | None = None
    recorded_by_agent_id: int | None = None
    is_legacy_receipt: bool = False
    legacy_receipt_notes: str | None = None
