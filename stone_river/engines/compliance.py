"""Payment compliance: arrears computation and status mapping.

Two point-in-time models are available and a run uses exactly one:

- ``ARREARS`` (canonical): whole calendar months since inception against
  the number of payments received. 0 months behind is Active, 1 is
  Overdue, 2 or more is Suspended.
- ``GRACE_PERIOD``: days since the most recent payment against a
  period-dependent grace window (30/90/365 days), producing Active, Grace
  Period, Suspended or Lapsed.

Cancelled and Express are sticky and are returned unchanged by both
models. Evaluation is pure; persisting the result is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from functools import reduce
from typing import Iterable

from stone_river.engines.dates import parse_date
from stone_river.models.policy.customer import Customer
from stone_river.models.policy.enums import ComplianceModel, PolicyStatus, PremiumPeriod
from stone_river.models.policy.payment import Payment

# Derived statuses that put an account on the suspension queue
DELINQUENT_STATUSES = frozenset({
    PolicyStatus.OVERDUE,
    PolicyStatus.SUSPENDED,
    PolicyStatus.GRACE_PERIOD,
    PolicyStatus.LAPSED,
})

GRACE_PERIOD_DAYS = {
    PremiumPeriod.MONTHLY: 30,
    PremiumPeriod.QUARTERLY: 90,
    PremiumPeriod.ANNUALLY: 365,
}
GRACE_TIER_DAYS = 30
SUSPENSION_TIER_DAYS = 90

CRITICAL = "critical"
MODERATE = "moderate"
MINOR = "minor"

REASON_MISSING_INCEPTION = "Missing or invalid inception date"
REASON_NOT_STARTED = "Policy not yet started"
REASON_NO_PAYMENTS = "No payments recorded"


@dataclass(frozen=True)
class ComplianceResult:
    """Compliance decision for a single customer."""

    customer_id: int
    policy_number: str
    current_status: PolicyStatus
    status: PolicyStatus
    months_since_inception: int = 0
    payments_received: int = 0
    months_behind: int = 0
    outstanding_amount: Decimal = Decimal("0")
    should_suspend: bool = False
    reason: str = ""
    model: ComplianceModel = ComplianceModel.ARREARS
    days_since_last_payment: int | None = None

    @property
    def status_changed(self) -> bool:
        return self.status != self.current_status

    @property
    def tier(self) -> str | None:
        return arrears_tier(self.months_behind)


def months_between(start: date, today: date) -> int:
    """Whole calendar months from ``start`` to ``today``; may be negative."""
    return (today.year - start.year) * 12 + (today.month - start.month)


def count_payments_received(customer: Customer, payments: Iterable[Payment]) -> int:
    """Number of premium periods the customer has paid for.

    Each recorded payment counts as one period regardless of amount or
    period length. Partial and lump-sum payments are not reconciled.
    """
    return sum(1 for p in payments if p.customer_id == customer.customer_id)


def arrears_tier(months_behind: int) -> str | None:
    """Severity bucket used in audit reports."""
    if months_behind >= 3:
        return CRITICAL
    if months_behind == 2:
        return MODERATE
    if months_behind == 1:
        return MINOR
    return None


def _sticky_result(customer: Customer, model: ComplianceModel) -> ComplianceResult:
    reason = "Account cancelled" if customer.status is PolicyStatus.CANCELLED else "Express account"
    return ComplianceResult(
        customer_id=customer.customer_id,
        policy_number=customer.policy_number,
        current_status=customer.status,
        status=customer.status,
        reason=reason,
        model=model,
    )


def _should_suspend(status: PolicyStatus, current: PolicyStatus) -> bool:
    return status in DELINQUENT_STATUSES and status != current


def evaluate_arrears(
    customer: Customer,
    payments: Iterable[Payment],
    today: date | None = None,
) -> ComplianceResult:
    """Evaluate a customer under the arrears model.

    Parameters
    ----------
    customer : Customer
        Customer with inception date, premium and current status.
    payments : Iterable[Payment]
        Payment rows; rows for other customers are ignored.
    today : date, optional
        Evaluation date (defaults to today).

    Returns
    -------
    ComplianceResult
        Never raises; missing or unparseable data yields Inactive.
    """
    if customer.status.is_sticky:
        return _sticky_result(customer, ComplianceModel.ARREARS)

    today = today or date.today()
    inception = parse_date(customer.inception_date)
    paid = count_payments_received(customer, payments)

    if inception is None:
        return ComplianceResult(
            customer_id=customer.customer_id,
            policy_number=customer.policy_number,
            current_status=customer.status,
            status=PolicyStatus.INACTIVE,
            payments_received=paid,
            reason=REASON_MISSING_INCEPTION,
        )

    months = months_between(inception, today)
    if months < 0:
        return ComplianceResult(
            customer_id=customer.customer_id,
            policy_number=customer.policy_number,
            current_status=customer.status,
            status=PolicyStatus.INACTIVE,
            payments_received=paid,
            reason=REASON_NOT_STARTED,
        )

    months_behind = max(0, months - paid)
    if months_behind >= 2:
        status = PolicyStatus.SUSPENDED
        reason = f"{months_behind} months behind - requires immediate payment"
    elif months_behind == 1:
        status = PolicyStatus.OVERDUE
        reason = "1 month overdue - payment required"
    else:
        status = PolicyStatus.ACTIVE
        reason = "Up to date with payments"

    return ComplianceResult(
        customer_id=customer.customer_id,
        policy_number=customer.policy_number,
        current_status=customer.status,
        status=status,
        months_since_inception=months,
        payments_received=paid,
        months_behind=months_behind,
        outstanding_amount=months_behind * customer.total_premium,
        should_suspend=_should_suspend(status, customer.status),
        reason=reason,
    )


def grace_period_days(period: str | PremiumPeriod | None) -> int:
    """Grace window in days for a premium period label."""
    return GRACE_PERIOD_DAYS[PremiumPeriod.parse(period)]


def evaluate_grace_period(
    customer: Customer,
    payments: Iterable[Payment],
    today: date | None = None,
) -> ComplianceResult:
    """Evaluate a customer under the grace-period model."""
    if customer.status.is_sticky:
        return _sticky_result(customer, ComplianceModel.GRACE_PERIOD)

    today = today or date.today()
    own = [p for p in payments if p.customer_id == customer.customer_id]
    paid_dates = [d for d in (parse_date(p.payment_date) for p in own) if d is not None]
    inception = parse_date(customer.inception_date)
    months = max(0, months_between(inception, today)) if inception else 0

    if not paid_dates:
        return ComplianceResult(
            customer_id=customer.customer_id,
            policy_number=customer.policy_number,
            current_status=customer.status,
            status=PolicyStatus.INACTIVE,
            months_since_inception=months,
            payments_received=len(own),
            reason=REASON_NO_PAYMENTS,
            model=ComplianceModel.GRACE_PERIOD,
        )

    days = (today - max(paid_dates)).days
    window = grace_period_days(customer.premium_period)

    if days <= window:
        status = PolicyStatus.ACTIVE
        reason = f"Last payment {days} days ago, within {window}-day grace window"
    elif days <= window + GRACE_TIER_DAYS:
        status = PolicyStatus.GRACE_PERIOD
        reason = f"Last payment {days} days ago, in grace period"
    elif days <= window + SUSPENSION_TIER_DAYS:
        status = PolicyStatus.SUSPENDED
        reason = f"Last payment {days} days ago, suspended"
    else:
        status = PolicyStatus.LAPSED
        reason = f"Last payment {days} days ago, lapsed"

    return ComplianceResult(
        customer_id=customer.customer_id,
        policy_number=customer.policy_number,
        current_status=customer.status,
        status=status,
        months_since_inception=months,
        payments_received=len(own),
        should_suspend=_should_suspend(status, customer.status),
        reason=reason,
        model=ComplianceModel.GRACE_PERIOD,
        days_since_last_payment=days,
    )


def evaluate(
    customer: Customer,
    payments: Iterable[Payment],
    today: date | None = None,
    model: ComplianceModel = ComplianceModel.ARREARS,
) -> ComplianceResult:
    """Evaluate a customer with the selected compliance model."""
    if model is ComplianceModel.GRACE_PERIOD:
        return evaluate_grace_period(customer, payments, today)
    return evaluate_arrears(customer, payments, today)


@dataclass(frozen=True)
class ComplianceSummary:
    """Aggregate statistics for a compliance run.

    Built by folding per-customer results with ``merge``; instances are
    never mutated.
    """

    total: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
    tier_counts: dict[str, int] = field(default_factory=dict)
    total_outstanding: Decimal = Decimal("0")
    to_update: int = 0

    @classmethod
    def from_result(cls, result: ComplianceResult) -> "ComplianceSummary":
        tier = result.tier
        return cls(
            total=1,
            status_counts={result.status.value: 1},
            tier_counts={tier: 1} if tier else {},
            total_outstanding=result.outstanding_amount,
            to_update=1 if result.should_suspend else 0,
        )

    def merge(self, other: "ComplianceSummary") -> "ComplianceSummary":
        return ComplianceSummary(
            total=self.total + other.total,
            status_counts=_add_counts(self.status_counts, other.status_counts),
            tier_counts=_add_counts(self.tier_counts, other.tier_counts),
            total_outstanding=self.total_outstanding + other.total_outstanding,
            to_update=self.to_update + other.to_update,
        )

    @classmethod
    def summarize(cls, results: Iterable[ComplianceResult]) -> "ComplianceSummary":
        return reduce(
            lambda acc, result: acc.merge(cls.from_result(result)),
            results,
            cls(),
        )

    def count(self, status: PolicyStatus) -> int:
        return self.status_counts.get(status.value, 0)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "by_status": dict(self.status_counts),
            "arrears_tiers": {
                CRITICAL: self.tier_counts.get(CRITICAL, 0),
                MODERATE: self.tier_counts.get(MODERATE, 0),
                MINOR: self.tier_counts.get(MINOR, 0),
            },
            "total_outstanding": str(self.total_outstanding),
            "to_update": self.to_update,
        }


def _add_counts(left: dict[str, int], right: dict[str, int]) -> dict[str, int]:
    merged = dict(left)
    for key, value in right.items():
        merged[key] = merged.get(key, 0) + value
    return merged
