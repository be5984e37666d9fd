"""Payment compliance batch job: compute and apply suspension status."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from stone_river.engines.compliance import (
    REASON_MISSING_INCEPTION,
    ComplianceResult,
    ComplianceSummary,
    evaluate,
)
from stone_river.exceptions import PortalError
from stone_river.jobs.base import AuditSink, BatchJob
from stone_river.models.policy import ComplianceModel, Payment, PolicyStatus
from stone_river.store.base import PolicyStore

logger = logging.getLogger(__name__)


@dataclass
class SuspensionReport:
    model: ComplianceModel = ComplianceModel.ARREARS
    evaluated_on: date | None = None
    dry_run: bool = False
    summary: ComplianceSummary = field(default_factory=ComplianceSummary)
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    status_changes: list[dict] = field(default_factory=list)
    suspension_queue: list[dict] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "model": self.model.value,
            "evaluated_on": self.evaluated_on.isoformat() if self.evaluated_on else None,
            "dry_run": self.dry_run,
            "summary": self.summary.to_dict(),
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "status_changes": self.status_changes,
            "suspension_queue": self.suspension_queue,
            "issues": self.issues,
            "failures": self.failures,
        }


def _queue_entry(result: ComplianceResult) -> dict:
    return {
        "policy_number": result.policy_number,
        "current_status": result.current_status.value,
        "new_status": result.status.value,
        "months_since_inception": result.months_since_inception,
        "payments_received": result.payments_received,
        "months_behind": result.months_behind,
        "outstanding_amount": str(result.outstanding_amount),
        "tier": result.tier,
        "reason": result.reason,
    }


class SuspensionJob(BatchJob):
    """Evaluate every customer and persist status changes.

    Inactive results are never written: a policy that has not started
    keeps its stored status, and one with a missing inception date is
    reported as a data-quality issue instead.
    """

    name = "suspension"

    def __init__(
        self,
        store: PolicyStore,
        audit: AuditSink | None = None,
        dry_run: bool = False,
        clock: Callable[[], datetime] | None = None,
        model: ComplianceModel = ComplianceModel.ARREARS,
        today: date | None = None,
    ) -> None:
        super().__init__(store, audit=audit, dry_run=dry_run, clock=clock)
        self.model = model
        self.today = today

    def run(self) -> SuspensionReport:
        today = self.today or self.clock().date()
        customers = self.store.load_customers()
        payments_by_customer: dict[int, list[Payment]] = {}
        for payment in self.store.load_payments():
            payments_by_customer.setdefault(payment.customer_id, []).append(payment)

        logger.info(
            "Evaluating %d customers with the %s model as of %s",
            len(customers),
            self.model.value,
            today.isoformat(),
        )

        results = [
            evaluate(c, payments_by_customer.get(c.customer_id, []), today, self.model)
            for c in customers
        ]
        report = SuspensionReport(
            model=self.model,
            evaluated_on=today,
            dry_run=self.dry_run,
            summary=ComplianceSummary.summarize(results),
            suspension_queue=[_queue_entry(r) for r in results if r.should_suspend],
        )

        for result in results:
            if result.status is PolicyStatus.INACTIVE:
                if result.reason == REASON_MISSING_INCEPTION:
                    report.issues.append(f"{result.policy_number}: {result.reason}")
                report.unchanged += 1
                continue

            if not result.status_changed:
                report.unchanged += 1
                continue

            try:
                if not self.dry_run:
                    self.store.update_status(result.customer_id, result.status, self.clock())
            except PortalError as e:
                report.failed += 1
                report.failures.append(self.failure(result.policy_number, e))
                continue

            report.updated += 1
            report.status_changes.append({
                "policy_number": result.policy_number,
                "from": result.current_status.value,
                "to": result.status.value,
                "reason": result.reason,
            })
            self.emit(
                "customer.status_changed",
                result.policy_number,
                {
                    "customer_id": result.customer_id,
                    "from": result.current_status.value,
                    "to": result.status.value,
                    "months_behind": result.months_behind,
                    "outstanding_amount": str(result.outstanding_amount),
                    "model": result.model.value,
                    "reason": result.reason,
                },
            )

        logger.info(
            "Suspension run complete: updated=%d, unchanged=%d, failed=%d, outstanding=%s",
            report.updated,
            report.unchanged,
            report.failed,
            report.summary.total_outstanding,
        )
        return report
