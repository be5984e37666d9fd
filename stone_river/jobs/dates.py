"""Inception date standardization batch job."""

import logging
from dataclasses import dataclass, field
from datetime import date

from stone_river.engines.dates import (
    MISSING_DATE_ERROR,
    standardize_date,
    validate_inception_date,
)
from stone_river.exceptions import PortalError
from stone_river.jobs.base import BatchJob
from stone_river.sinks.serialization import to_dict_fast

logger = logging.getLogger(__name__)


@dataclass
class InceptionDateReport:
    total: int = 0
    already_standard: int = 0
    converted: int = 0
    invalid: int = 0
    missing: int = 0
    future_dates: int = 0
    failed: int = 0
    dry_run: bool = False
    formats: dict[str, int] = field(default_factory=dict)
    conversions: list[dict] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_dict_fast(self)


class InceptionDateJob(BatchJob):
    """Rewrite every non-standard inception date as ``YYYY-MM-DD``."""

    name = "inception-dates"

    def run(self, today: date | None = None) -> InceptionDateReport:
        today = today or self.clock().date()
        customers = self.store.load_customers()
        report = InceptionDateReport(total=len(customers), dry_run=self.dry_run)

        for customer in customers:
            result = standardize_date(customer.inception_date)

            if not result.success:
                if result.error == MISSING_DATE_ERROR:
                    report.missing += 1
                else:
                    report.invalid += 1
                report.issues.append(
                    f"{customer.policy_number}: {result.error} ({customer.inception_date!r})"
                )
                continue

            report.formats[result.format] = report.formats.get(result.format, 0) + 1
            issues = validate_inception_date(result.standardized, customer.policy_number, today)
            report.issues.extend(issues)
            if any(issue.startswith("Future date") for issue in issues):
                report.future_dates += 1

            if result.already_standard:
                report.already_standard += 1
                continue

            try:
                if not self.dry_run:
                    self.store.update_inception_date(customer.customer_id, result.standardized)
            except PortalError as e:
                report.failed += 1
                report.failures.append(self.failure(customer.policy_number, e))
                continue

            report.converted += 1
            report.conversions.append({
                "policy_number": customer.policy_number,
                "original": result.original,
                "standardized": result.standardized,
                "format": result.format,
            })
            self.emit(
                "customer.inception_date_standardized",
                customer.policy_number,
                {"from": result.original, "to": result.standardized, "format": result.format},
            )

        logger.info(
            "Inception dates: %d already standard, %d converted, %d invalid, %d missing",
            report.already_standard,
            report.converted,
            report.invalid,
            report.missing,
        )
        return report
