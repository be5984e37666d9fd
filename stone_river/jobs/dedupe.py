"""Duplicate policy-holder resolution batch job."""

import logging
from dataclasses import dataclass, field

from stone_river.engines.duplicates import find_duplicate_groups, plan_resolutions
from stone_river.exceptions import PortalError
from stone_river.jobs.base import BatchJob

logger = logging.getLogger(__name__)


@dataclass
class DeduplicationReport:
    total_customers: int = 0
    duplicate_groups: int = 0
    records_to_delete: int = 0
    deleted: int = 0
    failed: int = 0
    dry_run: bool = False
    remaining_groups: int | None = None
    resolutions: list[dict] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    @property
    def verification_passed(self) -> bool | None:
        """None until a post-deletion re-scan has run."""
        if self.remaining_groups is None:
            return None
        return self.remaining_groups == 0

    def to_dict(self) -> dict:
        return {
            "total_customers": self.total_customers,
            "duplicate_groups": self.duplicate_groups,
            "records_to_delete": self.records_to_delete,
            "deleted": self.deleted,
            "failed": self.failed,
            "dry_run": self.dry_run,
            "remaining_groups": self.remaining_groups,
            "verification_passed": self.verification_passed,
            "resolutions": self.resolutions,
            "failures": self.failures,
        }


class DeduplicationJob(BatchJob):
    """Plan every keep/delete decision, then delete group by group, then re-scan."""

    name = "deduplication"

    def run(self) -> DeduplicationReport:
        customers = self.store.load_customers()
        resolutions = plan_resolutions(customers)

        report = DeduplicationReport(
            total_customers=len(customers),
            duplicate_groups=len(resolutions),
            records_to_delete=sum(len(r.delete) for r in resolutions),
            dry_run=self.dry_run,
            resolutions=[r.to_dict() for r in resolutions],
        )
        logger.info(
            "Found %d duplicate groups (%d records to delete) among %d customers",
            report.duplicate_groups,
            report.records_to_delete,
            report.total_customers,
        )

        if self.dry_run:
            return report

        for resolution in resolutions:
            for record in resolution.delete:
                try:
                    self.store.delete_customer(record.customer_id)
                except PortalError as e:
                    report.failed += 1
                    report.failures.append(self.failure(record.policy_number, e))
                    continue
                report.deleted += 1
                self.emit(
                    "customer.duplicate_deleted",
                    record.policy_number,
                    {
                        "customer_id": record.customer_id,
                        "id_number": resolution.id_number,
                        "kept_customer_id": resolution.keep.customer_id,
                        "kept_policy_number": resolution.keep.policy_number,
                        "reason": resolution.reason,
                    },
                )
            logger.debug(
                "Resolved %s: kept %s (%s)",
                resolution.id_number,
                resolution.keep.policy_number,
                resolution.reason,
            )

        report.remaining_groups = len(find_duplicate_groups(self.store.load_customers()))
        if report.verification_passed:
            logger.info("Verification passed: no duplicate id numbers remain")
        else:
            logger.warning(
                "Verification failed: %d duplicate groups remain", report.remaining_groups
            )
        return report
