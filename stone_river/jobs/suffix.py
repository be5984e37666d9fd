"""Suffix assignment and suffix verification batch jobs."""

import logging
from dataclasses import dataclass, field

from stone_river.engines.suffix import (
    CATEGORY_ORDER,
    assign_suffixes,
    categorize,
    has_principal,
    is_compliant,
    validate_suffixes,
)
from stone_river.exceptions import PortalError
from stone_river.jobs.base import BatchJob
from stone_river.sinks.serialization import to_dict_fast

logger = logging.getLogger(__name__)


@dataclass
class SuffixAssignmentReport:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    principals_added: int = 0
    suffixes_changed: int = 0
    dry_run: bool = False
    changes: list[dict] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_dict_fast(self)


@dataclass
class SuffixVerificationReport:
    total_customers: int = 0
    total_participants: int = 0
    compliant: int = 0
    non_compliant: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    issues: list[str] = field(default_factory=list)

    @property
    def compliance_rate(self) -> float:
        """Percentage of customers whose suffixes are fully compliant."""
        if not self.total_customers:
            return 100.0
        return round(self.compliant / self.total_customers * 100, 1)

    def to_dict(self) -> dict:
        data = to_dict_fast(self)
        data["compliance_rate"] = self.compliance_rate
        return data


class SuffixAssignmentJob(BatchJob):
    """Assign suffixes to every customer whose participants are non-compliant."""

    name = "suffix-assignment"

    def run(self) -> SuffixAssignmentReport:
        customers = self.store.load_customers()
        report = SuffixAssignmentReport(total=len(customers), dry_run=self.dry_run)
        logger.info("Checking suffixes for %d customers", len(customers))

        for customer in customers:
            if is_compliant(customer.participants):
                report.skipped += 1
                continue

            assignment = assign_suffixes(customer.participants, customer)
            for issue in validate_suffixes(assignment.participants):
                report.issues.append(f"{customer.policy_number}: {issue}")

            try:
                if not self.dry_run:
                    self.store.replace_participants(
                        customer.customer_id, assignment.participants, self.clock()
                    )
            except PortalError as e:
                report.failed += 1
                report.failures.append(self.failure(customer.policy_number, e))
                continue

            report.updated += 1
            report.principals_added += int(assignment.principal_added)
            report.suffixes_changed += len(assignment.changes) - int(assignment.principal_added)
            report.changes.append({
                "policy_number": customer.policy_number,
                "principal_added": assignment.principal_added,
                "changes": assignment.changes,
            })
            logger.debug(
                "Assigned suffixes for %s: %s",
                customer.policy_number,
                ", ".join(f"{p.full_name}={p.suffix}" for p in assignment.participants),
            )
            self.emit(
                "customer.suffixes_assigned",
                customer.policy_number,
                {
                    "customer_id": customer.customer_id,
                    "principal_added": assignment.principal_added,
                    "suffixes": {p.full_name: p.suffix for p in assignment.participants},
                },
            )

        logger.info(
            "Suffix assignment complete: updated=%d, skipped=%d, failed=%d, principals_added=%d",
            report.updated,
            report.skipped,
            report.failed,
            report.principals_added,
        )
        return report


class SuffixVerificationJob(BatchJob):
    """Read-only compliance check of every customer's suffixes."""

    name = "suffix-verification"

    def run(self) -> SuffixVerificationReport:
        customers = self.store.load_customers()
        report = SuffixVerificationReport(
            total_customers=len(customers),
            by_category={category.label: 0 for category in CATEGORY_ORDER},
        )

        for customer in customers:
            participants = customer.participants
            report.total_participants += len(participants)
            for participant in participants:
                report.by_category[categorize(participant.relationship).label] += 1

            issues = validate_suffixes(participants)
            if not has_principal(participants):
                issues.insert(0, "Missing principal member")

            if issues:
                report.non_compliant += 1
                report.issues.extend(f"{customer.policy_number}: {issue}" for issue in issues)
            else:
                report.compliant += 1

        logger.info(
            "Suffix verification: %d/%d customers compliant (%.1f%%)",
            report.compliant,
            report.total_customers,
            report.compliance_rate,
        )
        return report
