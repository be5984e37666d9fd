"""Rule engines for suffix assignment, payment compliance and data quality."""

from stone_river.engines.compliance import (
    ComplianceResult,
    ComplianceSummary,
    evaluate,
    evaluate_arrears,
    evaluate_grace_period,
)
from stone_river.engines.duplicates import Resolution, plan_resolutions, select_canonical
from stone_river.engines.suffix import (
    SuffixAssignment,
    assign_suffixes,
    categorize,
    is_compliant,
    validate_suffixes,
)

__all__ = [
    "ComplianceResult",
    "ComplianceSummary",
    "Resolution",
    "SuffixAssignment",
    "assign_suffixes",
    "categorize",
    "evaluate",
    "evaluate_arrears",
    "evaluate_grace_period",
    "is_compliant",
    "plan_resolutions",
    "select_canonical",
    "validate_suffixes",
]
