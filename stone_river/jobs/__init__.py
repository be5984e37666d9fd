"""Batch jobs run by administrators against the policy store."""

from stone_river.jobs.dates import InceptionDateJob
from stone_river.jobs.dedupe import DeduplicationJob
from stone_river.jobs.suffix import SuffixAssignmentJob, SuffixVerificationJob
from stone_river.jobs.suspension import SuspensionJob
from stone_river.jobs.upload import UploadValidationJob, load_upload_file

__all__ = [
    "DeduplicationJob",
    "InceptionDateJob",
    "SuffixAssignmentJob",
    "SuffixVerificationJob",
    "SuspensionJob",
    "UploadValidationJob",
    "load_upload_file",
]
