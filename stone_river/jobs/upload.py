"""Pre-upload duplicate check for customer files."""

import csv
import json
import logging
from pathlib import Path
from typing import Any

from stone_river.engines.receipts import UploadValidationReport, validate_upload
from stone_river.exceptions import InputFileError
from stone_river.jobs.base import BatchJob

logger = logging.getLogger(__name__)


def load_upload_file(path: str | Path) -> list[dict[str, Any]]:
    """Read upload rows from a JSON array or a CSV file with a header row."""
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise InputFileError(f"{path} must contain a JSON array of records")
            return data
        if suffix == ".csv":
            with open(path, newline="", encoding="utf-8-sig") as f:
                return list(csv.DictReader(f))
    except (OSError, ValueError) as e:
        raise InputFileError(f"Could not read {path}: {e}") from e
    raise InputFileError(f"Unsupported file format: {suffix or path.name}")


class UploadValidationJob(BatchJob):
    """Validate upload rows against the id numbers already stored."""

    name = "upload-validation"

    def run(self, records: list[dict[str, Any]]) -> UploadValidationReport:
        existing = self.store.existing_id_numbers()
        logger.info(
            "Validating %d upload records against %d existing id numbers",
            len(records),
            len(existing),
        )
        report = validate_upload(records, existing)

        if report.can_proceed:
            logger.info("Upload validation passed: %d records ready", report.valid_records)
        else:
            logger.warning(
                "Upload validation failed: %d in-file duplicates, %d database duplicates, %d errors",
                len(report.duplicates_in_file),
                len(report.duplicates_with_database),
                len(report.other_errors),
            )
        return report
