"""JSON file sink for timestamped audit logs."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from stone_river.exceptions import SinkError
from stone_river.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Write end-of-run reports as ``<name>-log-<timestamp>.json`` files."""

    def __init__(self, output_dir: str | Path, pretty: bool = True) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write log files; created if missing.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self.written: list[Path] = []

    def write_log(self, name: str, payload: Any, now: datetime | None = None) -> Path:
        """Write one audit log and return its path."""
        now = now or datetime.now(timezone.utc)
        timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
        file_path = self.output_dir / f"{name}-log-{timestamp}.json"

        data = to_dict(payload)
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as e:
            raise SinkError(f"Could not write {file_path}: {e}") from e

        self.written.append(file_path)
        logger.info("Audit log written to %s", file_path)
        return file_path

    def close(self) -> None:
        """Print summary."""
        print(f"Audit logs written to: {self.output_dir}")
        for path in self.written:
            print(f"  {path.name}")
