"""Console sink for end-of-run batch reports."""

from typing import Any, TextIO

from stone_river.sinks.serialization import to_dict


class ConsoleSink:
    """Print structured batch reports to stdout."""

    def __init__(self, limit: int = 10, stream: TextIO | None = None) -> None:
        """Initialize console sink.

        Parameters
        ----------
        limit : int
            Maximum entries printed per list (issues, failures, changes).
        stream : TextIO | None
            Output stream; defaults to stdout.
        """
        self.limit = limit
        self.stream = stream

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def write_report(self, title: str, report: Any) -> None:
        """Print counters first, then the first ``limit`` entries of each list."""
        data = to_dict(report)

        self._print(f"\n{'='*60}")
        self._print(title.upper())
        self._print("=" * 60)

        lists = {}
        for key, value in data.items():
            if isinstance(value, list):
                lists[key] = value
            elif isinstance(value, dict):
                self._print(f"  {_label(key)}:")
                for sub_key, sub_value in value.items():
                    self._print(f"    {sub_key}: {sub_value}")
            else:
                self._print(f"  {_label(key)}: {value}")

        for key, entries in lists.items():
            if not entries:
                continue
            self._print(f"\n{_label(key)} ({len(entries)}):")
            for entry in entries[: self.limit]:
                self._print(f"  - {_format_entry(entry)}")
            if len(entries) > self.limit:
                self._print(f"  ... and {len(entries) - self.limit} more")

    def close(self) -> None:
        self._print("=" * 60)


def _label(key: str) -> str:
    return key.replace("_", " ").capitalize()


def _format_entry(entry: Any) -> str:
    if isinstance(entry, dict):
        return ", ".join(f"{k}={v}" for k, v in entry.items())
    return str(entry)
