"""Output sinks for batch reports and audit events."""

from stone_river.sinks.console import ConsoleSink
from stone_river.sinks.json_file import JsonFileSink
from stone_river.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
