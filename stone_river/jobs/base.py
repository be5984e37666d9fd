"""Shared plumbing for batch jobs: clock, audit events, failure capture."""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from stone_river.exceptions import SinkError
from stone_river.logging import get_logger
from stone_river.models.base import Event
from stone_river.store.base import PolicyStore


class AuditSink(Protocol):
    def publish(self, event: Event) -> None:
        ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_event(
    event_type: str,
    source: str,
    subject: str,
    data: dict[str, Any],
    event_time: datetime | None = None,
) -> Event:
    """Build an audit event envelope."""
    return Event(
        event_id=str(uuid.uuid4()),
        event_type=event_type,
        event_time=event_time or utc_now(),
        source=source,
        subject=subject,
        data=data,
    )


class BatchJob:
    """Base class for one-shot administrative passes over the store.

    Parameters
    ----------
    store : PolicyStore
        Backing store (in-memory or Postgres).
    audit : AuditSink | None
        Receives one event per applied decision; None disables events.
    dry_run : bool
        Compute and report everything but write nothing.
    clock : Callable[[], datetime] | None
        Source of update timestamps (defaults to UTC now).
    """

    name = "batch"

    def __init__(
        self,
        store: PolicyStore,
        audit: AuditSink | None = None,
        dry_run: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.audit = audit
        self.dry_run = dry_run
        self.clock = clock or utc_now
        self.log = get_logger(type(self).__module__, job=self.name)

    def emit(self, event_type: str, subject: str, data: dict[str, Any]) -> None:
        if self.audit is None or self.dry_run:
            return
        try:
            self.audit.publish(new_event(event_type, self.name, subject, data, self.clock()))
        except SinkError as e:
            self.log.warning("Audit event %s for %s not published: %s", event_type, subject, e)

    def failure(self, record: str, error: Exception) -> dict[str, str]:
        self.log.error("Failed to process %s: %s", record, error)
        return {"record": record, "error": str(error)}
