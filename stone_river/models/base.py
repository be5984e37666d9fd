"""Base models shared across domains."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Event:
    """Standard event envelope for audit streaming."""

    event_id: str
    event_type: str  # entity.action (e.g., customer.status_changed)
    event_time: datetime
    source: str  # Batch job that made the decision
    subject: str  # Policy number affected
    data: dict
    metadata: dict = field(default_factory=dict)
