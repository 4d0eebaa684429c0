"""Base models shared across the engine."""

from dataclasses import dataclass, field
from datetime import datetime

from income_proof.models.enums import NotificationKind


@dataclass
class Event:
    """Standard event envelope for streaming."""

    event_id: str
    event_type: str  # entity.action (e.g., proof.issued)
    event_time: datetime
    source: str  # Service/system that generated
    subject: str  # Entity ID affected
    data: dict
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Notification:
    """User-facing notification.

    Built by callers (CLI, UI layers) from engine results; the engine
    itself never produces notifications.
    """

    kind: NotificationKind
    title: str
    message: str
    notification_id: str = ""
