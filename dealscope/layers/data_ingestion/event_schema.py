"""
Session Audit Events

Every ingestion, every installed or failed analysis and every suggestion
decision is recorded as an event, so a session can show what was loaded,
what the model inferred and which CRM changes the user accepted or rejected.

The store is in-memory and append-only; it is cleared with the session.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, Optional
from uuid import UUID, uuid4


class EventCategory(Enum):
    INGESTION = "ingestion"     # CRM export or transcripts loaded
    INFERENCE = "inference"     # model output installed or failed
    GOVERNANCE = "governance"   # suggestion accepted or rejected


@dataclass(frozen=True)
class SessionEvent:
    """Immutable record of one session event."""
    category: EventCategory
    event_type: str
    payload: dict = field(default_factory=dict)

    # What the event is about
    row_id: Optional[int] = None
    suggestion_id: Optional[str] = None

    # Who caused it
    actor_type: str = "system"  # system | user
    actor_id: Optional[str] = None

    id: UUID = field(default_factory=uuid4)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "recorded_at": self.recorded_at.isoformat(),
            "category": self.category.value,
            "event_type": self.event_type,
            "payload": dict(self.payload),
            "row_id": self.row_id,
            "suggestion_id": self.suggestion_id,
            "actor": {"type": self.actor_type, "id": self.actor_id}
        }


class EventStore:
    """Append-only session event log, oldest first."""

    def __init__(self):
        self._events: list[SessionEvent] = []

    def append(self, event: SessionEvent) -> None:
        self._events.append(event)

    def get_by_type(self, event_type: str) -> list[SessionEvent]:
        return [event for event in self._events if event.event_type == event_type]

    def query(
        self,
        category: Optional[EventCategory] = None,
        row_id: Optional[int] = None,
        limit: int = 100
    ) -> list[SessionEvent]:
        """Newest first, optionally narrowed to one category and one deal."""
        matches = (
            event for event in reversed(self._events)
            if (category is None or event.category is category)
            and (row_id is None or event.row_id == row_id)
        )
        return [event for _, event in zip(range(limit), matches)]

    def clear(self) -> None:
        self._events.clear()

    def __iter__(self) -> Iterator[SessionEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)


class EventBuilder:
    """
    Fluent construction of session events:

        EventBuilder().governance("update_accepted").for_row(3).by_user("dana").build()
    """

    def __init__(self):
        self._event = SessionEvent(category=EventCategory.INGESTION, event_type="")

    def _with(self, **changes) -> "EventBuilder":
        self._event = replace(self._event, **changes)
        return self

    def ingestion(self, event_type: str) -> "EventBuilder":
        return self._with(category=EventCategory.INGESTION, event_type=event_type)

    def inference(self, event_type: str) -> "EventBuilder":
        return self._with(category=EventCategory.INFERENCE, event_type=event_type)

    def governance(self, event_type: str) -> "EventBuilder":
        return self._with(category=EventCategory.GOVERNANCE, event_type=event_type)

    def with_payload(self, payload: dict) -> "EventBuilder":
        return self._with(payload=dict(payload))

    def for_row(self, row_id: int) -> "EventBuilder":
        return self._with(row_id=row_id)

    def for_suggestion(self, suggestion_id: str) -> "EventBuilder":
        return self._with(suggestion_id=suggestion_id)

    def by_user(self, user_id: Optional[str] = None) -> "EventBuilder":
        return self._with(actor_type="user", actor_id=user_id)

    def by_system(self, component: str) -> "EventBuilder":
        return self._with(actor_type="system", actor_id=component)

    def build(self) -> SessionEvent:
        # Fresh identity per built event
        return replace(self._event, id=uuid4(), recorded_at=datetime.now(timezone.utc))
