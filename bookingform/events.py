"""Event system for the booking wizard runtime.

Every step transition and significant user action in a BookingSession
emits a typed WizardEvent. Events are immutable records; the emitter
dispatches them synchronously to subscribed listeners.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from bookingform.types import BookingType, EventType, WizardStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WizardEvent:
    """A single event in a booking session.

    Attributes:
        event_id: Unique identifier (e.g. "evt_3f2a...")
        type: Event type
        ts: UTC timestamp when the event occurred
        step: Wizard step after the event
        booking_type: Active booking type when the event occurred
        payload: Optional event-specific data

    Examples:
        >>> event = WizardEvent.create(EventType.STEP_CHANGED, WizardStep.VEHICLE,
        ...                            BookingType.DISTANCE, {"from": 1, "to": 2})
        >>> event.to_dict()["step"]
        2
    """
    event_id: str
    type: EventType
    ts: datetime
    step: WizardStep
    booking_type: Optional[BookingType] = None
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Normalize enum values."""
        if isinstance(self.type, str):
            object.__setattr__(self, "type", EventType(self.type))
        if not isinstance(self.step, WizardStep):
            object.__setattr__(self, "step", WizardStep(self.step))
        if isinstance(self.booking_type, str):
            object.__setattr__(self, "booking_type", BookingType(self.booking_type))

    @classmethod
    def create(
        cls,
        event_type: EventType,
        step: WizardStep,
        booking_type: Optional[BookingType] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> "WizardEvent":
        """Create an event with a fresh id and the current UTC time."""
        return cls(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            ts=datetime.now(timezone.utc),
            step=step,
            booking_type=booking_type,
            payload=payload,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "ts": self.ts.isoformat(),
            "step": int(self.step),
        }
        if self.booking_type is not None:
            result["bookingType"] = self.booking_type.value
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Single-line JSON representation."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WizardEvent":
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            ts=datetime.fromisoformat(data["ts"].replace("Z", "+00:00")),
            step=WizardStep(data["step"]),
            booking_type=BookingType(data["bookingType"]) if data.get("bookingType") else None,
            payload=data.get("payload"),
        )


EventListener = Callable[[WizardEvent], None]


class EventEmitter:
    """Dispatches wizard events to listeners.

    Listeners are called synchronously in registration order, type-specific
    listeners first, then wildcard listeners. A failing listener is logged
    and does not affect other listeners or the caller.

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.FARE_UPDATED, seen.append)
        >>> emitter.emit(WizardEvent.create(EventType.FARE_UPDATED, WizardStep.TRIP_DETAILS))
        >>> len(seen)
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: WizardEvent) -> None:
        """Dispatch an event to every registered listener."""
        for listener in list(self._listeners.get(event.type, [])) + list(self._any_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed for event %s", listener, event.type.value)

    def clear(self) -> None:
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count listeners for one type, or every listener when no type is given."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(v) for v in self._listeners.values())


__all__ = [
    "WizardEvent",
    "EventListener",
    "EventEmitter",
]
