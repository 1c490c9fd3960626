"""Event system for formstate fields.

This module provides the notification event and the event emitter a field
uses to tell the UI binding layer that something changed. Events deliberately
carry no payload beyond their source field: listeners react by reading the
field's current properties (``value``, ``error``, ``touched``...).
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, DefaultDict, Dict, List, Optional
import logging

from .types import EventType

if TYPE_CHECKING:
    from .field import FormField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldEvent:
    """A single notification raised by a field.

    Attributes:
        type: Event type from EventType enum
        target: The field that raised the event
        ts: UTC timestamp when the event occurred

    Examples:
        >>> from formstate.field import FormField
        >>> name = FormField("Ann", name="name")
        >>> event = FieldEvent(type=EventType.VALUE_CHANGED, target=name)
        >>> event.to_dict()["name"]
        'name'
    """
    type: EventType
    target: "FormField"
    ts: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Normalize fields."""
        # Convert string type to EventType enum if needed
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            object.__setattr__(self, "type", EventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to a dictionary for logging or debugging.

        The target is represented by its name only.
        """
        return {
            "type": self.type.value,
            "name": self.target.name,
            "ts": self.ts.isoformat(),
        }


EventListener = Callable[[FieldEvent], None]
Unsubscribe = Callable[[], None]

# Registry key of listeners subscribed to every event type.
_ANY: Optional[EventType] = None


class EventEmitter:
    """Listener registry of a single field.

    Listeners are keyed by event type, with one extra slot for listeners of
    every type. Subscribing returns a callable that undoes the subscription,
    which is what a UI binding keeps around to detach a control.

    Dispatch is synchronous: listeners of the event's type run first, then
    the catch-all ones, each group in subscription order. A listener that
    raises is logged and does not stop the others.

    Examples:
        >>> emitter = EventEmitter()
        >>> unsubscribe = emitter.on(EventType.VALUE_CHANGED, print)
        >>> emitter.listener_count(EventType.VALUE_CHANGED)
        1
        >>> unsubscribe()
        >>> emitter.listener_count()
        0
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[Optional[EventType], List[EventListener]] = defaultdict(list)

    def on(self, event_type: EventType, listener: EventListener) -> Unsubscribe:
        """Call ``listener`` for every event of ``event_type``."""
        self._listeners[event_type].append(listener)
        return lambda: self.off(event_type, listener)

    def on_any(self, listener: EventListener) -> Unsubscribe:
        """Call ``listener`` for every event."""
        self._listeners[_ANY].append(listener)
        return lambda: self.off_any(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Remove one subscription of ``listener``. Unknown listeners are ignored."""
        self._remove(event_type, listener)

    def off_any(self, listener: EventListener) -> None:
        self._remove(_ANY, listener)

    def emit(self, event: FieldEvent) -> None:
        """Dispatch ``event`` to the listeners subscribed when it is emitted."""
        listeners = self._listeners.get(event.type, []) + self._listeners.get(_ANY, [])
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.warning(
                    "%s: %s listener %r failed",
                    event.target.debug_name, event.type.value, listener,
                    exc_info=True,
                )

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count the listeners of ``event_type``, or all listeners if omitted."""
        if event_type is not None:
            return len(self._listeners.get(event_type, ()))
        return sum(len(listeners) for listeners in self._listeners.values())

    def _remove(self, key: Optional[EventType], listener: EventListener) -> None:
        listeners = self._listeners.get(key)
        if listeners and listener in listeners:
            listeners.remove(listener)


__all__ = [
    "FieldEvent",
    "EventType",
    "EventListener",
    "EventEmitter",
    "Unsubscribe",
]
