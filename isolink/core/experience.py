"""
Bounded experiential log of linking events.

Each component keeps the most recent link events it initiated in a ring
buffer; when the buffer is full the oldest event is evicted.
"""

import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterator, List, Optional, Any

from .types import ComponentId

# Zero-argument callable returning a timestamp
TemporalSource = Callable[[], float]

INDIRECT_LINK_EVENT = "INDIRECT_LINK"


@dataclass(frozen=True)
class LinkEvent:
    """One recorded linking event."""
    timestamp: float
    source_id: ComponentId
    target_id: ComponentId
    score: float
    event_type: str = INDIRECT_LINK_EVENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'source_id': self.source_id,
            'target_id': self.target_id,
            'score': self.score,
            'event_type': self.event_type,
        }


class ExperientialLog:
    """
    Ring buffer of LinkEvents with an explicit capacity.

    Timestamps recorded in one log never decrease, even if the temporal
    source steps backwards.
    """

    def __init__(self, capacity: int = 64,
                 clock: Optional[TemporalSource] = None):
        """
        Initialize the log.

        Args:
            capacity: Maximum number of events retained
            clock: Temporal source for timestamps (default: time.time)
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.clock = clock or time.time
        self._events: Deque[LinkEvent] = deque(maxlen=capacity)
        self._last_timestamp: Optional[float] = None
        self.evictions = 0

    def record(self, source_id: ComponentId, target_id: ComponentId,
               score: float, event_type: str = INDIRECT_LINK_EVENT) -> LinkEvent:
        """
        Append an event, evicting the oldest one if the log is full.

        Returns:
            The recorded event
        """
        timestamp = float(self.clock())
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            timestamp = self._last_timestamp
        self._last_timestamp = timestamp

        if len(self._events) == self.capacity:
            self.evictions += 1

        event = LinkEvent(
            timestamp=timestamp,
            source_id=source_id,
            target_id=target_id,
            score=score,
            event_type=event_type,
        )
        self._events.append(event)
        return event

    @property
    def latest(self) -> Optional[LinkEvent]:
        return self._events[-1] if self._events else None

    def events(self) -> List[LinkEvent]:
        """Events oldest first."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LinkEvent]:
        return iter(list(self._events))
