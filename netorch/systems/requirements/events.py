"""
Netorch — Event Sequencer

The single writer of event counters. The surrounding event system calls
record() as things happen; requirement evaluation only ever receives
snapshot() values.
"""

from __future__ import annotations

import structlog

from netorch.systems.requirements.types import EventKind, EventSnapshot

logger = structlog.get_logger().bind(system="requirements.events")


class EventSequencer:
    def __init__(self) -> None:
        self._seq: int = 0
        self._last: dict[EventKind, int] = {}

    @property
    def current(self) -> int:
        return self._seq

    def record(self, kind: EventKind) -> int:
        """Advance the global sequence and stamp it on *kind*. Returns the new sequence."""
        self._seq += 1
        self._last[kind] = self._seq
        logger.debug("event_recorded", kind=kind.value, seq=self._seq)
        return self._seq

    def last_seq(self, kind: EventKind) -> int:
        return self._last.get(kind, 0)

    def snapshot(self) -> EventSnapshot:
        return EventSnapshot(current=self._seq, last=dict(self._last))
