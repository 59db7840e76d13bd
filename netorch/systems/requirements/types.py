"""
Netorch — Requirement Types

Event counters are passed into every evaluation as an immutable snapshot.
A requirement only remembers the sequence number it last acted on; it never
reads shared counters on its own.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol


class EventKind(enum.StrEnum):
    ADDRESS_ACQUIRED = "address_acquired"
    ADDRESS_RELEASED = "address_released"
    RESOLVER_UPDATED = "resolver_updated"
    LINK_UP = "link_up"
    LINK_DOWN = "link_down"


class RequirementState(enum.StrEnum):
    UNEVALUATED = "unevaluated"
    SKIPPED = "skipped"
    EVALUATING = "evaluating"
    PENDING = "pending"
    SATISFIED = "satisfied"
    DISPOSED = "disposed"


class ReachabilityOutcome(enum.StrEnum):
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"
    RESOLVE_FAILED = "resolve_failed"
    UNREACHABLE = "unreachable"
    PROBE_FAILED = "probe_failed"
    REACHABLE = "reachable"


@dataclass(frozen=True)
class EventSnapshot:
    """
    Event counters as seen at one evaluation round.

    current — the global sequence number (advanced by every event)
    last    — for each event kind, the global sequence at which it last fired
    """

    current: int = 0
    last: Mapping[EventKind, int] = field(default_factory=dict)

    def last_seq(self, kind: EventKind) -> int:
        """Sequence at which *kind* last fired; 0 if it never has."""
        return self.last.get(kind, 0)


class Worker(Protocol):
    """What a requirement needs to know about the interface worker it gates."""

    @property
    def name(self) -> str: ...
