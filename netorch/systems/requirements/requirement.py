"""
Netorch — Requirement Base Class

A Requirement is a cacheable predicate that gates one worker transition
("host X must be reachable before we go up"). The state machine asks it
evaluate(worker, events) once per tick until it reports True.

Caching policy, applied by evaluate() before check() ever runs:

  Skip rule — if the requirement last acted at exactly the sequence at which
  its trigger_event last fired, nothing that could newly satisfy it has
  happened since. The check is skipped and "not satisfied" is reported again.

  Invalidation rule — if any of invalidating_events fired after the last
  evaluation, invalidate() drops whatever sub-results the subclass cached.

  After every real evaluation the stored sequence is advanced to the
  snapshot's global sequence.

Subclasses own their state directly and override release() to free it.
dispose() calls release() exactly once; evaluating a disposed requirement
is a programming error and is not checked.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

import structlog

from netorch.systems.requirements.types import (
    EventKind,
    EventSnapshot,
    RequirementState,
    Worker,
)

logger = structlog.get_logger()


class Requirement(ABC):
    # ── Identity ─────────────────────────────────────────────────
    kind: ClassVar[str] = ""

    # ── Caching ──────────────────────────────────────────────────
    trigger_event: ClassVar[EventKind | None] = None
    invalidating_events: ClassVar[tuple[EventKind, ...]] = ()

    def __init__(self) -> None:
        self.event_seq: int = 0
        self.state: RequirementState = RequirementState.UNEVALUATED
        self._disposed: bool = False
        self._logger = logger.bind(system="requirements", kind=self.kind)

    async def evaluate(self, worker: Worker, events: EventSnapshot) -> bool:
        """
        Return True once the requirement holds for *worker*.

        Never raises for operational failures: any exception escaping check()
        is logged and reported as not satisfied.
        """
        if self.trigger_event is not None and self.event_seq == events.last_seq(self.trigger_event):
            self.state = RequirementState.SKIPPED
            self.on_skip(worker)
            return False

        for kind in self.invalidating_events:
            if self.event_seq < events.last_seq(kind):
                self.invalidate()
                break

        self.event_seq = events.current
        self.state = RequirementState.EVALUATING

        try:
            satisfied = await self.check(worker)
        except Exception as exc:
            self._logger.warning(
                "requirement_check_error",
                worker=worker.name,
                requirement=self.describe(),
                error=str(exc),
            )
            satisfied = False

        self.state = RequirementState.SATISFIED if satisfied else RequirementState.PENDING
        return satisfied

    @abstractmethod
    async def check(self, worker: Worker) -> bool:
        """Run the underlying predicate. Called only when the cache does not apply."""
        ...

    def invalidate(self) -> None:
        """Discard cached sub-results. Default: nothing cached."""

    def release(self) -> None:
        """Free owned state. Called exactly once by dispose()."""

    def on_skip(self, worker: Worker) -> None:
        self._logger.debug("requirement_skip", worker=worker.name, requirement=self.describe())

    def describe(self) -> str:
        return self.kind

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.release()
        self.state = RequirementState.DISPOSED

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} "
            f"kind={self.kind!r} "
            f"state={self.state.value} "
            f"event_seq={self.event_seq}>"
        )


class RequirementList:
    """
    The set of requirements guarding one transition.

    Satisfied requirements are disposed and dropped as soon as they report
    True; they are never asked again. The list is satisfied once it is empty.
    """

    def __init__(self, requirements: list[Requirement] | None = None) -> None:
        self._pending: list[Requirement] = list(requirements or [])

    def add(self, requirement: Requirement) -> None:
        self._pending.append(requirement)

    async def check(self, worker: Worker, events: EventSnapshot) -> bool:
        still_pending: list[Requirement] = []
        for requirement in self._pending:
            if await requirement.evaluate(worker, events):
                requirement.dispose()
            else:
                still_pending.append(requirement)
        self._pending = still_pending
        return not self._pending

    def dispose(self) -> None:
        """Tear down every remaining requirement (worker completed or aborted)."""
        for requirement in self._pending:
            requirement.dispose()
        self._pending = []

    @property
    def pending(self) -> list[Requirement]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
