"""
Unit tests for the Requirement base class and RequirementList.

Covers the skip rule, the invalidation rule, sequence bookkeeping,
fail-closed evaluation, and single disposal.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from netorch.systems.requirements.requirement import Requirement, RequirementList
from netorch.systems.requirements.types import EventKind, EventSnapshot, RequirementState


# ─── Fixtures ─────────────────────────────────────────────────────


class _CountingRequirement(Requirement):
    """Records every check, invalidate and release call."""

    kind = "counting"
    trigger_event = EventKind.ADDRESS_ACQUIRED
    invalidating_events = (EventKind.RESOLVER_UPDATED,)

    def __init__(self, answers: list[bool] | None = None, error: Exception | None = None) -> None:
        super().__init__()
        self.answers = list(answers or [False])
        self.error = error
        self.checks = 0
        self.invalidations = 0
        self.releases = 0

    async def check(self, worker) -> bool:
        self.checks += 1
        if self.error is not None:
            raise self.error
        return self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]

    def invalidate(self) -> None:
        self.invalidations += 1

    def release(self) -> None:
        self.releases += 1


class _UngatedRequirement(Requirement):
    kind = "ungated"

    def __init__(self) -> None:
        super().__init__()
        self.checks = 0

    async def check(self, worker) -> bool:
        self.checks += 1
        return False


WORKER = SimpleNamespace(name="eth0")


def snap(current: int, **last: int) -> EventSnapshot:
    return EventSnapshot(current=current, last={EventKind(k): v for k, v in last.items()})


# ─── Tests: caching ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fresh_requirement_skipped_until_trigger_event():
    req = _CountingRequirement()
    # Nothing has happened yet: stored 0 == last address_acquired 0
    assert await req.evaluate(WORKER, snap(0)) is False
    assert req.checks == 0
    assert req.state == RequirementState.SKIPPED


@pytest.mark.asyncio
async def test_repeat_evaluation_without_new_event_is_skipped():
    req = _CountingRequirement()
    events = snap(1, address_acquired=1)

    assert await req.evaluate(WORKER, events) is False
    assert req.checks == 1
    assert req.event_seq == 1

    assert await req.evaluate(WORKER, events) is False
    assert req.checks == 1
    assert req.state == RequirementState.SKIPPED


@pytest.mark.asyncio
async def test_new_trigger_event_reenables_check():
    req = _CountingRequirement(answers=[False, True])

    assert await req.evaluate(WORKER, snap(1, address_acquired=1)) is False
    assert await req.evaluate(WORKER, snap(2, address_acquired=2)) is True
    assert req.checks == 2
    assert req.state == RequirementState.SATISFIED


@pytest.mark.asyncio
async def test_skip_only_applies_when_trigger_was_last_seen():
    req = _CountingRequirement()
    events = snap(3, address_acquired=1, link_up=3)
    await req.evaluate(WORKER, events)
    assert req.event_seq == 3
    # Stored 3 != address_acquired 1, so the check runs again
    await req.evaluate(WORKER, events)
    assert req.checks == 2


@pytest.mark.asyncio
async def test_skip_does_not_advance_stored_sequence():
    req = _CountingRequirement()
    await req.evaluate(WORKER, snap(1, address_acquired=1))
    await req.evaluate(WORKER, snap(4, address_acquired=1, link_up=4))
    assert req.checks == 1
    assert req.event_seq == 1


@pytest.mark.asyncio
async def test_resolver_update_invalidates_before_check():
    req = _CountingRequirement()
    await req.evaluate(WORKER, snap(1, address_acquired=1))
    assert req.invalidations == 0

    await req.evaluate(WORKER, snap(3, address_acquired=2, resolver_updated=3))
    assert req.invalidations == 1
    assert req.checks == 2


@pytest.mark.asyncio
async def test_resolver_update_seen_once_does_not_invalidate_again():
    req = _CountingRequirement()
    await req.evaluate(WORKER, snap(2, address_acquired=1, resolver_updated=2))
    assert req.invalidations == 1
    await req.evaluate(WORKER, snap(3, address_acquired=3, resolver_updated=2))
    assert req.invalidations == 1


@pytest.mark.asyncio
async def test_requirement_without_trigger_always_checks():
    req = _UngatedRequirement()
    for _ in range(3):
        assert await req.evaluate(WORKER, snap(0)) is False
    assert req.checks == 3
    assert req.state == RequirementState.PENDING


@pytest.mark.asyncio
async def test_check_exception_fails_closed():
    req = _CountingRequirement(error=RuntimeError("boom"))
    assert await req.evaluate(WORKER, snap(1, address_acquired=1)) is False
    assert req.state == RequirementState.PENDING
    assert req.event_seq == 1


# ─── Tests: disposal ──────────────────────────────────────────────


def test_dispose_releases_exactly_once():
    req = _CountingRequirement()
    req.dispose()
    req.dispose()
    assert req.releases == 1
    assert req.disposed
    assert req.state == RequirementState.DISPOSED


# ─── Tests: RequirementList ───────────────────────────────────────


@pytest.mark.asyncio
async def test_list_drops_and_disposes_satisfied():
    done = _CountingRequirement(answers=[True])
    waiting = _CountingRequirement(answers=[False])
    guard = RequirementList([done, waiting])

    assert await guard.check(WORKER, snap(1, address_acquired=1)) is False
    assert guard.pending == [waiting]
    assert done.releases == 1
    assert waiting.releases == 0


@pytest.mark.asyncio
async def test_list_satisfied_when_all_satisfied():
    guard = RequirementList([_CountingRequirement(answers=[True])])
    assert await guard.check(WORKER, snap(1, address_acquired=1)) is True
    assert len(guard) == 0


@pytest.mark.asyncio
async def test_empty_list_is_satisfied():
    assert await RequirementList().check(WORKER, snap(0)) is True


def test_list_dispose_tears_down_remaining():
    a, b = _CountingRequirement(), _CountingRequirement()
    guard = RequirementList()
    guard.add(a)
    guard.add(b)
    guard.dispose()
    assert (a.releases, b.releases) == (1, 1)
    assert len(guard) == 0
