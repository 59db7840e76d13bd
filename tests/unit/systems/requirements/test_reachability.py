"""
Unit tests for ReachabilityRequirement.

Resolver and prober are mocked; no DNS or network access.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from netorch.clients.resolver import ResolutionResult, ResolutionStatus
from netorch.primitives.common import AddressFamily
from netorch.systems.requirements.errors import RequirementSpecError
from netorch.systems.requirements.events import EventSequencer
from netorch.systems.requirements.reachability import ReachabilityRequirement
from netorch.systems.requirements.types import EventKind, ReachabilityOutcome, RequirementState


# ─── Fixtures ─────────────────────────────────────────────────────


WORKER = SimpleNamespace(name="eth0")


def make_resolver(*results: ResolutionResult) -> AsyncMock:
    resolver = AsyncMock()
    if len(results) == 1:
        resolver.resolve.return_value = results[0]
    else:
        resolver.resolve.side_effect = list(results)
    return resolver


def make_prober(*answers: bool) -> AsyncMock:
    prober = AsyncMock()
    if len(answers) == 1:
        prober.probe.return_value = answers[0]
    else:
        prober.probe.side_effect = list(answers)
    return prober


def make_requirement(resolver=None, prober=None, **kwargs) -> ReachabilityRequirement:
    return ReachabilityRequirement(
        "gw.example.com",
        resolver=resolver or make_resolver(ResolutionResult.ok("192.0.2.1")),
        prober=prober or make_prober(True),
        **kwargs,
    )


# ─── Tests: evaluation ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_reachable_after_address_acquired():
    events = EventSequencer()
    events.record(EventKind.ADDRESS_ACQUIRED)
    resolver = make_resolver(ResolutionResult.ok("192.0.2.1"))
    prober = make_prober(True)
    req = make_requirement(resolver, prober, family=AddressFamily.INET, resolve_timeout_s=2.5)

    assert await req.evaluate(WORKER, events.snapshot()) is True
    resolver.resolve.assert_awaited_once_with("gw.example.com", AddressFamily.INET, 2.5)
    prober.probe.assert_awaited_once_with("gw.example.com", "192.0.2.1")
    assert req.last_outcome == ReachabilityOutcome.REACHABLE
    assert req.state == RequirementState.SATISFIED


@pytest.mark.asyncio
async def test_skipped_before_any_address_acquired():
    resolver = make_resolver(ResolutionResult.ok("192.0.2.1"))
    req = make_requirement(resolver)

    assert await req.evaluate(WORKER, EventSequencer().snapshot()) is False
    resolver.resolve.assert_not_awaited()
    assert req.last_outcome == ReachabilityOutcome.SKIPPED


@pytest.mark.asyncio
async def test_second_evaluation_without_event_does_not_probe_again():
    events = EventSequencer()
    events.record(EventKind.ADDRESS_ACQUIRED)
    prober = make_prober(False)
    req = make_requirement(prober=prober)

    assert await req.evaluate(WORKER, events.snapshot()) is False
    assert await req.evaluate(WORKER, events.snapshot()) is False
    assert prober.probe.await_count == 1


@pytest.mark.asyncio
async def test_cached_address_reused_across_address_events():
    events = EventSequencer()
    resolver = make_resolver(ResolutionResult.ok("192.0.2.1"))
    prober = make_prober(False, True)
    req = make_requirement(resolver, prober)

    events.record(EventKind.ADDRESS_ACQUIRED)
    assert await req.evaluate(WORKER, events.snapshot()) is False
    assert req.last_outcome == ReachabilityOutcome.UNREACHABLE

    events.record(EventKind.ADDRESS_ACQUIRED)
    assert await req.evaluate(WORKER, events.snapshot()) is True
    assert resolver.resolve.await_count == 1
    assert prober.probe.await_count == 2


@pytest.mark.asyncio
async def test_resolver_update_forces_fresh_resolution():
    events = EventSequencer()
    resolver = make_resolver(ResolutionResult.ok("192.0.2.1"), ResolutionResult.ok("192.0.2.99"))
    prober = make_prober(False, True)
    req = make_requirement(resolver, prober)

    events.record(EventKind.ADDRESS_ACQUIRED)
    await req.evaluate(WORKER, events.snapshot())

    events.record(EventKind.RESOLVER_UPDATED)
    events.record(EventKind.ADDRESS_ACQUIRED)
    assert await req.evaluate(WORKER, events.snapshot()) is True
    assert resolver.resolve.await_count == 2
    prober.probe.assert_awaited_with("gw.example.com", "192.0.2.99")
    assert req.check_state.address == "192.0.2.99"


@pytest.mark.asyncio
async def test_unresolvable_host_never_satisfied():
    events = EventSequencer()
    resolver = make_resolver(ResolutionResult.fail(ResolutionStatus.NOT_FOUND, "no such host"))
    prober = make_prober(True)
    req = ReachabilityRequirement("example.invalid", resolver=resolver, prober=prober)

    for kind in (EventKind.ADDRESS_ACQUIRED, EventKind.LINK_UP, EventKind.ADDRESS_ACQUIRED,
                 EventKind.RESOLVER_UPDATED, EventKind.ADDRESS_ACQUIRED):
        events.record(kind)
        assert await req.evaluate(WORKER, events.snapshot()) is False

    prober.probe.assert_not_awaited()
    assert req.last_outcome == ReachabilityOutcome.NOT_FOUND
    assert req.check_state.address_valid is False


@pytest.mark.asyncio
async def test_resolver_error_reported_separately_from_not_found():
    events = EventSequencer()
    events.record(EventKind.ADDRESS_ACQUIRED)
    req = make_requirement(make_resolver(ResolutionResult.fail(ResolutionStatus.TIMEOUT)))

    assert await req.evaluate(WORKER, events.snapshot()) is False
    assert req.last_outcome == ReachabilityOutcome.RESOLVE_FAILED


@pytest.mark.asyncio
async def test_resolver_exception_fails_closed():
    events = EventSequencer()
    events.record(EventKind.ADDRESS_ACQUIRED)
    resolver = AsyncMock()
    resolver.resolve.side_effect = OSError("network down")
    req = make_requirement(resolver)

    assert await req.evaluate(WORKER, events.snapshot()) is False
    assert req.state == RequirementState.PENDING


@pytest.mark.asyncio
async def test_probe_exception_fails_closed():
    events = EventSequencer()
    events.record(EventKind.ADDRESS_ACQUIRED)
    prober = AsyncMock()
    prober.probe.side_effect = RuntimeError("probe crashed")
    req = make_requirement(prober=prober)

    assert await req.evaluate(WORKER, events.snapshot()) is False
    assert req.last_outcome == ReachabilityOutcome.PROBE_FAILED
    # The resolved address stays cached for the next attempt
    assert req.check_state.address_valid is True


def test_dispose_releases_check_state():
    req = make_requirement()
    req.dispose()
    assert req.check_state is None
    assert req.state == RequirementState.DISPOSED


# ─── Tests: from_spec ─────────────────────────────────────────────


def test_from_spec_parses_family():
    req = ReachabilityRequirement.from_spec(
        {"hostname": " gw.example.com ", "address_family": "ipv6"},
        resolver=make_resolver(ResolutionResult.ok("2001:db8::1")),
        prober=make_prober(True),
    )
    assert req.hostname == "gw.example.com"
    assert req.check_state.family == AddressFamily.INET6


def test_from_spec_defaults_to_unspecified_family():
    req = ReachabilityRequirement.from_spec(
        {"hostname": "gw.example.com"}, resolver=make_resolver(), prober=make_prober(True),
    )
    assert req.check_state.family == AddressFamily.UNSPEC


def test_from_spec_rejects_missing_hostname():
    with pytest.raises(RequirementSpecError, match="hostname"):
        ReachabilityRequirement.from_spec({}, resolver=make_resolver(), prober=make_prober(True))


def test_from_spec_rejects_bad_family():
    with pytest.raises(RequirementSpecError, match="address-family"):
        ReachabilityRequirement.from_spec(
            {"hostname": "gw.example.com", "address_family": "appletalk"},
            resolver=make_resolver(),
            prober=make_prober(True),
        )
