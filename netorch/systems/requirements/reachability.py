"""
Netorch — Reachability Requirement

"Host X must be reachable": resolves the hostname once, caches the address,
and probes it on every evaluation that the caching policy lets through.

Do not check too often: unless a new address was acquired since the last
attempt, there is no point in another lookup. A resolver update discards the
cached address so the next attempt resolves afresh.

Every failure is fail-closed. last_outcome records why the last attempt did
not succeed so operators can tell a name that does not resolve from a host
that does not answer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from netorch.clients.prober import ReachabilityProber
from netorch.clients.resolver import HostnameResolver, ResolutionStatus
from netorch.primitives.common import AddressFamily, NetorchBaseModel
from netorch.systems.requirements.errors import RequirementSpecError
from netorch.systems.requirements.requirement import Requirement
from netorch.systems.requirements.types import EventKind, ReachabilityOutcome, Worker

logger = structlog.get_logger()


class ReachabilityCheck(NetorchBaseModel):
    """Per-requirement state: target, family hint, and the cached address."""

    hostname: str
    family: AddressFamily = AddressFamily.UNSPEC
    address: str | None = None
    address_valid: bool = False


class ReachabilityRequirement(Requirement):
    kind = "reachable"
    trigger_event = EventKind.ADDRESS_ACQUIRED
    invalidating_events = (EventKind.RESOLVER_UPDATED,)

    def __init__(
        self,
        hostname: str,
        resolver: HostnameResolver,
        prober: ReachabilityProber,
        family: AddressFamily = AddressFamily.UNSPEC,
        resolve_timeout_s: float = 1.0,
    ) -> None:
        super().__init__()
        self.check_state: ReachabilityCheck | None = ReachabilityCheck(hostname=hostname, family=family)
        self.last_outcome: ReachabilityOutcome | None = None
        self._resolver = resolver
        self._prober = prober
        self._resolve_timeout_s = resolve_timeout_s
        self._logger = logger.bind(system="requirements.reachability", hostname=hostname)

    @classmethod
    def from_spec(
        cls,
        spec: Mapping[str, Any],
        resolver: HostnameResolver,
        prober: ReachabilityProber,
        resolve_timeout_s: float = 1.0,
    ) -> ReachabilityRequirement:
        """
        Build from a declarative description:
          {"hostname": "gw.example.com", "address_family": "ipv4"}

        Raises RequirementSpecError when the hostname is missing or the
        address family is not recognised.
        """
        hostname = spec.get("hostname")
        if not isinstance(hostname, str) or not hostname.strip():
            raise RequirementSpecError("reachability requirement needs a hostname")

        family = AddressFamily.UNSPEC
        family_attr = spec.get("address_family")
        if family_attr is not None:
            try:
                family = AddressFamily.from_name(str(family_attr))
            except ValueError:
                raise RequirementSpecError(
                    f"bad address-family attribute {family_attr!r} for {hostname}"
                ) from None

        return cls(
            hostname.strip(),
            resolver=resolver,
            prober=prober,
            family=family,
            resolve_timeout_s=resolve_timeout_s,
        )

    @property
    def hostname(self) -> str:
        assert self.check_state is not None
        return self.check_state.hostname

    def describe(self) -> str:
        return f"reachable:{self.hostname}"

    def on_skip(self, worker: Worker) -> None:
        self.last_outcome = ReachabilityOutcome.SKIPPED
        self._logger.debug("check_reachability_skip", worker=worker.name)

    def invalidate(self) -> None:
        assert self.check_state is not None
        self.check_state.address_valid = False

    async def check(self, worker: Worker) -> bool:
        check = self.check_state
        assert check is not None

        if not check.address_valid:
            result = await self._resolver.resolve(check.hostname, check.family, self._resolve_timeout_s)
            if not result.resolved:
                self.last_outcome = (
                    ReachabilityOutcome.NOT_FOUND
                    if result.status == ResolutionStatus.NOT_FOUND
                    else ReachabilityOutcome.RESOLVE_FAILED
                )
                self._logger.debug(
                    "check_reachability_not_resolvable",
                    worker=worker.name,
                    status=result.status.value,
                    reason=result.reason,
                )
                return False
            check.address = result.address
            check.address_valid = True

        assert check.address is not None
        try:
            reachable = await self._prober.probe(check.hostname, check.address)
        except Exception as exc:
            self.last_outcome = ReachabilityOutcome.PROBE_FAILED
            self._logger.debug(
                "check_reachability_probe_error",
                worker=worker.name,
                address=check.address,
                error=str(exc),
            )
            return False

        if not reachable:
            self.last_outcome = ReachabilityOutcome.UNREACHABLE
            self._logger.debug("check_reachability_unreachable", worker=worker.name, address=check.address)
            return False

        self.last_outcome = ReachabilityOutcome.REACHABLE
        self._logger.debug("check_reachability_ok", worker=worker.name, address=check.address)
        return True

    def release(self) -> None:
        self.check_state = None
