"""
Netorch — Requirement Registry

Maps declarative requirement kinds ("reachable", ...) to builders.

Registration happens at startup; build() is then called each time the state
machine parses a requirement out of a worker's configuration. Every call
returns a fresh Requirement owned by the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from netorch.systems.requirements.errors import UnknownRequirementError
from netorch.systems.requirements.reachability import ReachabilityRequirement
from netorch.systems.requirements.requirement import Requirement

if TYPE_CHECKING:
    from netorch.clients.prober import ReachabilityProber
    from netorch.clients.resolver import HostnameResolver

logger = structlog.get_logger()

RequirementBuilder = Callable[[Mapping[str, Any]], Requirement]


class RequirementRegistry:
    def __init__(self) -> None:
        self._builders: dict[str, RequirementBuilder] = {}
        self._logger = logger.bind(system="requirements.registry")

    def register(self, kind: str, builder: RequirementBuilder) -> None:
        """
        Register a builder under *kind*.

        Raises ValueError if the kind is empty or already registered.
        """
        if not kind:
            raise ValueError("requirement kind must not be empty")
        if kind in self._builders:
            raise ValueError(f"Requirement kind {kind!r} already registered")
        self._builders[kind] = builder
        self._logger.debug("requirement_kind_registered", kind=kind)

    def build(self, kind: str, spec: Mapping[str, Any]) -> Requirement:
        """
        Build a new requirement of *kind* from its declarative *spec*.

        Raises UnknownRequirementError for unregistered kinds; builders raise
        RequirementSpecError for malformed specs.
        """
        builder = self._builders.get(kind)
        if builder is None:
            raise UnknownRequirementError(
                f"No requirement registered for kind {kind!r}. "
                f"Available: {self.list_kinds()}"
            )
        return builder(spec)

    def list_kinds(self) -> list[str]:
        return sorted(self._builders.keys())

    def __contains__(self, kind: str) -> bool:
        return kind in self._builders

    def __len__(self) -> int:
        return len(self._builders)


def default_registry(
    resolver: HostnameResolver,
    prober: ReachabilityProber,
    resolve_timeout_s: float = 1.0,
) -> RequirementRegistry:
    """Registry pre-loaded with the built-in requirement kinds."""
    registry = RequirementRegistry()
    registry.register(
        ReachabilityRequirement.kind,
        lambda spec: ReachabilityRequirement.from_spec(
            spec, resolver=resolver, prober=prober, resolve_timeout_s=resolve_timeout_s,
        ),
    )
    return registry
