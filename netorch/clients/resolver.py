"""
Netorch — Hostname Resolver

Resolution reports one of four outcomes instead of a bare count, so that
"the name does not exist (yet)" stays distinguishable from "the lookup
itself broke" in logs. Both are treated as not-resolved by callers.
"""

from __future__ import annotations

import asyncio
import enum
import socket
from typing import Protocol

import structlog

from netorch.primitives.common import AddressFamily, NetorchBaseModel

logger = structlog.get_logger().bind(system="clients.resolver")

_NOT_FOUND_ERRNOS: frozenset[int] = frozenset(
    code
    for code in (
        getattr(socket, "EAI_NONAME", None),
        getattr(socket, "EAI_NODATA", None),
    )
    if code is not None
)


class ResolutionStatus(enum.StrEnum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    ERROR = "error"


class ResolutionResult(NetorchBaseModel):
    status: ResolutionStatus
    address: str | None = None
    reason: str = ""

    @property
    def resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED and self.address is not None

    @classmethod
    def ok(cls, address: str) -> ResolutionResult:
        return cls(status=ResolutionStatus.RESOLVED, address=address)

    @classmethod
    def fail(cls, status: ResolutionStatus, reason: str = "") -> ResolutionResult:
        return cls(status=status, reason=reason)


class HostnameResolver(Protocol):
    """Minimal interface the reachability check needs from name resolution."""

    async def resolve(
        self,
        hostname: str,
        family: AddressFamily,
        timeout_s: float,
    ) -> ResolutionResult:
        """Resolve *hostname* to a single address, restricted to *family* unless UNSPEC."""
        ...


class AsyncioResolver:
    """Resolves through the event loop's getaddrinfo, bounded by a timeout."""

    async def resolve(
        self,
        hostname: str,
        family: AddressFamily,
        timeout_s: float,
    ) -> ResolutionResult:
        loop = asyncio.get_running_loop()
        try:
            infos = await asyncio.wait_for(
                loop.getaddrinfo(hostname, None, family=int(family), type=socket.SOCK_STREAM),
                timeout=timeout_s,
            )
        except TimeoutError:
            return ResolutionResult.fail(ResolutionStatus.TIMEOUT, f"no answer within {timeout_s}s")
        except socket.gaierror as exc:
            if exc.errno in _NOT_FOUND_ERRNOS:
                return ResolutionResult.fail(ResolutionStatus.NOT_FOUND, str(exc))
            if exc.errno == getattr(socket, "EAI_AGAIN", None):
                return ResolutionResult.fail(ResolutionStatus.TIMEOUT, str(exc))
            return ResolutionResult.fail(ResolutionStatus.ERROR, str(exc))
        except OSError as exc:
            logger.warning("resolver_error", hostname=hostname, error=str(exc))
            return ResolutionResult.fail(ResolutionStatus.ERROR, str(exc))

        if not infos:
            return ResolutionResult.fail(ResolutionStatus.NOT_FOUND, "empty answer")
        sockaddr = infos[0][4]
        return ResolutionResult.ok(str(sockaddr[0]))
