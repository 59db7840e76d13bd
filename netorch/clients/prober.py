"""
Netorch — Reachability Prober

The default prober shells out to ping(8) rather than opening raw ICMP
sockets, so it works without elevated privileges.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from netorch.config import ProbeConfig

logger = structlog.get_logger().bind(system="clients.prober")


class ReachabilityProber(Protocol):
    """Minimal interface the reachability check needs from probing."""

    async def probe(self, hostname: str, address: str) -> bool:
        """Return True when *address* answers."""
        ...


class PingProber:
    """Probe an address with ``ping -c COUNT -W TIMEOUT``."""

    def __init__(self, command: str = "ping", count: int = 1, timeout_s: int = 1) -> None:
        self._command = command
        self._count = count
        self._timeout_s = timeout_s
        self._log = logger

    @classmethod
    def from_config(cls, config: ProbeConfig) -> PingProber:
        return cls(command=config.command, count=config.count, timeout_s=config.timeout_s)

    async def probe(self, hostname: str, address: str) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                self._command,
                "-c", str(self._count),
                "-W", str(self._timeout_s),
                address,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            returncode = await proc.wait()
        except FileNotFoundError:
            self._log.warning("probe_command_missing", command=self._command)
            return False
        except OSError as exc:
            self._log.warning("probe_error", hostname=hostname, address=address, error=str(exc))
            return False

        return returncode == 0
