"""
Netorch — external collaborator clients.

  HostnameResolver / AsyncioResolver   — hostname → address lookups
  ReachabilityProber / PingProber      — is an address answering?
"""

from netorch.clients.prober import PingProber, ReachabilityProber
from netorch.clients.resolver import (
    AsyncioResolver,
    HostnameResolver,
    ResolutionResult,
    ResolutionStatus,
)

__all__ = [
    "AsyncioResolver",
    "HostnameResolver",
    "PingProber",
    "ReachabilityProber",
    "ResolutionResult",
    "ResolutionStatus",
]
