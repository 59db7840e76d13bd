"""
Netorch — Common Primitives

Shared enums, base classes, and utilities used across all systems.
"""

from __future__ import annotations

import enum
import socket

from pydantic import BaseModel
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


# ─── Enums ────────────────────────────────────────────────────────


class AddressFamily(int, enum.Enum):
    UNSPEC = socket.AF_UNSPEC
    INET = socket.AF_INET
    INET6 = socket.AF_INET6

    @classmethod
    def from_name(cls, name: str) -> AddressFamily:
        """
        Parse an address-family attribute ("ipv4", "inet6", ...).

        Raises ValueError for names that do not denote a known family.
        """
        try:
            return _FAMILY_NAMES[name.strip().lower()]
        except KeyError:
            raise ValueError(f"unknown address family {name!r}") from None


_FAMILY_NAMES: dict[str, AddressFamily] = {
    "unspec": AddressFamily.UNSPEC,
    "any": AddressFamily.UNSPEC,
    "ipv4": AddressFamily.INET,
    "inet": AddressFamily.INET,
    "ipv6": AddressFamily.INET6,
    "inet6": AddressFamily.INET6,
}


class AddressFamilyMask(enum.IntFlag):
    """Bitmask of the address families an extension supports."""

    NONE = 0
    IPV4 = 1
    IPV6 = 2
    ALL = IPV4 | IPV6

    @classmethod
    def for_family(cls, family: int) -> AddressFamilyMask | None:
        """Mask matching a family; None for families nothing can support."""
        if family == AddressFamily.UNSPEC:
            return cls.ALL
        if family == AddressFamily.INET:
            return cls.IPV4
        if family == AddressFamily.INET6:
            return cls.IPV6
        return None


# ─── Base Models ──────────────────────────────────────────────────


class NetorchBaseModel(BaseModel):
    """Base model for all netorch primitives."""

    model_config = {"populate_by_name": True, "from_attributes": True}
