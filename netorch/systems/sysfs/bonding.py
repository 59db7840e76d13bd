"""
Netorch — Bonding and Netif Sysfs Attributes

Thin accessors over /sys/class/net for per-interface attributes and the
bonding driver's control files:

  bonding_masters               — list of bond devices (global)
  <bond>/bonding/slaves         — list of enslaved interfaces
  <bond>/bonding/arp_ip_target  — list of ARP monitor targets
  <bond>/bonding/<attr>         — scalar bonding options
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from netorch.systems.sysfs.backend import SysfsBackend
from netorch.systems.sysfs.reconcile import AttributeReconciler
from netorch.systems.sysfs.types import ReconcileResult

if TYPE_CHECKING:
    from netorch.config import SysfsConfig

BONDING_MASTERS = "bonding_masters"


def _bonding_key(ifname: str, attr_name: str) -> str:
    return f"{ifname}/bonding/{attr_name}"


class NetifSysfs:
    def __init__(self, backend: SysfsBackend) -> None:
        self._backend = backend

    @classmethod
    def from_config(cls, config: SysfsConfig) -> NetifSysfs:
        return cls(SysfsBackend(config.root))

    def get_int(self, ifname: str, attr_name: str) -> int:
        return self._backend.read_int(f"{ifname}/{attr_name}")

    def get_string(self, ifname: str, attr_name: str) -> str | None:
        return self._backend.read_string(f"{ifname}/{attr_name}")


class BondingSysfs:
    def __init__(self, backend: SysfsBackend) -> None:
        self._backend = backend
        self._reconciler = AttributeReconciler(backend)

    @classmethod
    def from_config(cls, config: SysfsConfig) -> BondingSysfs:
        return cls(SysfsBackend(config.root))

    def available(self) -> bool:
        """True once the bonding driver is loaded."""
        return self._backend.exists(BONDING_MASTERS)

    # ── Masters ──────────────────────────────────────────────────

    def get_masters(self) -> list[str]:
        return self._backend.read(BONDING_MASTERS)

    def add_master(self, ifname: str) -> None:
        self._backend.add(BONDING_MASTERS, ifname)

    def delete_master(self, ifname: str) -> None:
        self._backend.remove(BONDING_MASTERS, ifname)

    def is_master(self, ifname: str) -> bool:
        return self._backend.exists(f"{ifname}/bonding")

    # ── Slaves ───────────────────────────────────────────────────

    def get_slaves(self, master: str) -> list[str]:
        return self._backend.read(_bonding_key(master, "slaves"))

    def add_slave(self, master: str, slave: str) -> None:
        self._backend.add(_bonding_key(master, "slaves"), slave)

    def delete_slave(self, master: str, slave: str) -> None:
        self._backend.remove(_bonding_key(master, "slaves"), slave)

    # ── ARP targets ──────────────────────────────────────────────

    def get_arp_targets(self, master: str) -> list[str]:
        return self._backend.read(_bonding_key(master, "arp_ip_target"))

    def add_arp_target(self, master: str, address: str) -> None:
        self._backend.add(_bonding_key(master, "arp_ip_target"), address)

    def delete_arp_target(self, master: str, address: str) -> None:
        self._backend.remove(_bonding_key(master, "arp_ip_target"), address)

    # ── Options ──────────────────────────────────────────────────

    def get_attr(self, ifname: str, attr_name: str) -> str | None:
        return self._backend.read_string(_bonding_key(ifname, attr_name))

    def set_attr(self, ifname: str, attr_name: str, value: str) -> None:
        self._backend.write_string(_bonding_key(ifname, attr_name), value)

    def set_list_attr(self, ifname: str, attr_name: str, values: Iterable[str]) -> ReconcileResult:
        """Reconcile a list-valued bonding attribute (slaves, arp_ip_target) to *values*."""
        return self._reconciler.reconcile(_bonding_key(ifname, attr_name), values, label=ifname)
