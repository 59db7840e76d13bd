"""
Netorch — Sysfs (Attribute Reconciler)

Reads kernel-exposed attributes and reconciles list-valued ones with a
declared target using minimal add/remove writes.

Public interface:
  AttributeReconciler  — reconcile(key, desired) against any AttributeBackend
  compare_lists        — the pure diff behind it
  SysfsBackend         — /sys/class/net implementation of the backend
  BondingSysfs         — bonding masters, slaves, ARP targets, options
  NetifSysfs           — per-interface scalar attributes
"""

from netorch.systems.sysfs.backend import AttributeBackend, SysfsBackend
from netorch.systems.sysfs.bonding import BondingSysfs, NetifSysfs
from netorch.systems.sysfs.errors import BackendIOError
from netorch.systems.sysfs.reconcile import AttributeReconciler, compare_lists
from netorch.systems.sysfs.types import AttrOp, AttrOpKind, ListDiff, ReconcileResult

__all__ = [
    "AttrOp",
    "AttrOpKind",
    "AttributeBackend",
    "AttributeReconciler",
    "BackendIOError",
    "BondingSysfs",
    "ListDiff",
    "NetifSysfs",
    "ReconcileResult",
    "SysfsBackend",
    "compare_lists",
]
