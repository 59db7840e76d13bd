"""
Netorch — Attribute List Reconciliation

Brings a list-valued attribute into agreement with a desired list using the
fewest add/remove writes.

Order of operations: all removals, then all additions. Some attributes
refuse a value that is still associated elsewhere (an interface cannot be a
slave of two bonds at once), so stale entries go first.

There is no rollback. If a write fails, earlier writes stay applied and the
result says which ones. Re-running reconcile() is safe: it diffs against the
partially updated state and only applies what is still missing.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from netorch.systems.sysfs.backend import AttributeBackend
from netorch.systems.sysfs.errors import BackendIOError
from netorch.systems.sysfs.types import AttrOp, AttrOpKind, ListDiff, ReconcileResult

logger = structlog.get_logger()


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def compare_lists(current: Iterable[str], desired: Iterable[str]) -> ListDiff:
    """
    Partition two lists treated as sets.

    Duplicates within one list collapse to their first occurrence. Each
    partition keeps the order of its source list; unchanged follows current.
    """
    current_values = _unique(current)
    desired_values = _unique(desired)
    current_set = set(current_values)
    desired_set = set(desired_values)

    return ListDiff(
        to_remove=[v for v in current_values if v not in desired_set],
        to_add=[v for v in desired_values if v not in current_set],
        unchanged=[v for v in current_values if v in desired_set],
    )


class AttributeReconciler:
    def __init__(self, backend: AttributeBackend) -> None:
        self._backend = backend
        self._logger = logger.bind(system="sysfs.reconcile")

    def reconcile(self, key: str, desired: Iterable[str], label: str = "") -> ReconcileResult:
        """
        Make the list at *key* equal (as a set) to *desired*.

        *label* names the owner in logs (usually the interface name).
        """
        log = self._logger.bind(key=key, owner=label or key)

        try:
            current = self._backend.read(key)
        except BackendIOError as exc:
            log.error("attr_list_read_failed", error=str(exc))
            return ReconcileResult(success=False, key=key, error=str(exc))

        diff = compare_lists(current, desired)
        if diff.empty:
            log.debug("attr_list_unchanged")
            return ReconcileResult(success=True, key=key, diff=diff)

        log.debug(
            "attr_list_updating",
            remove=diff.to_remove,
            add=diff.to_add,
            leave=diff.unchanged,
        )

        applied: list[AttrOp] = []
        for op in diff.operations():
            try:
                if op.kind == AttrOpKind.REMOVE:
                    self._backend.remove(key, op.value)
                else:
                    self._backend.add(key, op.value)
            except BackendIOError as exc:
                log.error(
                    "attr_list_write_failed",
                    operation=op.kind.value,
                    value=op.value,
                    applied=len(applied),
                    error=str(exc),
                )
                return ReconcileResult(
                    success=False,
                    key=key,
                    diff=diff,
                    applied=applied,
                    failed=op,
                    error=f"could not {op.kind.value} {op.value}: {exc}",
                )
            applied.append(op)

        return ReconcileResult(success=True, key=key, diff=diff, applied=applied)
