"""
Netorch — Sysfs Types

ListDiff partitions a current and a desired attribute list. Each partition
keeps the order of the list it came from, so the operations derived from it
are reproducible run to run.
"""

from __future__ import annotations

import enum

from pydantic import Field

from netorch.primitives.common import NetorchBaseModel


class AttrOpKind(enum.StrEnum):
    ADD = "add"
    REMOVE = "remove"


class AttrOp(NetorchBaseModel):
    kind: AttrOpKind
    value: str


class ListDiff(NetorchBaseModel):
    to_remove: list[str] = Field(default_factory=list)   # in current, not desired
    to_add: list[str] = Field(default_factory=list)      # in desired, not current
    unchanged: list[str] = Field(default_factory=list)   # in both, current order

    @property
    def empty(self) -> bool:
        return not self.to_remove and not self.to_add

    def operations(self) -> list[AttrOp]:
        """All removals first, then all additions."""
        return [AttrOp(kind=AttrOpKind.REMOVE, value=v) for v in self.to_remove] + [
            AttrOp(kind=AttrOpKind.ADD, value=v) for v in self.to_add
        ]


class ReconcileResult(NetorchBaseModel):
    """
    Outcome of one reconciliation.

    On failure, applied lists the operations that went through before the
    failing one. They are not rolled back.
    """

    success: bool
    key: str
    diff: ListDiff | None = None
    applied: list[AttrOp] = Field(default_factory=list)
    failed: AttrOp | None = None
    error: str = ""
