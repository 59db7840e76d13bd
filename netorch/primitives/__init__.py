"""Netorch — shared primitives."""

from netorch.primitives.common import (
    AddressFamily,
    AddressFamilyMask,
    NetorchBaseModel,
    new_id,
)

__all__ = [
    "AddressFamily",
    "AddressFamilyMask",
    "NetorchBaseModel",
    "new_id",
]
