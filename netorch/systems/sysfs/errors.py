"""
Netorch -- Sysfs Error Hierarchy
"""

from __future__ import annotations


class SysfsError(RuntimeError):
    """Base for all attribute store errors."""


class BackendIOError(SysfsError):
    """Reading or writing an attribute store entry failed."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
