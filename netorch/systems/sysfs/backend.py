"""
Netorch — Sysfs Attribute Backend

List-valued sysfs attributes (bonding masters, slaves, ARP targets) are read
as whitespace-separated tokens and changed one value at a time by writing a
single line, "+value" to add and "-value" to remove.

Keys are paths relative to the backend root, e.g. "bond0/bonding/slaves"
under /sys/class/net.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

import structlog

from netorch.systems.sysfs.errors import BackendIOError

logger = structlog.get_logger()

# Optional sign, then hex, octal or decimal digits
_C_INTEGER = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


class AttributeBackend(Protocol):
    """What the reconciler needs from an attribute store. Failures raise BackendIOError."""

    def read(self, key: str) -> list[str]: ...

    def add(self, key: str, value: str) -> None: ...

    def remove(self, key: str, value: str) -> None: ...


class SysfsBackend:
    def __init__(self, root: str | Path = "/sys/class/net") -> None:
        self._root = Path(root)
        self._logger = logger.bind(system="sysfs.backend")

    @property
    def root(self) -> Path:
        return self._root

    def path(self, key: str) -> Path:
        return self._root / key

    def exists(self, key: str) -> bool:
        return self.path(key).exists()

    # ── List attributes ──────────────────────────────────────────

    def read(self, key: str) -> list[str]:
        path = self.path(key)
        try:
            with open(path) as f:
                return [token for line in f for token in line.split()]
        except OSError as exc:
            self._logger.error("sysfs_read_failed", path=str(path), error=exc.strerror or str(exc))
            raise BackendIOError(str(path), f"unable to open: {exc.strerror or exc}") from exc

    def add(self, key: str, value: str) -> None:
        self.write_line(key, f"+{value}")

    def remove(self, key: str, value: str) -> None:
        self.write_line(key, f"-{value}")

    # ── Scalar attributes ────────────────────────────────────────

    def read_string(self, key: str) -> str | None:
        """First line of the attribute, without its newline; None if it is empty."""
        path = self.path(key)
        try:
            with open(path) as f:
                line = f.readline()
        except OSError as exc:
            raise BackendIOError(str(path), f"unable to open: {exc.strerror or exc}") from exc
        if not line:
            return None
        return line.rstrip("\n")

    def read_int(self, key: str) -> int:
        """
        Parse the leading integer of the attribute with strtol base-0 rules:
        "0x1003" is hex, "010" is octal (8), "1500" is decimal, and anything
        after the number is ignored.

        Raises BackendIOError if the file is unreadable or empty, or if the
        first line carries no number at all. Such text is not read as 0.
        """
        text = self.read_string(key)
        if text is None:
            raise BackendIOError(str(self.path(key)), "empty attribute")
        match = _C_INTEGER.match(text)
        if match is None:
            raise BackendIOError(str(self.path(key)), f"not an integer: {text.strip()!r}")
        sign, digits = match.groups()
        if digits[:2] in ("0x", "0X"):
            value = int(digits[2:], 16)
        elif digits.startswith("0"):
            value = int(digits, 8)
        else:
            value = int(digits)
        return -value if sign == "-" else value

    def write_string(self, key: str, text: str) -> None:
        """Write *text* verbatim, without appending a newline."""
        self._write(key, text)

    def write_line(self, key: str, text: str) -> None:
        self._write(key, f"{text}\n")

    def _write(self, key: str, data: str) -> None:
        # Each write goes through its own open/close; sysfs applies it on close.
        path = self.path(key)
        try:
            with open(path, "w") as f:
                f.write(data)
        except OSError as exc:
            self._logger.error("sysfs_write_failed", path=str(path), error=exc.strerror or str(exc))
            raise BackendIOError(str(path), f"error writing: {exc.strerror or exc}") from exc
