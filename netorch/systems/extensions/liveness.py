"""
Netorch — Extension Liveness

An extension with a PID-file template is considered running while that file
exists. The file's content is not read, so a stale PID file left behind by a
crashed daemon still counts as live.
"""

from __future__ import annotations

import os
from typing import Protocol


class LivenessProbe(Protocol):
    def is_live(self, path: str) -> bool: ...


class PidFileProbe:
    def is_live(self, path: str) -> bool:
        # TODO: read the PID and check the process still exists
        return os.path.exists(path)
