"""
Netorch — Extension Types

An Extension describes an external helper program that configures one
aspect of the network stack (a DHCP client, a VPN daemon, ...). Commands,
the PID-file path and environment entries are templates evaluated against
the interface's configuration document at run time.

Extensions are immutable once loaded.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator

from netorch.primitives.common import AddressFamilyMask, NetorchBaseModel, new_id

# ─── Enums ────────────────────────────────────────────────────────


class ExtensionType(enum.StrEnum):
    DHCP = "dhcp"
    AUTOIP = "autoip"
    IBFT = "ibft"
    VPN = "vpn"
    SYSTEM = "system"


class ExtensionOperation(enum.StrEnum):
    START = "start"
    STOP = "stop"


class ExtensionStatus(enum.StrEnum):
    SUCCESS = "success"
    NOT_CONFIGURED = "not_configured"          # no command for this operation: no-op success
    EXPRESSION_ERROR = "expression_error"
    SPAWN_FAILED = "spawn_failed"
    WAIT_FAILED = "wait_failed"
    ABNORMAL_TERMINATION = "abnormal_termination"
    NON_ZERO_EXIT = "non_zero_exit"
    VERIFICATION_MISMATCH = "verification_mismatch"  # exit 0, but liveness disagrees
    TIMED_OUT = "timed_out"


# ─── Descriptor ───────────────────────────────────────────────────


class Extension(NetorchBaseModel):
    name: str
    type: ExtensionType
    supported_af: AddressFamilyMask = AddressFamilyMask.ALL
    start_command: str | None = None
    stop_command: str | None = None
    pid_file_path: str | None = None
    # Each entry evaluates to "NAME=value", or to nothing
    environment: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("supported_af", mode="before")
    @classmethod
    def _parse_family_names(cls, value: Any) -> Any:
        """Accept ["ipv4", "ipv6"] as well as a raw bitmask."""
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            mask = AddressFamilyMask.NONE
            for name in value:
                try:
                    mask |= AddressFamilyMask[str(name).strip().upper()]
                except KeyError:
                    raise ValueError(f"unknown address family {name!r}") from None
            return mask
        return value

    def command_for(self, operation: ExtensionOperation) -> str | None:
        if operation == ExtensionOperation.START:
            return self.start_command
        return self.stop_command


# ─── Results ──────────────────────────────────────────────────────


class ExtensionResult(NetorchBaseModel):
    """
    Verdict of one start/stop run.

    exit_code is set whenever the child exited normally; signal when it was
    killed. detail is a human-readable account of the failing sub-step.
    """

    ok: bool
    status: ExtensionStatus
    extension: str
    operation: ExtensionOperation
    ifname: str
    detail: str = ""
    exit_code: int | None = None
    signal: int | None = None
    run_id: str = Field(default_factory=new_id)
    duration_ms: int = 0
