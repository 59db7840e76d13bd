"""
Netorch — Helper Process Spawning

Runs one shell command line as a child process and reaps exactly that child.

The supervisor depends on the ProcessSpawner / ChildProcess contracts only,
so tests can count or fake process creation without touching the OS.
"""

from __future__ import annotations

import asyncio
import os
import signal
from collections.abc import Mapping
from typing import Protocol

import structlog

from netorch.systems.extensions.errors import ShellUnavailableError, SpawnError

logger = structlog.get_logger().bind(system="extensions.process")


class ChildProcess(Protocol):
    pid: int

    async def wait(self) -> int:
        """Block until the child exits; return its return code (negative: killed by signal)."""
        ...

    def kill(self) -> None: ...


class ProcessSpawner(Protocol):
    async def spawn(self, command: str, env: Mapping[str, str]) -> ChildProcess:
        """
        Start *command* through a shell with *env* added to the child's environment.

        Raises SpawnError if the process could not be created and
        ShellUnavailableError if the shell itself cannot be executed.
        """
        ...


def ensure_child_signals() -> None:
    """
    Make sure child exit statuses can be collected.

    If SIGCHLD was set to SIG_IGN somewhere, the kernel reaps children on its
    own and waiting for them fails. Restore the default disposition.
    """
    sigchld = getattr(signal, "SIGCHLD", None)
    if sigchld is None:
        return
    if signal.getsignal(sigchld) != signal.SIG_IGN:
        return
    try:
        signal.signal(sigchld, signal.SIG_DFL)
    except ValueError:
        # signal.signal() only works from the main thread
        logger.warning("sigchld_reset_failed", reason="not on main thread")


async def reap(child: ChildProcess) -> int:
    """
    Wait for exactly *child* to exit.

    Interrupted waits are retried. Stopped-but-alive children are not
    reported by the wait, so only a real exit ends the loop. Any other
    OSError is left to the caller.
    """
    while True:
        try:
            return await child.wait()
        except InterruptedError:
            continue


class ShellSpawner:
    """Spawns ``<shell> -c <command>`` with extra variables in the child's environment only."""

    def __init__(self, shell: str = "/bin/sh") -> None:
        self._shell = shell

    async def spawn(self, command: str, env: Mapping[str, str]) -> ChildProcess:
        child_env = {**os.environ, **env}
        try:
            return await asyncio.create_subprocess_exec(
                self._shell, "-c", command,
                stdin=asyncio.subprocess.DEVNULL,
                env=child_env,
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise ShellUnavailableError(f"unable to execute {self._shell}: {exc}") from exc
        except OSError as exc:
            raise SpawnError(f"unable to fork: {exc}") from exc
