"""
Netorch — Extension Supervisor

Runs an extension's start or stop command for one interface and reports a
verdict. The sequence for a single run:

  1. No command configured for the operation → no-op success.
  2. Expand environment templates. Each must yield at most one "NAME=value"
     string; zero results set nothing, more than one aborts the run.
  3. Expand the command template; it must yield exactly one command line.
  4. Restore SIGCHLD so the child's status can be collected.
  5. Spawn the command through the shell, with the expanded variables in the
     child's environment only.
  6. Reap exactly that child, retrying interrupted waits.
  7. Classify: killed by a signal, non-zero exit, or zero exit. A zero exit
     is only trusted after the liveness probe agrees (start ⇒ running,
     stop ⇒ not running) when the extension has a PID-file template.

Anything failing before step 5 aborts without spawning. Once a child exists
it is always reaped before run() returns.

No timeout applies unless command_timeout_s is configured; a hung helper then
blocks its caller until it exits, however long that takes.
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from netorch.systems.extensions.errors import ExpressionError, SpawnError
from netorch.systems.extensions.expression import ExpressionEvaluator, TemplateEvaluator
from netorch.systems.extensions.liveness import LivenessProbe, PidFileProbe
from netorch.systems.extensions.process import (
    ChildProcess,
    ProcessSpawner,
    ShellSpawner,
    ensure_child_signals,
    reap,
)
from netorch.systems.extensions.types import (
    Extension,
    ExtensionOperation,
    ExtensionResult,
    ExtensionStatus,
)

if TYPE_CHECKING:
    from netorch.config import SupervisorConfig

logger = structlog.get_logger()


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


class ExtensionSupervisor:
    def __init__(
        self,
        evaluator: ExpressionEvaluator | None = None,
        spawner: ProcessSpawner | None = None,
        liveness: LivenessProbe | None = None,
        command_timeout_s: float | None = None,
    ) -> None:
        self._evaluator = evaluator or TemplateEvaluator()
        self._spawner = spawner or ShellSpawner()
        self._liveness = liveness or PidFileProbe()
        self._command_timeout_s = command_timeout_s
        self._logger = logger.bind(system="extensions.supervisor")

    @classmethod
    def from_config(
        cls,
        config: SupervisorConfig,
        evaluator: ExpressionEvaluator | None = None,
    ) -> ExtensionSupervisor:
        return cls(
            evaluator=evaluator,
            spawner=ShellSpawner(config.shell),
            command_timeout_s=config.command_timeout_s,
        )

    async def start(self, extension: Extension, ifname: str, document: Mapping[str, Any]) -> ExtensionResult:
        return await self.run(extension, ExtensionOperation.START, ifname, document)

    async def stop(self, extension: Extension, ifname: str, document: Mapping[str, Any]) -> ExtensionResult:
        return await self.run(extension, ExtensionOperation.STOP, ifname, document)

    async def run(
        self,
        extension: Extension,
        operation: ExtensionOperation,
        ifname: str,
        document: Mapping[str, Any],
    ) -> ExtensionResult:
        """
        Run *operation* of *extension* for *ifname*.

        Returns a verdict for every operational failure. Only
        ShellUnavailableError escapes: without a working shell no extension
        can ever run.
        """
        started = time.monotonic()
        log = self._logger.bind(extension=extension.name, operation=operation.value, ifname=ifname)

        def verdict(status: ExtensionStatus, detail: str = "", **fields: Any) -> ExtensionResult:
            return ExtensionResult(
                ok=status in (ExtensionStatus.SUCCESS, ExtensionStatus.NOT_CONFIGURED),
                status=status,
                extension=extension.name,
                operation=operation,
                ifname=ifname,
                detail=detail,
                duration_ms=int((time.monotonic() - started) * 1000),
                **fields,
            )

        template = extension.command_for(operation)
        if template is None:
            return verdict(ExtensionStatus.NOT_CONFIGURED)

        log.debug("extension_run")

        step = "environment"
        try:
            env = self._expand_environment(extension, document)
            step = "command"
            commands = self._evaluator.evaluate(template, document)
            if len(commands) != 1:
                raise ExpressionError(f"command template yielded {len(commands)} values")
        except ExpressionError as exc:
            log.error("extension_expression_error", step=step, error=str(exc))
            return verdict(
                ExtensionStatus.EXPRESSION_ERROR,
                f"unable to {operation.value} extension: error evaluating {step} expression: {exc}",
            )

        command = commands[0]
        log.debug("extension_spawn", command=command, env=sorted(env))

        ensure_child_signals()
        try:
            child = await self._spawner.spawn(command, env)
        except SpawnError as exc:
            log.error("extension_spawn_failed", step="spawn", error=str(exc))
            return verdict(ExtensionStatus.SPAWN_FAILED, str(exc))

        try:
            returncode = await self._wait(child)
        except TimeoutError:
            log.error("extension_timeout", step="wait", pid=child.pid, timeout_s=self._command_timeout_s)
            return verdict(
                ExtensionStatus.TIMED_OUT,
                f"{operation.value} command did not finish within {self._command_timeout_s}s",
            )
        except OSError as exc:
            log.error("extension_wait_failed", step="wait", pid=child.pid, error=str(exc))
            return verdict(
                ExtensionStatus.WAIT_FAILED,
                f"error waiting for extension process to finish: {exc}",
            )

        if returncode < 0:
            signame = _signal_name(-returncode)
            log.error("extension_terminated_abnormally", step="wait", signal=signame)
            return verdict(
                ExtensionStatus.ABNORMAL_TERMINATION,
                f"{operation.value} command terminated abnormally ({signame})",
                signal=-returncode,
            )

        if returncode != 0:
            log.error("extension_exit_status", step="wait", exit_code=returncode)
            return verdict(
                ExtensionStatus.NON_ZERO_EXIT,
                f"{operation.value} command exited with error status {returncode}",
                exit_code=returncode,
            )

        if extension.pid_file_path is not None:
            active = self.is_active(extension, ifname, document)
            if operation == ExtensionOperation.START and not active:
                log.error("extension_verification_mismatch", step="verify", expected="running")
                return verdict(
                    ExtensionStatus.VERIFICATION_MISMATCH,
                    "start command succeeded, but service not running",
                    exit_code=0,
                )
            if operation == ExtensionOperation.STOP and active:
                log.error("extension_verification_mismatch", step="verify", expected="stopped")
                return verdict(
                    ExtensionStatus.VERIFICATION_MISMATCH,
                    "stop command succeeded, but service still running",
                    exit_code=0,
                )

        log.info("extension_run_complete")
        return verdict(ExtensionStatus.SUCCESS, exit_code=0)

    def is_active(self, extension: Extension, ifname: str, document: Mapping[str, Any]) -> bool:
        """
        Whether *extension* is running for *ifname*, per its PID-file template.

        Extensions without a template are never reported active. A template
        that fails to evaluate to exactly one path is logged and reported
        not active.
        """
        if extension.pid_file_path is None:
            return False

        try:
            paths = self._evaluator.evaluate(extension.pid_file_path, document)
        except ExpressionError as exc:
            paths = []
            error = str(exc)
        else:
            error = f"pid file template yielded {len(paths)} values"

        if len(paths) != 1:
            self._logger.error(
                "extension_liveness_unavailable",
                extension=extension.name,
                ifname=ifname,
                error=error,
            )
            return False

        return self._liveness.is_live(paths[0])

    def _expand_environment(self, extension: Extension, document: Mapping[str, Any]) -> dict[str, str]:
        """
        Expand the environment templates into variables for the child only.

        Every non-empty result must be a NAME=value assignment. A bare NAME
        is an expression error; it does not unset NAME in the child.
        """
        env: dict[str, str] = {}
        for template in extension.environment:
            values = self._evaluator.evaluate(template, document)
            if len(values) > 1:
                raise ExpressionError(f"environment template {template!r} yielded {len(values)} values")
            if not values:
                continue
            name, sep, value = values[0].partition("=")
            if not sep or not name:
                raise ExpressionError(f"environment entry {values[0]!r} is not NAME=value")
            env[name] = value
        return env

    async def _wait(self, child: ChildProcess) -> int:
        try:
            if self._command_timeout_s is None:
                return await reap(child)
            return await asyncio.wait_for(reap(child), timeout=self._command_timeout_s)
        except (TimeoutError, asyncio.CancelledError):
            with contextlib.suppress(ProcessLookupError):
                child.kill()
            await reap(child)
            raise
