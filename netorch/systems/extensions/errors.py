"""
Netorch — Extension Error Hierarchy

Raised at the collaborator seams of the extension supervisor. The supervisor
turns all of them into a failed ExtensionResult, except ShellUnavailableError:
if the command shell itself cannot be executed the execution environment is
broken and retrying will not help, so that one propagates to the caller.
"""

from __future__ import annotations


class ExtensionError(RuntimeError):
    """Base for all extension execution errors."""


class ExpressionError(ExtensionError):
    """A template could not be evaluated, or yielded an unusable result."""


class SpawnError(ExtensionError):
    """The helper process could not be created."""


class ShellUnavailableError(ExtensionError):
    """The configured command shell is missing or not executable."""
