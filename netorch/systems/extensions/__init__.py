"""
Netorch — Extensions (Helper Process Supervisor)

Extensions are external helper programs that configure aspects of the
network stack the orchestrator does not implement natively. This package
starts and stops them, verifies the result, and keeps the declared set.

Public interface:
  ExtensionSupervisor  — run/start/stop/is_active
  ExtensionRegistry    — ordered registry, first declared match wins
  Extension            — immutable descriptor
  ExtensionResult      — verdict of one run
  TemplateEvaluator    — default template expression engine
"""

from netorch.systems.extensions.expression import ExpressionEvaluator, TemplateEvaluator
from netorch.systems.extensions.registry import ExtensionRegistry
from netorch.systems.extensions.supervisor import ExtensionSupervisor
from netorch.systems.extensions.types import (
    Extension,
    ExtensionOperation,
    ExtensionResult,
    ExtensionStatus,
    ExtensionType,
)

__all__ = [
    "ExpressionEvaluator",
    "Extension",
    "ExtensionOperation",
    "ExtensionRegistry",
    "ExtensionResult",
    "ExtensionStatus",
    "ExtensionSupervisor",
    "ExtensionType",
    "TemplateEvaluator",
]
