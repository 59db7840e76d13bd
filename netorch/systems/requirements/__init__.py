"""
Netorch — Requirements (Precondition Framework)

Lets the interface state machine defer a transition until an externally
checkable fact holds, without re-running expensive checks when nothing
relevant has changed.

Public interface:
  Requirement              — ABC for cacheable preconditions
  RequirementList          — the requirements guarding one transition
  ReachabilityRequirement  — "host X must be reachable"
  RequirementRegistry      — declarative kind → builder
  EventSequencer           — single writer of event counters
  EventSnapshot, EventKind — what evaluate() is given each tick
"""

from netorch.systems.requirements.events import EventSequencer
from netorch.systems.requirements.reachability import ReachabilityRequirement
from netorch.systems.requirements.registry import RequirementRegistry, default_registry
from netorch.systems.requirements.requirement import Requirement, RequirementList
from netorch.systems.requirements.types import EventKind, EventSnapshot, RequirementState

__all__ = [
    "EventKind",
    "EventSequencer",
    "EventSnapshot",
    "ReachabilityRequirement",
    "Requirement",
    "RequirementList",
    "RequirementRegistry",
    "RequirementState",
    "default_registry",
]
