"""
Netorch -- Requirement Error Hierarchy

Only construction of requirements raises. Evaluation never does: a check
that cannot complete reports "not satisfied" and is retried on a later tick.
"""

from __future__ import annotations


class RequirementError(RuntimeError):
    """Base for all requirement framework errors."""


class RequirementSpecError(RequirementError):
    """A declarative requirement description is missing data or malformed."""


class UnknownRequirementError(RequirementError):
    """No builder is registered for the requested requirement kind."""
