"""
Netorch — precondition gating and external-execution reconciliation for a
network-interface configuration orchestrator.
"""

__version__ = "0.1.0"
