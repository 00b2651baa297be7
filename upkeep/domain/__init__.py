"""
Domain layer for upkeep.

Contains pure domain objects with no I/O or side effects:
- SemanticVersion: A release tag parsed into (major, minor, patch)
- LocalCheckoutResult: State of a working copy after a sync
- StepResult / MaintenanceReport: Outcomes of maintenance steps

These objects provide to_dict() for JSONL output.
"""

from .version import SemanticVersion, tag_name, MAX_COMPONENT
from .checkout import CheckoutState, LocalCheckoutResult
from .maintenance import StepStatus, StepResult, MaintenanceReport

__all__ = [
    'SemanticVersion',
    'tag_name',
    'MAX_COMPONENT',
    'CheckoutState',
    'LocalCheckoutResult',
    'StepStatus',
    'StepResult',
    'MaintenanceReport',
]
