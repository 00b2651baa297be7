"""
Working-copy domain objects for upkeep.

A LocalCheckout is either ABSENT (nothing cloned yet) or PRESENT (a git
working copy exists at some ref). RepositorySync moves it to PRESENT at
the requested tag.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class CheckoutState(Enum):
    """Whether a working copy exists on disk."""
    ABSENT = "absent"
    PRESENT = "present"


@dataclass
class LocalCheckoutResult:
    """Outcome of a successful sync."""
    path: str
    tag: str
    previous_state: CheckoutState
    previous_ref: Optional[str] = None
    operations: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def cloned(self) -> bool:
        return 'clone' in self.operations

    @property
    def changed(self) -> bool:
        """True when the checked-out ref moved (or was created)."""
        return self.previous_ref != self.tag

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'tag': self.tag,
            'previous_state': self.previous_state.value,
            'previous_ref': self.previous_ref,
            'operations': list(self.operations),
            'changed': self.changed,
            'dry_run': self.dry_run,
        }
