"""
Service layer for upkeep.

Services orchestrate domain objects and infrastructure:
- VersionResolver / resolve_latest: Highest release tag of a remote
- RepositorySync: Bring a working copy to a tag
- WorkstationMaintenance: brew, npm, nvm and Node.js updates
- PiMaintenance: apt updates and Raspberry Pi health checks
"""

from .version_resolver import VersionResolver, resolve_latest
from .repository_sync import RepositorySync
from .workstation import WorkstationMaintenance
from .pi_maintenance import PiMaintenance

__all__ = [
    'VersionResolver',
    'resolve_latest',
    'RepositorySync',
    'WorkstationMaintenance',
    'PiMaintenance',
]
