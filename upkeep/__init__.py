"""
upkeep - Routine maintenance for development machines and Raspberry Pis.

upkeep drives the package managers (Homebrew, npm, nvm, apt-get) and a few
system utilities, and keeps a git checkout of nvm on its newest release.

Quick Start:
    import upkeep

    # Newest release tag of a remote (no changes made)
    latest = upkeep.VersionResolver(upkeep.GitClient().ls_remote_tags).resolve(
        "https://github.com/nvm-sh/nvm.git")

    # Pure selection over a listing you already have
    upkeep.resolve_latest(["v2.0.0", "v10.0.0", "v9.9.9"]).tag   # "v10.0.0"

    # Bring a working copy to that tag (clone or fetch + checkout)
    result = upkeep.RepositorySync().sync("~/.nvm", latest, "https://github.com/nvm-sh/nvm.git")

Errors:
    NoMatchingVersionError - no tag looked like MAJOR.MINOR.PATCH (exit 64)
    SyncFailedError - clone, fetch or checkout failed (exit 65)
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    SemanticVersion,
    CheckoutState,
    LocalCheckoutResult,
    StepStatus,
    StepResult,
    MaintenanceReport,
)

# Infrastructure
from .infra import GitClient, CommandRunner

# Services
from .services import (
    VersionResolver,
    resolve_latest,
    RepositorySync,
    WorkstationMaintenance,
    PiMaintenance,
)

# Errors
from .exit_codes import (
    CommandError,
    NoMatchingVersionError,
    SyncFailedError,
    StepFailedError,
    ConfigError,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "SemanticVersion",
    "CheckoutState",
    "LocalCheckoutResult",
    "StepStatus",
    "StepResult",
    "MaintenanceReport",
    # Infrastructure
    "GitClient",
    "CommandRunner",
    # Services
    "VersionResolver",
    "resolve_latest",
    "RepositorySync",
    "WorkstationMaintenance",
    "PiMaintenance",
    # Errors
    "CommandError",
    "NoMatchingVersionError",
    "SyncFailedError",
    "StepFailedError",
    "ConfigError",
    # Configuration
    "load_config",
    "save_config",
]
