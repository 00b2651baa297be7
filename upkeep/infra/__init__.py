"""
Infrastructure layer for upkeep.

Contains abstractions for external systems:
- GitClient: Git command execution (clone/fetch/checkout, remote tag listing)
- CommandRunner: Everything else (brew, npm, nvm, apt-get, systemctl, ...)

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitResult
from .command_runner import CommandRunner, CommandResult

__all__ = [
    'GitClient',
    'GitResult',
    'CommandRunner',
    'CommandResult',
]
