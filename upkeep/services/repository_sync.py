"""
Working-copy synchronisation for upkeep.

Brings a local clone to exactly a given tag:
- ABSENT:  clone, then checkout
- PRESENT: fetch tags, then checkout (always; re-checking out the current
           ref is a no-op, so repeated runs are idempotent)

A failed step raises SyncFailedError and leaves the directory as the
failing git command left it. The next run reconciles from PRESENT.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..domain.checkout import CheckoutState, LocalCheckoutResult
from ..domain.version import SemanticVersion
from ..exit_codes import SyncFailedError
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)


class RepositorySync:
    """
    Syncs a working copy to a resolved tag.

    Example:
        sync = RepositorySync(GitClient())
        result = sync.sync("~/.nvm", "v0.40.1", "https://github.com/nvm-sh/nvm.git")
        print(result.operations)   # ['fetch', 'checkout']
    """

    def __init__(self, git_client: Optional[GitClient] = None, remote: str = "origin",
                 dry_run: bool = False):
        self.git = git_client or GitClient()
        self.remote = remote
        self.dry_run = dry_run

    def state(self, local_path: Union[str, Path]) -> CheckoutState:
        """ABSENT unless a git working copy exists at local_path."""
        if self.git.is_git_repo(local_path):
            return CheckoutState.PRESENT
        return CheckoutState.ABSENT

    def sync(self, local_path: Union[str, Path], target_tag: Union[str, SemanticVersion],
             remote_url: str) -> LocalCheckoutResult:
        """
        Bring the working copy at local_path to target_tag.

        Args:
            local_path: Working-copy directory
            target_tag: Tag to check out
            remote_url: Repository to clone from when the copy is absent

        Returns:
            LocalCheckoutResult describing the transition

        Raises:
            SyncFailedError: clone, fetch or checkout failed
        """
        path = Path(local_path).expanduser()
        tag = str(target_tag)
        state = self.state(path)
        previous_ref = self.git.current_tag(path) if state == CheckoutState.PRESENT else None

        result = LocalCheckoutResult(
            path=str(path),
            tag=tag,
            previous_state=state,
            previous_ref=previous_ref,
            dry_run=self.dry_run,
        )

        if state == CheckoutState.ABSENT:
            logger.info(f"Cloning {remote_url} into {path}")
            self._step(result, "clone", lambda: self.git.clone(remote_url, path))
        else:
            logger.info(f"Fetching tags from {self.remote} in {path}")
            self._step(result, "fetch", lambda: self.git.fetch_tags(path, self.remote))

        logger.info(f"Checking out {tag} in {path}")
        self._step(result, "checkout", lambda: self.git.checkout(path, tag, is_tag=True))

        if previous_ref == tag:
            logger.info(f"{path} already at {tag}")
        else:
            logger.info(f"{path} now at {tag}")
        return result

    def _step(self, result: LocalCheckoutResult, operation: str, run) -> None:
        if self.dry_run:
            logger.info(f"[Dry Run] Would git {operation} in {result.path}")
            result.operations.append(operation)
            return

        outcome = run()
        if not outcome.ok:
            logger.error(f"git {operation} failed in {result.path}")
            raise SyncFailedError(operation, outcome.output, path=result.path)
        result.operations.append(operation)
