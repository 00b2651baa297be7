"""
Git client infrastructure for upkeep.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Every call names the repository path explicitly (``git -C <path>`` or
``cwd=``); the process working directory is never changed.
"""

import subprocess
from dataclasses import dataclass
from typing import Optional, List, Union
from pathlib import Path
import logging

from ..exit_codes import SyncFailedError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class GitResult:
    """Outcome of a git command."""
    ok: bool
    returncode: int
    output: str = ""


class GitClient:
    """
    Abstraction over git commands.

    Provides the version-control driver (clone, fetch_tags, checkout) and
    the remote tag lister (ls_remote_tags) used by RepositorySync and
    VersionResolver.

    Example:
        client = GitClient()
        refs = client.ls_remote_tags("https://github.com/nvm-sh/nvm.git")
        result = client.checkout("~/.nvm", "v0.40.1")
        if not result.ok:
            print(result.output)
    """

    def __init__(self, timeout: Optional[int] = None, git: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: None, no timeout)
            git: git executable to run
        """
        self.timeout = timeout
        self.git = git

    def _run(self, args: List[str], cwd: Optional[PathLike] = None) -> GitResult:
        """
        Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Working directory for the child process only

        Returns:
            GitResult with stdout and stderr combined in ``output``
        """
        cmd = [self.git] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return GitResult(ok=False, returncode=-1, output=f"timed out after {self.timeout}s")
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return GitResult(ok=False, returncode=127, output=str(e))

        output = "\n".join(part.strip() for part in (result.stdout, result.stderr) if part and part.strip())
        if output:
            logger.debug(output)
        return GitResult(ok=result.returncode == 0, returncode=result.returncode, output=output)

    def is_git_repo(self, path: PathLike) -> bool:
        """Check if path is a git repository."""
        git_dir = Path(path).expanduser() / ".git"
        return git_dir.exists()

    def clone(self, url: str, path: PathLike) -> GitResult:
        """
        Clone the full repository, all history and tags, into path.
        """
        return self._run(["clone", url, str(Path(path).expanduser())])

    def fetch_tags(self, path: PathLike, remote: str = "origin") -> GitResult:
        """
        Fetch tag refs from remote so newly published tags are known locally.
        """
        return self._run(["-C", str(Path(path).expanduser()), "fetch", "--tags", remote])

    def checkout(self, path: PathLike, ref: str, is_tag: bool = False) -> GitResult:
        """
        Check out ref in the working copy at path.

        With is_tag the ref is spelled refs/tags/<ref>, so a local branch
        sharing the tag's name is never picked instead. Checking out the ref
        that is already current is a no-op.
        """
        if is_tag and not ref.startswith("refs/"):
            ref = f"refs/tags/{ref}"
        return self._run(["-C", str(Path(path).expanduser()), "checkout", "--quiet", ref])

    def current_tag(self, path: PathLike) -> Optional[str]:
        """Tag that exactly names HEAD, or None."""
        result = self._run(["-C", str(Path(path).expanduser()), "describe", "--tags", "--exact-match", "HEAD"])
        if result.ok and result.output:
            return result.output.splitlines()[0].strip()
        return None

    def ls_remote_tags(self, url: str) -> List[str]:
        """
        List tag references published by a remote.

        Args:
            url: Remote repository URL

        Returns:
            Reference names such as "refs/tags/v0.40.1" (peeled "^{}"
            entries included, as git prints them)

        Raises:
            SyncFailedError: git ls-remote exited non-zero
        """
        result = self._run(["ls-remote", "--tags", url])
        if not result.ok:
            raise SyncFailedError("ls-remote", result.output, path=url)

        refs = []
        for line in result.output.splitlines():
            if '\t' not in line:
                continue
            _, ref = line.split('\t', 1)
            refs.append(ref.strip())
        return refs
