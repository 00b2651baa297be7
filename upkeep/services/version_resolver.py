"""
Latest-release resolution for upkeep.

Picks the highest stable release tag out of a remote tag listing.
Ordering is numeric per component, so v10.0.0 beats v9.9.9.
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..domain.version import SemanticVersion, tag_name
from ..exit_codes import NoMatchingVersionError

logger = logging.getLogger(__name__)

TagLister = Callable[[str], List[str]]


def resolve_latest(tag_names: Iterable[str], markers: Optional[str] = None) -> SemanticVersion:
    """
    Return the highest release version in a tag listing.

    Args:
        tag_names: Raw tag strings; path-like prefixes such as "refs/tags/"
            are ignored, only the final segment is the tag name
        markers: Accepted marker letters (None accepts any single letter)

    Returns:
        The maximum SemanticVersion. Its ``tag`` is the tag name as listed.

    Raises:
        NoMatchingVersionError: No entry is a well-formed release version
    """
    seen = 0
    latest: Optional[SemanticVersion] = None

    for raw in tag_names:
        seen += 1
        version = SemanticVersion.try_parse(tag_name(raw), markers=markers)
        if version is None:
            continue
        if latest is None or version > latest:
            latest = version

    if latest is None:
        raise NoMatchingVersionError(
            f"None of {seen} tag(s) is a release version (<marker>MAJOR.MINOR.PATCH)",
            candidates=seen,
        )

    logger.debug(f"Resolved {latest} from {seen} tag(s)")
    return latest


class VersionResolver:
    """
    Resolves the latest release of a remote repository.

    Example:
        resolver = VersionResolver(GitClient().ls_remote_tags, markers="v")
        latest = resolver.resolve("https://github.com/nvm-sh/nvm.git")
        print(latest.tag)
    """

    def __init__(self, tag_lister: TagLister, markers: Optional[str] = None):
        """
        Args:
            tag_lister: Callable mapping a repository URL to raw tag refs
            markers: Accepted marker letters (None accepts any single letter)
        """
        self.tag_lister = tag_lister
        self.markers = markers

    def resolve(self, remote_url: str) -> SemanticVersion:
        """List the remote's tags and return the highest release."""
        logger.info(f"Listing tags of {remote_url}")
        refs = self.tag_lister(remote_url)
        latest = resolve_latest(refs, markers=self.markers)
        logger.info(f"Latest release of {remote_url} is {latest}")
        return latest
