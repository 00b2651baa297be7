"""
Handles the 'nvm' command group: resolve and sync the nvm release.

    upkeep nvm latest    print the newest release tag (no changes)
    upkeep nvm sync      bring the nvm directory to that tag
"""

import click
from typing import Any, Dict, Optional

from ..cli_utils import standard_command, add_common_options, prepare
from ..infra.git_client import GitClient
from ..render import render_checkout, render_version
from ..services.repository_sync import RepositorySync
from ..services.version_resolver import VersionResolver


def _settings(config: Dict[str, Any], url: Optional[str], marker: Optional[str]) -> Dict[str, Any]:
    nvm_config = config.get('nvm', {})
    markers = marker if marker is not None else nvm_config.get('markers', 'v')
    return {
        'url': url or nvm_config.get('repository', 'https://github.com/nvm-sh/nvm.git'),
        'directory': nvm_config.get('directory', '~/.nvm'),
        'remote': nvm_config.get('remote', 'origin'),
        # Empty string: any single letter may prefix the version
        'markers': markers or None,
    }


@click.group(name='nvm')
def nvm_cmd():
    """Keep the nvm checkout on its newest release tag.

    Examples:

    \b
        upkeep nvm latest
        upkeep nvm sync
        upkeep nvm sync --dir /opt/nvm --pretty
    """
    pass


@nvm_cmd.command('latest')
@click.option('--url', help='Repository to list tags from (default: from config)')
@click.option('--marker', help="Accepted tag marker letters, '' for any (default: from config)")
@add_common_options('pretty', 'quiet')
@standard_command
def nvm_latest(url, marker, pretty, quiet):
    """Print the newest release tag without touching the checkout.

    Exits 64 when the remote has no tag shaped like vMAJOR.MINOR.PATCH.
    """
    config = prepare()
    settings = _settings(config, url, marker)

    resolver = VersionResolver(GitClient().ls_remote_tags, markers=settings['markers'])
    latest = resolver.resolve(settings['url'])

    if pretty:
        render_version(latest, settings['url'])
        return None

    result = latest.to_dict()
    result['repository'] = settings['url']
    return result


@nvm_cmd.command('sync')
@click.option('--url', help='Repository to clone/fetch (default: from config)')
@click.option('--dir', 'directory', type=click.Path(file_okay=False),
              help='Working copy directory (default: from config, ~/.nvm)')
@click.option('--tag', help='Check out this tag instead of resolving the newest')
@click.option('--marker', help="Accepted tag marker letters, '' for any (default: from config)")
@click.option('--remote', help='Remote to fetch tags from (default: origin)')
@add_common_options('pretty', 'quiet', 'dry_run')
@standard_command
def nvm_sync(url, directory, tag, marker, remote, pretty, quiet, dry_run):
    """Resolve the newest release and check it out.

    Clones the repository when the directory has no working copy yet,
    otherwise fetches tags and checks out the release.

    Exits 64 when no release tag exists and 65 when clone, fetch or
    checkout fails. Re-running after a failure is safe.
    """
    config = prepare()
    settings = _settings(config, url, marker)
    git = GitClient()

    target = tag
    if not target:
        resolver = VersionResolver(git.ls_remote_tags, markers=settings['markers'])
        target = resolver.resolve(settings['url'])

    syncer = RepositorySync(git, remote=remote or settings['remote'], dry_run=dry_run)
    result = syncer.sync(directory or settings['directory'], target, settings['url'])

    if pretty:
        render_checkout(result)
        return None
    return result
