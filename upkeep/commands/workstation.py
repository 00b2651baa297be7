"""
Handles the 'workstation' command: Homebrew, npm, nvm and Node.js updates.
"""

import click

from ..cli_utils import standard_command, add_common_options, prepare
from ..render import render_steps
from ..services.workstation import WorkstationMaintenance


@click.command(name='workstation')
@click.option('--skip-brew', is_flag=True, help='Do not run Homebrew updates')
@click.option('--skip-npm', is_flag=True, help='Do not update npm and global packages')
@click.option('--skip-nvm', is_flag=True, help='Do not update the nvm checkout')
@click.option('--skip-node', is_flag=True, help='Do not install the latest Node.js')
@add_common_options('pretty', 'quiet', 'dry_run')
@standard_command
def workstation_cmd(skip_brew, skip_npm, skip_nvm, skip_node, pretty, quiet, dry_run):
    """Update Homebrew, npm, nvm and Node.js in sequence.

    Stops at the first failing step. Steps whose tool is not installed
    are skipped.

    Examples:

    \b
        upkeep workstation
        upkeep workstation --skip-brew --pretty
        upkeep workstation --dry-run
    """
    config = prepare()
    service = WorkstationMaintenance(config, dry_run=dry_run)
    steps = service.run(
        brew=not skip_brew,
        npm=not skip_npm,
        nvm=not skip_nvm,
        node=not skip_node,
    )

    if pretty:
        render_steps(steps, "Updating workstation")
        return None
    return steps
