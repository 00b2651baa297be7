"""
Handles the 'pi' command: Raspberry Pi package updates and health checks.
"""

import click

from ..cli_utils import standard_command, add_common_options, prepare
from ..render import render_steps
from ..services.pi_maintenance import PiMaintenance


@click.command(name='pi')
@click.option('--skip-packages', is_flag=True, help='Run health checks only')
@click.option('--skip-checks', is_flag=True, help='Run package updates only')
@add_common_options('pretty', 'quiet', 'dry_run')
@standard_command
def pi_cmd(skip_packages, skip_checks, pretty, quiet, dry_run):
    """Monthly Raspberry Pi maintenance (run with sudo).

    Updates apt packages and Pi-hole, then checks disk usage, temperature,
    load, SSH root login, unattended-upgrades and whether a reboot is
    pending. Everything is logged to the log file (default
    /var/log/upkeep.log).

    Examples:

    \b
        sudo upkeep pi --pretty
        sudo upkeep pi --skip-packages
    """
    config = prepare(section="pi")
    service = PiMaintenance(config, dry_run=dry_run)
    steps = service.run(packages=not skip_packages, checks=not skip_checks)

    if pretty:
        render_steps(steps, "Starting Raspberry Pi maintenance")
        return None
    return steps

