#!/usr/bin/env python3

import click

from upkeep.commands.config import config_cmd
from upkeep.commands.nvm import nvm_cmd
from upkeep.commands.pi import pi_cmd
from upkeep.commands.workstation import workstation_cmd


@click.group()
@click.version_option(package_name='upkeep')
@click.option('--log-file', type=click.Path(dir_okay=False),
              help='Also write a timestamped log to this file')
@click.option('-v', '--verbose', is_flag=True, help='Show debug output, including command output')
@click.pass_context
def cli(ctx, log_file, verbose):
    """upkeep - Routine maintenance for development machines and Raspberry Pis.

    Updates package managers, keeps nvm on its newest release and runs
    health checks. Data goes to stdout as JSONL (or --pretty), logs go
    to stderr and, optionally, a log file.
    """
    ctx.ensure_object(dict)
    ctx.obj['log_file'] = log_file
    ctx.obj['verbose'] = verbose


cli.add_command(nvm_cmd)
cli.add_command(workstation_cmd)
cli.add_command(pi_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
