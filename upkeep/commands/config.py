"""
Handles the 'config' command group.
"""

import click
from pathlib import Path

from ..cli_utils import standard_command, add_common_options
from ..config import get_config_path, get_default_config, load_config, save_config
from ..exit_codes import ConfigError


@click.group(name='config')
def config_cmd():
    """Show or create the upkeep configuration file."""
    pass


@config_cmd.command('show')
@add_common_options('quiet')
@standard_command
def config_show(quiet):
    """Print the effective configuration (defaults, file and UPKEEP_* env)."""
    return load_config()


@config_cmd.command('path')
@add_common_options('quiet')
@standard_command
def config_path(quiet):
    """Print where the configuration file is read from."""
    path = get_config_path()
    return {'path': str(path), 'exists': path.exists()}


@config_cmd.command('init')
@click.option('--format', 'fmt', type=click.Choice(['json', 'toml', 'yaml']), default='json',
              help='File format (default: json)')
@click.option('--force', is_flag=True, help='Overwrite an existing file')
@add_common_options('quiet')
@standard_command
def config_init(fmt, force, quiet):
    """Write the default configuration to ~/.upkeep/."""
    path = Path.home() / '.upkeep' / f'config.{fmt}'
    if path.exists() and not force:
        raise ConfigError(f"{path} already exists (use --force to overwrite)")

    saved = save_config(get_default_config(), config_path=path)
    return {'path': str(saved), 'created': True}
