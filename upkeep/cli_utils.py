"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import click
from functools import wraps
from typing import Any, Dict, Iterator, Optional

from .config import configure_logging, load_config
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)

logger = logging.getLogger(__name__)


def to_jsonable(item: Any) -> Any:
    """Domain objects expose to_dict(); everything else passes through."""
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    return item


def emit(item: Any) -> None:
    """Print one JSON line on stdout."""
    print(json.dumps(to_jsonable(item), ensure_ascii=False, default=str), flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean JSONL output on stdout, one line per yielded item
    - Logs on stderr (and the log file, when one is configured)
    - Consistent error handling with distinct exit codes

    The wrapped command may return a generator or other iterator, a list, a single object or
    None (when it handled its own output, e.g. --pretty).
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        quiet = kwargs.get('quiet', False)

        try:
            result = func(*args, **kwargs)

            if isinstance(result, Iterator):
                for item in result:
                    if not quiet:
                        emit(item)
            elif isinstance(result, (list, tuple)):
                if not quiet:
                    for item in result:
                        emit(item)
            elif result is not None and not quiet:
                emit(result)

            # Successful completion
            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            # Our custom command errors with specific exit codes
            logger.error(str(e))
            if not quiet:
                emit(e.to_dict())
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            exit_code = get_exit_code_for_exception(e)
            if not quiet:
                emit({
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": exit_code,
                })
            sys.exit(exit_code)

    return wrapper


def prepare(section: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration and attach the logging sinks for a command.

    The log file comes from --log-file on the group, then the config's
    ``logging.file``, then ``<section>.log_file`` when a section is given.
    """
    ctx = click.get_current_context(silent=True)
    options = (ctx.find_root().obj if ctx else None) or {}

    config = load_config()
    logging_config = config.get('logging', {})
    level = "DEBUG" if options.get('verbose') else logging_config.get('level', 'INFO')
    default_log_file = config.get(section, {}).get('log_file') if section else None
    log_file = options.get('log_file') or logging_config.get('file') or default_log_file

    path = configure_logging(level=level, log_file=log_file)
    if path:
        logger.debug(f"Logging to {path}")
    return config


# Standard options that many commands share
common_options = {
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, show only logs'),
    'pretty': click.option('--pretty', is_flag=True,
                           help='Human-readable output instead of JSONL'),
    'dry_run': click.option('--dry-run', is_flag=True,
                            help='Show what would run without changing anything'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('pretty', 'dry_run')
        def my_command(pretty, dry_run):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
