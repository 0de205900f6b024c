"""
Shared CLI Option Decorators

Click decorators for the options that take the same shape in every
subcommand (configuration file, output target, logging).
"""

import click

from rollup_stream.config.environment import EnvironmentVariables


def output_option(help=None):
    """Decorator for output file options."""
    def decorator(f):
        return click.option(
            '--output', '-o',
            default="-",
            show_default=True,
            help=help or 'Output file path'
        )(f)
    return decorator


def config_option(help=None):
    """Decorator for configuration file options."""
    def decorator(f):
        return click.option(
            '--config', '-c',
            default=None,
            type=click.Path(dir_okay=False),
            help=help or 'Path to configuration file'
        )(f)
    return decorator


def log_level_option(help=None):
    """Decorator for logging level options."""
    def decorator(f):
        return click.option(
            '--log-level',
            default=lambda: EnvironmentVariables.default_log_level().upper(),
            type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
            help=help or 'Logging level (default: $ROLLUP_STREAM_LOG_LEVEL or WARNING)'
        )(f)
    return decorator


def log_file_option(help=None):
    """Decorator for log file options."""
    def decorator(f):
        return click.option(
            '--log-file',
            default=None,
            type=click.Path(dir_okay=False),
            help=help or 'Also write logs to this file (rotated at 10MB)'
        )(f)
    return decorator
