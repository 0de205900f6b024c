"""
Env Subcommand Module

Shows the environment variables rollup-stream reads, their current values
and any problems with the current setup.
"""

import os
import sys

import click

from rollup_stream.config.environment import EnvironmentVariables
from .help_texts import ExitCodes, ENV_HELP


@click.command(help=ENV_HELP)
def env():
    """
    List the supported environment variables and validate their values.

    Exits with status 1 when a variable holds an invalid value.
    """
    for name, description in EnvironmentVariables.get_variable_documentation().items():
        value = os.environ.get(name)
        click.echo(f"{name}={value if value else '(unset)'}")
        click.echo(f"    {description}")

    warnings, errors = EnvironmentVariables.validate_environment_setup()
    click.echo("")
    for warning in warnings:
        click.echo(f"⚠ {warning}", err=True)
    for error in errors:
        click.echo(f"❌ {error}", err=True)

    if errors:
        sys.exit(ExitCodes.GENERAL_ERROR)
    click.echo("✅ Environment is valid")
