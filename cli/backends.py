"""
Backends Subcommand Module

Lists the bundling backends registered with the default backend factory and
marks the one used when options do not select a backend.
"""

import click

from rollup_stream.backend.factory import default_factory
from rollup_stream.config.environment import EnvironmentVariables
from .help_texts import BACKENDS_HELP


@click.command(help=BACKENDS_HELP)
def backends():
    default = EnvironmentVariables.default_backend()
    for name in default_factory.available_backends():
        marker = " (default)" if name == default else ""
        click.echo(f"{name}{marker}")
