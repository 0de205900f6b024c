"""
CLI Package for rollup-stream

This package provides the command line front end for rollup-stream, built on
Click groups and subcommands. Each subcommand is implemented in its own
module.

The main entry point is the main() function which creates a Click group and
registers all available subcommands. The cli() function serves as the console
script entry point for setup.py.
"""

import os
import click
from dotenv import load_dotenv

# Load environment variables from .env files
# Priority: .env.dev (if exists) overrides .env
if os.path.exists('.env.dev'):
    load_dotenv('.env.dev')
elif os.path.exists('.env'):
    load_dotenv('.env')
from .bundle import bundle
from .backends import backends
from .env import env


@click.group()
@click.version_option(version='1.0.0', prog_name='rollup-stream')
def main():
    """rollup-stream CLI - Bundle ES modules and stream the output.

    Bundles an entry module (or the options produced by a configuration
    file) with a registered backend and writes the result, optionally with
    an inline source map.
    """
    pass

# Register subcommands
main.add_command(bundle)
main.add_command(backends)
main.add_command(env)

# Entry point for setup.py console script
def cli():
    """Console script entry point.

    This function is called when the rollup-stream command is executed
    from the command line after installation via pip.
    """
    main()
