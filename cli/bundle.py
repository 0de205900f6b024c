"""
Bundle Subcommand Module

This module implements the bundle subcommand for the rollup-stream CLI.
It builds options from the ENTRY argument and/or a configuration file,
streams the bundle through rollup_stream() and writes it to stdout or a
file. A JSON cache file lets repeated runs skip unchanged transforms.
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

import click

from rollup_stream import rollup_stream
from rollup_stream.config.environment import EnvironmentVariables
from rollup_stream.config.loader import ConfigModuleLoader
from rollup_stream.errors import InvalidOptionsTypeError, RollupStreamError
from rollup_stream.utils.logging_config import configure_logging, logging_config
from .shared_options import config_option, output_option, log_level_option, log_file_option
from .help_texts import (
    ExitCodes,
    BUNDLE_HELP,
    BUNDLE_ENTRY_HELP,
    BUNDLE_CONFIG_HELP,
    BUNDLE_OUTPUT_HELP,
    BUNDLE_SOURCE_MAP_HELP,
    BUNDLE_CACHE_HELP,
    BUNDLE_BACKEND_HELP,
)


logger = logging.getLogger(__name__)


def load_cache_file(path: Optional[str]) -> Optional[Dict[str, Any]]:
    """Read a JSON cache file; a missing file starts an empty cache."""
    if path is None:
        return None
    if not os.path.exists(path):
        logger.info(f"Cache file {path} does not exist yet, starting with an empty cache")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            cache = json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Cache file {path} is not valid JSON: {e.msg}")
    if not isinstance(cache, dict):
        raise click.ClickException(f"Cache file {path} must contain a JSON object")
    return cache


def save_cache_file(path: str, cache: Dict[str, Any]) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cache, f, indent=2)
    logger.info(f"Cache saved to: {path}")


async def build_options(
    entry: Optional[str],
    config: Optional[str],
    source_map: bool,
    cache: Optional[Dict[str, Any]],
    backend: Optional[str],
) -> Any:
    """Combine the configuration file with command line overrides.

    Without overrides the configuration path itself is returned, so it is
    resolved by rollup_stream() exactly as a library caller's path would be.
    """
    overrides: Dict[str, Any] = {}
    if entry:
        overrides["entry"] = entry
    if source_map:
        overrides["sourceMap"] = True
    if cache is not None:
        overrides["cache"] = cache
    if backend:
        overrides["rollup"] = backend

    if config is None:
        return overrides
    if not overrides:
        return config

    loaded = await ConfigModuleLoader().load(config)
    if not isinstance(loaded, dict):
        raise InvalidOptionsTypeError()
    options = dict(loaded)
    options.update(overrides)
    return options


async def run_bundle(options: Any) -> str:
    return await rollup_stream(options).collect()


@click.command(help=BUNDLE_HELP)
@click.argument('entry', required=False)
@config_option(help=BUNDLE_CONFIG_HELP)
@output_option(help=BUNDLE_OUTPUT_HELP)
@click.option('--source-map', is_flag=True, default=False, help=BUNDLE_SOURCE_MAP_HELP)
@click.option('--cache', 'cache_path', default=None, type=click.Path(dir_okay=False), help=BUNDLE_CACHE_HELP)
@click.option('--backend', default=None, help=BUNDLE_BACKEND_HELP)
@log_level_option()
@log_file_option()
def bundle(entry, config, output, source_map, cache_path, backend, log_level, log_file):
    """
    Bundle ENTRY (or the options from --config) and write the result.

    Examples:
        rollup-stream bundle src/main.js -o dist/bundle.js --source-map
        rollup-stream bundle --config rollup.config.py
        rollup-stream bundle src/main.js --cache .rollup-cache.json
    """
    configure_logging(level=log_level.lower(), log_file=log_file, force=True)

    if entry is None and config is None:
        config = EnvironmentVariables.default_config_file()
    if entry is None and config is None:
        click.echo("❌ Provide an ENTRY module or --config", err=True)
        sys.exit(ExitCodes.MISSING_REQUIRED_OPTION)

    cache = load_cache_file(cache_path)

    try:
        options = asyncio.run(build_options(entry, config, source_map, cache, backend))
        code = asyncio.run(run_bundle(options))
    except RollupStreamError as e:
        logger.debug("Bundling failed", exc_info=True)
        click.echo(f"❌ {e}", err=True)
        if e.__cause__ is not None and logging_config.is_debug_enabled():
            click.echo(f"   Caused by: {type(e.__cause__).__name__}: {e.__cause__}", err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)

    if cache_path is not None:
        save_cache_file(cache_path, cache)

    if output != "-":
        directory = os.path.dirname(output)
        if directory:
            os.makedirs(directory, exist_ok=True)
    with click.open_file(output, "w", encoding="utf-8") as f:
        f.write(code)
        if code and not code.endswith("\n"):
            f.write("\n")

    if output != "-":
        click.echo(f"✅ Bundle written to: {output}", err=True)
