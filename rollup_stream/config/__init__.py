"""
Configuration Layer

Key Components:
    - schema.py: BundleOptions, the frozen per-invocation snapshot
    - resolver.py: ConfigurationResolver (argument capture, validation)
    - loader.py: ConfigModuleLoader for Python, YAML and JSON config files
    - environment.py: Environment variable names and ${VAR} substitution
"""

from rollup_stream.config.schema import BundleOptions
from rollup_stream.config.loader import ConfigModuleLoader
from rollup_stream.config.resolver import ConfigurationResolver
from rollup_stream.config.environment import EnvironmentVariables, substitute_environment_variables

__all__ = [
    "BundleOptions",
    "ConfigModuleLoader",
    "ConfigurationResolver",
    "EnvironmentVariables",
    "substitute_environment_variables",
]
