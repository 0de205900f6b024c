"""
Environment variable integration for rollup-stream.

This module centralizes the environment variable names read by the adapter
and the CLI, and provides validation and documentation helpers. It also
hosts the ``${VAR}`` / ``${VAR:-default}`` substitution applied to YAML and
JSON configuration files.
"""

import os
import re
from typing import Any, Dict, List, Optional, Tuple


_VARIABLE_PATTERN = re.compile(r'\$\{([^}]+)\}')


class EnvironmentVariables:
    """Centralized environment variable definitions and utilities."""

    LOG_LEVEL = "ROLLUP_STREAM_LOG_LEVEL"
    BACKEND = "ROLLUP_STREAM_BACKEND"
    CONFIG_FILE = "ROLLUP_STREAM_CONFIG"

    DEFAULT_BACKEND = "builtin"
    VALID_LOG_LEVELS = ("debug", "info", "warning", "error")

    @classmethod
    def get_all_variables(cls) -> List[str]:
        """Get list of all supported environment variables."""
        return [cls.LOG_LEVEL, cls.BACKEND, cls.CONFIG_FILE]

    @classmethod
    def get_variable_documentation(cls) -> Dict[str, str]:
        """Get documentation for all environment variables."""
        return {
            cls.LOG_LEVEL: "Default logging level (debug, info, warning, error)",
            cls.BACKEND: "Backend used when options.rollup is not set (default: builtin)",
            cls.CONFIG_FILE: "Configuration file used by the CLI when no entry or --config is given",
        }

    @classmethod
    def default_backend(cls) -> str:
        """Name of the backend used when options do not inject one."""
        return os.environ.get(cls.BACKEND) or cls.DEFAULT_BACKEND

    @classmethod
    def default_log_level(cls) -> str:
        level = os.environ.get(cls.LOG_LEVEL, "warning").lower()
        return level if level in cls.VALID_LOG_LEVELS else "warning"

    @classmethod
    def default_config_file(cls) -> Optional[str]:
        return os.environ.get(cls.CONFIG_FILE) or None

    @classmethod
    def validate_environment_setup(cls) -> Tuple[List[str], List[str]]:
        """
        Validate current environment variable setup.

        Returns:
            Tuple of (warnings, errors) - warnings for suspicious values,
            errors for invalid values
        """
        warnings = []
        errors = []

        log_level = os.environ.get(cls.LOG_LEVEL)
        if log_level and log_level.lower() not in cls.VALID_LOG_LEVELS:
            errors.append(f"Invalid {cls.LOG_LEVEL}: '{log_level}'. "
                          f"Valid options: {', '.join(cls.VALID_LOG_LEVELS)}")

        config_file = os.environ.get(cls.CONFIG_FILE)
        if config_file and not os.path.exists(config_file):
            warnings.append(f"{cls.CONFIG_FILE} points to a missing file: {config_file}")

        return warnings, errors


def substitute_environment_variables(value: Any) -> Any:
    """
    Substitute ${VAR} and ${VAR:-default} syntax with environment variable values.

    Strings nested inside dicts and lists are substituted recursively; other
    values are returned unchanged.

    Raises:
        ValueError: If a required environment variable is missing
    """
    if isinstance(value, dict):
        return {k: substitute_environment_variables(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_environment_variables(item) for item in value]
    if not isinstance(value, str):
        return value

    def replace_var(match):
        var_expr = match.group(1)

        if ':-' in var_expr:
            var_name, default_value = var_expr.split(':-', 1)
            return os.environ.get(var_name, default_value)

        if var_expr not in os.environ:
            raise ValueError(f"Required environment variable '{var_expr}' is not set")
        return os.environ[var_expr]

    return _VARIABLE_PATTERN.sub(replace_var, value)
