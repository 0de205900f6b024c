"""
Configuration file loader for rollup-stream.

Loads the value a configuration file produces when the caller passes a path
instead of an options mapping. Supported formats:

- ``.py`` modules exposing ``config`` (or ``default``): a mapping, a callable
  returning one, or an awaitable resolving to one
- ``.yaml`` / ``.yml`` files, parsed with PyYAML's safe loader
- ``.json`` files

YAML and JSON values go through ``${VAR}`` / ``${VAR:-default}`` environment
substitution. Anything the configuration module raises is re-raised as a
ConfigLoadError carrying the original message, with the original exception
chained as its cause.
"""

import hashlib
import importlib.util
import inspect
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from rollup_stream.config.environment import substitute_environment_variables
from rollup_stream.errors import ConfigLoadError


logger = logging.getLogger(__name__)

PYTHON_SUFFIXES = (".py",)
YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)

CONFIG_ATTRIBUTES = ("config", "default")


def _message_of(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ConfigModuleLoader:
    """Load and execute configuration files.

    Example:
        >>> loader = ConfigModuleLoader()
        >>> value = await loader.load("rollup.config.py")
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self.base_dir = Path(base_dir) if base_dir is not None else None

    async def load(self, path: Union[str, os.PathLike]) -> Any:
        """Load the configuration value produced by the file at ``path``.

        Args:
            path: Configuration file path, relative to ``base_dir`` or the
                current working directory

        Returns:
            The produced value; callers validate that it is a mapping

        Raises:
            ConfigLoadError: If the file is missing, malformed, or raises
        """
        file_path = self._resolve_path(path)
        if not file_path.is_file():
            raise ConfigLoadError(f"Configuration file not found: {path}")

        suffix = file_path.suffix.lower()
        logger.debug(f"Loading configuration from {file_path}")

        if suffix in YAML_SUFFIXES:
            return self._load_yaml(file_path)
        if suffix in JSON_SUFFIXES:
            return self._load_json(file_path)
        if suffix in PYTHON_SUFFIXES:
            return await self._load_python(file_path)

        raise ConfigLoadError(
            f"Unsupported configuration file type '{suffix}': {path}. "
            f"Valid options: {', '.join(PYTHON_SUFFIXES + YAML_SUFFIXES + JSON_SUFFIXES)}"
        )

    def _resolve_path(self, path: Union[str, os.PathLike]) -> Path:
        file_path = Path(path).expanduser()
        if not file_path.is_absolute():
            file_path = (self.base_dir or Path.cwd()) / file_path
        return file_path

    async def _load_python(self, file_path: Path) -> Any:
        digest = hashlib.md5(str(file_path).encode("utf-8")).hexdigest()[:12]
        module_name = f"_rollup_stream_config_{digest}"

        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if spec is None or spec.loader is None:
            raise ConfigLoadError(f"Cannot import configuration module: {file_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ConfigLoadError(_message_of(e)) from e

        for attribute in CONFIG_ATTRIBUTES:
            if hasattr(module, attribute):
                value = getattr(module, attribute)
                break
        else:
            raise ConfigLoadError(
                f"Configuration module {file_path} must define one of: "
                f"{', '.join(CONFIG_ATTRIBUTES)}"
            )

        try:
            if callable(value) and not isinstance(value, Mapping):
                value = value()
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            raise ConfigLoadError(_message_of(e)) from e

        return value

    def _load_yaml(self, file_path: Path) -> Any:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            parts = [f"YAML parsing error: {getattr(e, 'problem', None) or e}", f"File: {file_path}"]
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                parts.append(f"Line {mark.line + 1}, Column {mark.column + 1}")
            raise ConfigLoadError(" | ".join(parts)) from e
        except UnicodeDecodeError as e:
            raise ConfigLoadError(f"File encoding error: {e} | File: {file_path}") from e

        return self._substitute(content, file_path)

    def _load_json(self, file_path: Path) -> Any:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigLoadError(
                f"JSON parsing error: {e.msg} | File: {file_path} | Line {e.lineno}, Column {e.colno}"
            ) from e
        except UnicodeDecodeError as e:
            raise ConfigLoadError(f"File encoding error: {e} | File: {file_path}") from e

        return self._substitute(content, file_path)

    def _substitute(self, content: Any, file_path: Path) -> Any:
        try:
            return substitute_environment_variables(content)
        except ValueError as e:
            raise ConfigLoadError(f"{e} | File: {file_path}") from e
