"""
Rollup Stream Error Classes

This module defines the exception hierarchy for the streaming bundler adapter.
All errors raised by the adapter inherit from RollupStreamError, enabling
consistent error handling by stream consumers.

Error Hierarchy:
    RollupStreamError (base)
    ├── OptionsError (invalid invocation options)
    │   ├── InvalidOptionsTypeError (options not a mapping or a path)
    │   ├── MissingEntryError (options lack an entry module)
    │   └── InvalidBackendError (unusable or unknown backend)
    ├── ConfigLoadError (configuration file failed to load)
    ├── BackendError (bundling backend failures)
    │   ├── BuildError
    │   └── GenerateError
    └── StreamConsumedError (stream read more than once)

Consumers match on message text, so the messages of the two option errors
are fixed:

    >>> str(InvalidOptionsTypeError())
    'options must be an object or a string!'
    >>> str(MissingEntryError())
    'You must supply options.entry to rollup'
"""

INVALID_OPTIONS_TYPE_MESSAGE = "options must be an object or a string!"
MISSING_ENTRY_MESSAGE = "You must supply options.entry to rollup"


class RollupStreamError(Exception):
    """Base exception for all rollup-stream errors.

    Example:
        >>> try:
        >>>     await rollup_stream(options).collect()
        >>> except RollupStreamError as e:
        >>>     logger.error(f"Bundling failed: {e}")
    """
    pass


class OptionsError(RollupStreamError):
    """Raised when the invocation options are invalid.

    Common scenarios:
    - Options are neither a mapping nor a configuration file path
    - The entry module is missing
    - A field has the wrong type (e.g. a non-string entry)
    """
    pass


class InvalidOptionsTypeError(OptionsError):
    """Raised when options are neither a mapping nor a path string."""

    def __init__(self, message: str = INVALID_OPTIONS_TYPE_MESSAGE):
        super().__init__(message)


class MissingEntryError(OptionsError):
    """Raised when the resolved configuration has no entry module."""

    def __init__(self, message: str = MISSING_ENTRY_MESSAGE):
        super().__init__(message)


class InvalidBackendError(OptionsError):
    """Raised when the requested backend is unknown or unusable.

    Example:
        >>> raise InvalidBackendError(
        >>>     "Unknown backend: esbuild. Valid options: builtin"
        >>> )
    """
    pass


class ConfigLoadError(RollupStreamError):
    """Raised when a configuration file cannot be loaded.

    When the configuration module itself raises, the original exception
    is chained as ``__cause__`` and its message is used unchanged.

    Common scenarios:
    - Configuration file not found
    - Configuration module raised during execution
    - YAML or JSON syntax errors
    - Module does not define a configuration value
    """
    pass


class BackendError(RollupStreamError):
    """Base class for failures inside a bundling backend."""
    pass


class BuildError(BackendError):
    """Raised when the build phase fails (resolution, loading, plugins)."""
    pass


class GenerateError(BackendError):
    """Raised when the generate phase fails or returns no code."""
    pass


class StreamConsumedError(RollupStreamError):
    """Raised when a bundle stream is consumed a second time."""
    pass
