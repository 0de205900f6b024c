"""
rollup-stream

Stream the output of a bundling backend. ``rollup_stream(options)`` returns
a BundleStream synchronously; the bundle is resolved, built, generated and
optionally annotated with an inline source map in the background, then
pushed to the stream as a single chunk.

Architecture:
    Stream Layer (stream.py)
        ↓
    Backend Layer (backend/: invoker, factory, builtin backend)
        ↓
    Configuration Layer (config/: resolver, loader, schema)

Usage:
    >>> from rollup_stream import rollup_stream
    >>> from rollup_stream.plugins import hypothetical
    >>>
    >>> stream = rollup_stream({
    ...     "entry": "./entry.js",
    ...     "sourceMap": True,
    ...     "plugins": [hypothetical({"./entry.js": "console.log('hi');"})],
    ... })
    >>> code = await stream.collect()
"""

from rollup_stream.stream import BundleStream, StageResult, StreamState, rollup_stream

from rollup_stream.config import BundleOptions, ConfigModuleLoader, ConfigurationResolver

from rollup_stream.backend import (
    BackendFactory,
    Bundle,
    BundleInvoker,
    BundleResult,
    BundlerBackend,
    BuiltinBundler,
)

from rollup_stream.sourcemap import SourceMap, annotate

from rollup_stream.errors import (
    RollupStreamError,
    OptionsError,
    InvalidOptionsTypeError,
    MissingEntryError,
    InvalidBackendError,
    ConfigLoadError,
    BackendError,
    BuildError,
    GenerateError,
    StreamConsumedError,
)

__version__ = "1.0.0"

__all__ = [
    # Entry point and stream
    "rollup_stream",
    "BundleStream",
    "StageResult",
    "StreamState",

    # Configuration
    "BundleOptions",
    "ConfigModuleLoader",
    "ConfigurationResolver",

    # Backends
    "BackendFactory",
    "Bundle",
    "BundleInvoker",
    "BundleResult",
    "BundlerBackend",
    "BuiltinBundler",

    # Source maps
    "SourceMap",
    "annotate",

    # Errors
    "RollupStreamError",
    "OptionsError",
    "InvalidOptionsTypeError",
    "MissingEntryError",
    "InvalidBackendError",
    "ConfigLoadError",
    "BackendError",
    "BuildError",
    "GenerateError",
    "StreamConsumedError",
]
