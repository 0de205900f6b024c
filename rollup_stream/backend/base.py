"""
Bundling Backend Protocol

Defines the two-phase interface every bundling backend implements and the
standardized BundleResult returned by the generate phase.

A backend is anything exposing ``build(options)``; the object ``build``
returns (the bundle handle) exposes ``generate(options)``. Both methods may
be plain functions or coroutines, so a duck-typed test double such as

    class FakeBackend:
        def build(self, options):
            return FakeBundle()

    class FakeBundle:
        def generate(self, options):
            return {"code": "fake code"}

is a valid backend.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from rollup_stream.config.schema import BundleOptions
from rollup_stream.errors import GenerateError
from rollup_stream.sourcemap import SourceMap


@dataclass
class BundleResult:
    """Output of a backend's generate phase.

    Attributes:
        code: Generated bundle code
        map: Source map data (SourceMap, dict or JSON string), if produced
    """
    code: str
    map: Optional[Union[SourceMap, Mapping[str, Any], str]] = None

    @classmethod
    def coerce(cls, value: Any) -> "BundleResult":
        """Normalize whatever a backend's generate returned.

        Accepts a BundleResult, a mapping with a ``code`` key, or an object
        with a ``code`` attribute.

        Raises:
            GenerateError: If no string code can be found
        """
        if isinstance(value, BundleResult):
            result = value
        elif isinstance(value, Mapping):
            result = cls(code=value.get("code"), map=value.get("map"))
        elif hasattr(value, "code"):
            result = cls(code=value.code, map=getattr(value, "map", None))
        else:
            raise GenerateError(
                f"Backend generate() must return code, got {type(value).__name__}"
            )

        if not isinstance(result.code, str):
            raise GenerateError(
                f"Backend generate() returned non-string code: {type(result.code).__name__}"
            )
        return result


@runtime_checkable
class Bundle(Protocol):
    """Handle returned by a backend's build phase."""

    def generate(self, options: BundleOptions) -> Any:
        """
        Generate output code for the built module graph.

        Args:
            options: The invocation's snapshot; ``source_map`` tells the
                backend whether to produce map data

        Returns:
            A BundleResult, a mapping with ``code`` and optional ``map``, or
            an awaitable resolving to either
        """
        ...


@runtime_checkable
class BundlerBackend(Protocol):
    """Protocol for bundling backend implementations.

    Implementations receive the full snapshot, including ``entry``,
    ``plugins``, pass-through extras and the caller's ``cache`` handle, which
    they may consult and update in place.

    Example:
        >>> backend = BuiltinBundler()
        >>> bundle = await backend.build(options)
        >>> result = await bundle.generate(options)
        >>> print(result.code)
    """

    def build(self, options: BundleOptions) -> Any:
        """
        Resolve, load and transform the module graph for ``options.entry``.

        Returns:
            A Bundle, or an awaitable resolving to one

        Raises:
            BuildError: Or any backend-specific exception; rollup-stream
                propagates it unchanged
        """
        ...
