"""
Bundling Backend Factory

Registry of named backends. Handles backend instantiation and caching so
that ``options.rollup`` may name a backend ("builtin") instead of passing an
instance, and so the default backend can be chosen through the
ROLLUP_STREAM_BACKEND environment variable.
"""

from typing import Any, Callable, Dict, List, Optional

from rollup_stream.backend.base import BundlerBackend
from rollup_stream.backend.builtin import BuiltinBundler
from rollup_stream.errors import InvalidBackendError


BackendConstructor = Callable[[], Any]


class BackendFactory:
    """Factory for creating bundling backends by name.

    This factory handles:
    - Backend instantiation based on backend name
    - Backend caching to prevent redundant instantiation
    - Registration of additional backends

    Example:
        >>> factory = BackendFactory()
        >>> backend = factory.create_backend("builtin")
        >>> factory.register("fake", FakeBackend)
        >>> factory.available_backends()
        ['builtin', 'fake']
    """

    def __init__(self, registry: Optional[Dict[str, BackendConstructor]] = None):
        """Initialize backend factory.

        Args:
            registry: Backend constructors by name (default: builtin only)
        """
        self._registry: Dict[str, BackendConstructor] = (
            dict(registry) if registry is not None else {BuiltinBundler.name: BuiltinBundler}
        )

        # Cache for instantiated backends
        self._backend_cache: Dict[str, Any] = {}

    def register(self, name: str, constructor: BackendConstructor) -> None:
        """Register (or replace) a backend constructor under ``name``."""
        self._registry[name] = constructor
        self._backend_cache.pop(name, None)

    def create_backend(self, name: str) -> BundlerBackend:
        """Create backend for specified backend name.

        Raises:
            InvalidBackendError: If the name is unknown or the constructed
                object does not expose build()
        """
        if name in self._backend_cache:
            return self._backend_cache[name]

        if name not in self._registry:
            raise InvalidBackendError(
                f"Unknown backend: {name}. "
                f"Valid options: {', '.join(self.available_backends())}"
            )

        backend = self._registry[name]()
        if not callable(getattr(backend, "build", None)):
            raise InvalidBackendError(f"Backend '{name}' does not expose a build() method")

        self._backend_cache[name] = backend
        return backend

    def available_backends(self) -> List[str]:
        """Get sorted list of registered backend names."""
        return sorted(self._registry)

    def clear_cache(self):
        """Clear the backend cache.

        This forces re-instantiation of backends on next request.
        """
        self._backend_cache.clear()


# Shared factory used when no factory is injected
default_factory = BackendFactory()
