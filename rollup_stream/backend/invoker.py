"""
Bundle invocation.

Drives a backend through its two phases for one snapshot: ``build`` with
the full options (entry, plugins, extras and the caller's cache handle), then
``generate`` on the returned bundle. Exceptions raised by the backend are not
wrapped and there is no retry.
"""

import inspect
import logging
import time
from typing import Any, Optional

from rollup_stream.backend.base import BundleResult, BundlerBackend
from rollup_stream.backend.factory import BackendFactory, default_factory
from rollup_stream.config.environment import EnvironmentVariables
from rollup_stream.config.schema import BundleOptions
from rollup_stream.errors import GenerateError, InvalidBackendError
from rollup_stream.utils.logging_config import logging_config


logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class BundleInvoker:
    """Run the build and generate phases of a bundling backend.

    Example:
        >>> invoker = BundleInvoker()
        >>> result = await invoker.invoke(options)
        >>> result.code
    """

    def __init__(self, factory: Optional[BackendFactory] = None):
        self.factory = factory or default_factory

    def select_backend(self, options: BundleOptions) -> BundlerBackend:
        """Pick the injected backend, a named one, or the default.

        Raises:
            InvalidBackendError: If the backend is unknown or lacks build()
        """
        if options.rollup is None:
            backend = self.factory.create_backend(EnvironmentVariables.default_backend())
            reason = "default"
        elif isinstance(options.rollup, str):
            backend = self.factory.create_backend(options.rollup)
            reason = "named by options.rollup"
        else:
            backend = options.rollup
            reason = "injected through options.rollup"
            if not callable(getattr(backend, "build", None)):
                raise InvalidBackendError("options.rollup must expose a build() method")

        logging_config.log_backend_selection(backend, reason)
        return backend

    async def invoke(self, options: BundleOptions) -> BundleResult:
        """Build then generate, returning the normalized result."""
        backend = self.select_backend(options)
        bundle = await self.build(backend, options)
        return await self.generate(bundle, options)

    async def build(self, backend: BundlerBackend, options: BundleOptions) -> Any:
        start = time.perf_counter()
        bundle = await _maybe_await(backend.build(options))
        logging_config.log_operation_timing("build", time.perf_counter() - start)
        return bundle

    async def generate(self, bundle: Any, options: BundleOptions) -> BundleResult:
        if not callable(getattr(bundle, "generate", None)):
            raise GenerateError(
                f"Backend build() returned {type(bundle).__name__}, which has no generate() method"
            )

        start = time.perf_counter()
        result = BundleResult.coerce(await _maybe_await(bundle.generate(options)))
        logging_config.log_operation_timing("generate", time.perf_counter() - start)
        logger.debug(f"Generated {len(result.code)} characters (map: {result.map is not None})")
        return result
