"""
Configuration resolution for rollup-stream.

Turns the caller's invocation argument into a BundleOptions snapshot in two
steps:

1. ``capture`` runs synchronously when the entry point is called. Mappings
   are shallow-copied right away, so mutating the caller's dict afterwards
   has no effect on the bundle.
2. ``resolve`` runs inside the stream's pipeline. Path arguments are loaded
   through ConfigModuleLoader, which may suspend, and the resulting mapping
   is validated into a frozen snapshot.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from rollup_stream.config.loader import ConfigModuleLoader
from rollup_stream.config.schema import BundleOptions
from rollup_stream.errors import InvalidOptionsTypeError, MissingEntryError, OptionsError
from rollup_stream.utils.logging_config import logging_config


logger = logging.getLogger(__name__)

CapturedOptions = Union[Dict[str, Any], str, BundleOptions]


class ConfigurationResolver:
    """Resolve invocation arguments into validated BundleOptions snapshots.

    Example:
        >>> resolver = ConfigurationResolver()
        >>> captured = resolver.capture({"entry": "./main.js"})
        >>> options = await resolver.resolve(captured)
        >>> options.entry
        './main.js'
    """

    def __init__(self, loader: Optional[ConfigModuleLoader] = None):
        self.loader = loader or ConfigModuleLoader()

    def capture(self, argument: Any) -> CapturedOptions:
        """Take the synchronous snapshot of the invocation argument.

        Raises:
            InvalidOptionsTypeError: If the argument is not a mapping or a path
        """
        if isinstance(argument, BundleOptions):
            return argument
        if isinstance(argument, Mapping):
            return dict(argument)
        if isinstance(argument, (str, os.PathLike)):
            return os.fspath(argument)
        raise InvalidOptionsTypeError()

    async def resolve(self, captured: CapturedOptions) -> BundleOptions:
        """Produce the validated snapshot for a captured argument.

        Raises:
            InvalidOptionsTypeError: If a configuration file yields a non-mapping
            ConfigLoadError: If the configuration file fails to load
            MissingEntryError: If no entry module is configured
            OptionsError: If a field has an invalid value
        """
        if isinstance(captured, str):
            logger.debug(f"Resolving options from configuration file {captured}")
            loaded = await self.loader.load(captured)
            if isinstance(loaded, BundleOptions):
                captured = loaded
            elif isinstance(loaded, Mapping):
                captured = dict(loaded)
            else:
                raise InvalidOptionsTypeError()

        if isinstance(captured, BundleOptions):
            return self._check_entry(captured)

        return self.snapshot(captured)

    def snapshot(self, options: Mapping[str, Any]) -> BundleOptions:
        """Validate an options mapping into a frozen snapshot."""
        try:
            snapshot = BundleOptions.model_validate(dict(options))
        except ValidationError as e:
            raise OptionsError(f"Invalid rollup options: {e}") from e

        return self._check_entry(snapshot)

    def _check_entry(self, snapshot: BundleOptions) -> BundleOptions:
        # An injected backend may not need an entry module.
        if not snapshot.entry and snapshot.rollup is None:
            raise MissingEntryError()

        logging_config.log_configuration_details(snapshot.as_options())
        return snapshot
