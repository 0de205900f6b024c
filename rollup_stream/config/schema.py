"""
Configuration snapshot model for rollup-stream.

BundleOptions is the immutable, point-in-time copy of the caller's options
used for the remainder of an invocation. Recognized fields are typed;
anything else is kept verbatim as a pass-through extra for the backend and
its plugins.

Values typed ``Any`` (``rollup``, ``cache`` and every extra) are stored by
identity, so a cache handle passed in by the caller is the very object the
backend receives.
"""

import os
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BundleOptions(BaseModel):
    """Frozen snapshot of one invocation's options.

    Attributes:
        entry: Module specifier to bundle
        rollup: Injected backend object, or the registered name of a backend
        source_map: Whether to append an inline source map (alias ``sourceMap``)
        cache: Opaque caller-owned cache handle forwarded to the backend
        plugins: Plugin objects or mappings of hook callables
    """
    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    entry: Optional[str] = None
    rollup: Optional[Any] = None
    source_map: bool = Field(default=False, alias="sourceMap")
    cache: Optional[Any] = None
    plugins: Tuple[Any, ...] = ()

    @field_validator("entry", mode="before")
    @classmethod
    def _entry_from_path(cls, value: Any) -> Any:
        if isinstance(value, os.PathLike):
            return os.fspath(value)
        return value

    @field_validator("plugins", mode="before")
    @classmethod
    def _plugins_default(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("source_map", mode="before")
    @classmethod
    def _source_map_default(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def extras(self) -> Dict[str, Any]:
        """Pass-through options not interpreted by rollup-stream."""
        return dict(self.model_extra or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an option by field name, alias or extra key."""
        if key == "sourceMap":
            key = "source_map"
        if key in type(self).model_fields:
            return getattr(self, key)
        return self.extras.get(key, default)

    def as_options(self) -> Dict[str, Any]:
        """Return the snapshot as a plain options dict using the public key names.

        Unlike ``model_dump`` this never copies values, so the cache handle
        keeps its identity.
        """
        options = {
            "entry": self.entry,
            "rollup": self.rollup,
            "sourceMap": self.source_map,
            "cache": self.cache,
            "plugins": list(self.plugins),
        }
        options.update(self.extras)
        return options
