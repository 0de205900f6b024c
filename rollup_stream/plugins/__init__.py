"""
Plugins for the built-in backend.

A plugin is any object (or mapping of callables) exposing some of the hooks
``resolve_id(importee, importer)``, ``load(id)`` and ``transform(code, id)``.
Hooks may be plain functions or coroutines; returning ``None`` defers to the
next plugin or to the default behaviour.
"""

from rollup_stream.plugins.hypothetical import HypotheticalPlugin, hypothetical

__all__ = [
    "HypotheticalPlugin",
    "hypothetical",
]
