"""
Bundling Backends

Key Components:
    - base.py: BundlerBackend / Bundle protocols and BundleResult
    - builtin.py: BuiltinBundler, the default backend
    - factory.py: BackendFactory for named backends
    - invoker.py: BundleInvoker, which drives build then generate

Usage:
    >>> from rollup_stream.backend import BundleInvoker
    >>> result = await BundleInvoker().invoke(options)
"""

from rollup_stream.backend.base import Bundle, BundlerBackend, BundleResult
from rollup_stream.backend.builtin import BuiltinBundle, BuiltinBundler
from rollup_stream.backend.factory import BackendFactory, default_factory
from rollup_stream.backend.invoker import BundleInvoker

__all__ = [
    "Bundle",
    "BundlerBackend",
    "BundleResult",
    "BuiltinBundle",
    "BuiltinBundler",
    "BackendFactory",
    "default_factory",
    "BundleInvoker",
]
