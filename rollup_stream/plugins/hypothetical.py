"""
In-memory module plugin.

Serves modules from a ``{path: source}`` mapping instead of the file system,
which makes it handy for tests and for bundling generated code:

    >>> plugin = hypothetical({
    ...     "./entry.js": 'import x from "./x.js"; console.log(x);',
    ...     "./x.js": 'export default "Hello, World!";',
    ... })
    >>> stream = rollup_stream({"entry": "./entry.js", "plugins": [plugin]})

Paths are normalized to POSIX form, so ``./entry.js`` and ``entry.js`` name
the same module.
"""

import posixpath
from typing import Mapping, Optional

from rollup_stream.errors import BuildError


def _normalize(path: str) -> str:
    return posixpath.normpath(path.replace("\\", "/"))


class HypotheticalPlugin:
    """Resolve and load modules from an in-memory file mapping.

    Args:
        files: Mapping of module paths to source code
        allow_fallthrough: Let other plugins (or the file system) handle
            modules that are not in ``files`` instead of failing the build
    """

    name = "hypothetical"

    def __init__(self, files: Mapping[str, str], allow_fallthrough: bool = False):
        self.files = {_normalize(path): source for path, source in files.items()}
        self.allow_fallthrough = allow_fallthrough

    def resolve_id(self, importee: str, importer: Optional[str] = None) -> Optional[str]:
        if importer is None:
            candidate = _normalize(importee)
        elif importee.startswith("."):
            candidate = _normalize(posixpath.join(posixpath.dirname(importer), importee))
        else:
            # Bare specifiers are left to other plugins or treated as external.
            return None

        if candidate not in self.files and not posixpath.splitext(candidate)[1]:
            candidate += ".js"

        if candidate in self.files:
            return candidate
        if self.allow_fallthrough:
            return None
        raise BuildError(f"{importee} does not exist in the hypothetical file system!")

    def load(self, module_id: str) -> Optional[str]:
        if module_id in self.files:
            return self.files[module_id]
        if self.allow_fallthrough:
            return None
        raise BuildError(f"{module_id} does not exist in the hypothetical file system!")


def hypothetical(files: Mapping[str, str], allow_fallthrough: bool = False) -> HypotheticalPlugin:
    """Create an in-memory module plugin."""
    return HypotheticalPlugin(files, allow_fallthrough=allow_fallthrough)
