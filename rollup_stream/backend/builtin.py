"""
Built-in Bundling Backend

A small concatenating bundler used when the caller does not inject a
backend. It walks the ES module graph from ``options.entry``, running plugin
hooks for resolution, loading and transformation, and emits the modules in
dependency order:

- internal ``import`` declarations become local ``var`` bindings; a
  namespace import (``import * as ns``) binds an object literal of the
  imported module's exports
- ``export default <expr>`` becomes ``var <module> = <expr>``
- ``export`` keywords on declarations are dropped, and aliased export lists
  (``export { a as b }``) become ``var b = a;``
- imports of bare specifiers are external and kept at the top of the output

Rewrites never add or remove lines, so line-level source maps stay exact.
There is no scope renaming or tree-shaking; top-level names of all modules
share one scope.

When ``options.cache`` is a mutable mapping, each module's loaded source and
transformed code are recorded in it, and a later build whose loaded source
is unchanged reuses the transformed code without calling ``transform``
hooks.
"""

import inspect
import logging
import os
import re
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from rollup_stream.backend.base import BundleResult
from rollup_stream.config.schema import BundleOptions
from rollup_stream.errors import BuildError, RollupStreamError
from rollup_stream.sourcemap import SourceMap, encode_mappings


logger = logging.getLogger(__name__)

_NOT_PRECEDED = r"(?<![\w$.])"
_IMPORT_FROM = re.compile(
    _NOT_PRECEDED
    + r"""import\s+(?P<clause>[\w$*{}\s,]+?)\s+from\s*(?P<quote>['"])(?P<source>[^'"\n]+)(?P=quote)[ \t]*;?"""
)
_IMPORT_BARE = re.compile(
    _NOT_PRECEDED + r"""import\s*(?P<quote>['"])(?P<source>[^'"\n]+)(?P=quote)[ \t]*;?"""
)
_EXPORT_FROM = re.compile(
    _NOT_PRECEDED
    + r"""export\s*(?P<clause>\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s*(?P<quote>['"])(?P<source>[^'"\n]+)(?P=quote)[ \t]*;?"""
)
_EXPORT_LIST = re.compile(_NOT_PRECEDED + r"export\s*(?P<clause>\{[^}]*\})[ \t]*;?")
_EXPORT_DEFAULT = re.compile(_NOT_PRECEDED + r"export\s+default\s+")
_EXPORT_DECLARATION = re.compile(
    _NOT_PRECEDED + r"export\s+(?=(?:const|let|var|function|class|async)\b)"
)
_EXPORTED_NAME = re.compile(
    _NOT_PRECEDED
    + r"export\s+(?:async\s+)?(?:function\s*\*?|class|const|let|var)\s*(?P<name>[\w$]+)"
)
_NAMESPACE_CLAUSE = re.compile(r"\*\s*as\s+(?P<name>[\w$]+)")

HOOK_NAMES = {
    "resolve_id": ("resolve_id", "resolveId"),
    "load": ("load",),
    "transform": ("transform",),
}


def get_hook(plugin: Any, hook: str) -> Optional[Any]:
    """Return a plugin's hook callable, accepting objects and mappings."""
    for name in HOOK_NAMES[hook]:
        if isinstance(plugin, Mapping):
            candidate = plugin.get(name)
        else:
            candidate = getattr(plugin, name, None)
        if callable(candidate):
            return candidate
    return None


async def call_hook(hook: Any, *args: Any) -> Any:
    try:
        result = hook(*args)
        if inspect.isawaitable(result):
            result = await result
    except RollupStreamError:
        raise
    except Exception as e:
        raise BuildError(str(e) or type(e).__name__) from e
    return result


def _keep_lines(matched: str, replacement: str) -> str:
    return replacement + "\n" * matched.count("\n")


def _with_extension(path: str) -> str:
    return path if os.path.splitext(path)[1] else path + ".js"


def parse_import_clause(clause: str) -> Tuple[Optional[str], List[Tuple[str, str]], Optional[str]]:
    """Split an import clause into (default, [(imported, local)], namespace)."""
    default = None
    named: List[Tuple[str, str]] = []
    namespace = None

    braces = re.search(r"\{([^}]*)\}", clause)
    if braces:
        for part in braces.group(1).split(","):
            part = part.strip()
            if not part:
                continue
            imported, _, local = part.partition(" as ")
            named.append((imported.strip(), (local or imported).strip()))
        clause = clause[:braces.start()] + clause[braces.end():]

    for part in clause.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("*"):
            namespace = part.split("as", 1)[1].strip()
        else:
            default = part

    return default, named, namespace


def scan_imports(code: str) -> List[str]:
    """List the module specifiers a module imports or re-exports, in order."""
    found = []
    for pattern in (_IMPORT_FROM, _IMPORT_BARE, _EXPORT_FROM):
        found.extend((match.start(), match.group("source")) for match in pattern.finditer(code))
    specifiers = []
    for _, source in sorted(found):
        if source not in specifiers:
            specifiers.append(source)
    return specifiers


@dataclass
class ModuleRecord:
    """A loaded and transformed module in the bundle graph."""
    id: str
    original: str
    code: str
    dependencies: Dict[str, Optional[str]] = field(default_factory=dict)


class _ModuleGraph:
    """Load the module graph reachable from an entry module."""

    def __init__(self, plugins: Sequence[Any], cache: Optional[MutableMapping]):
        self.plugins = list(plugins)
        self.cache = cache
        self.modules: Dict[str, ModuleRecord] = {}
        self.order: List[ModuleRecord] = []
        self._seen: set = set()

    async def resolve(self, importee: str, importer: Optional[str]) -> Optional[str]:
        for plugin in self.plugins:
            hook = get_hook(plugin, "resolve_id")
            if hook is None:
                continue
            resolved = await call_hook(hook, importee, importer)
            if resolved is False:
                return None
            if resolved is not None:
                return str(resolved)

        if importer is None:
            return os.path.abspath(_with_extension(importee))
        if importee.startswith(".") or os.path.isabs(importee):
            return os.path.normpath(os.path.join(os.path.dirname(importer), _with_extension(importee)))
        return None

    async def add(self, module_id: str) -> None:
        if module_id in self._seen:
            return
        self._seen.add(module_id)

        source = await self._load(module_id)
        record = ModuleRecord(module_id, source, await self._transform(module_id, source))

        for specifier in scan_imports(record.code):
            resolved = await self.resolve(specifier, module_id)
            record.dependencies[specifier] = resolved
            if resolved is not None:
                await self.add(resolved)

        self.modules[module_id] = record
        self.order.append(record)

    async def _load(self, module_id: str) -> str:
        for plugin in self.plugins:
            hook = get_hook(plugin, "load")
            if hook is None:
                continue
            loaded = await call_hook(hook, module_id)
            if isinstance(loaded, Mapping):
                loaded = loaded.get("code")
            if loaded is not None:
                if not isinstance(loaded, str):
                    raise BuildError(f"load hook returned {type(loaded).__name__} for {module_id}")
                return loaded

        try:
            with open(module_id, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise BuildError(f"Could not load {module_id}: {e.strerror or e}") from e

    async def _transform(self, module_id: str, source: str) -> str:
        if self.cache is not None:
            cached = self.cache.get(module_id)
            if isinstance(cached, Mapping) and cached.get("original") == source:
                logger.debug(f"Reusing cached transform for {module_id}")
                return cached["code"]

        code = source
        for plugin in self.plugins:
            hook = get_hook(plugin, "transform")
            if hook is None:
                continue
            transformed = await call_hook(hook, code, module_id)
            if isinstance(transformed, Mapping):
                transformed = transformed.get("code")
            if transformed is None:
                continue
            if not isinstance(transformed, str):
                raise BuildError(f"transform hook returned {type(transformed).__name__} for {module_id}")
            code = transformed

        if self.cache is not None:
            self.cache[module_id] = {"original": source, "code": code}
        return code


class BuiltinBundle:
    """Result of a build: the ordered module graph, ready to generate."""

    def __init__(self, modules: List[ModuleRecord], entry_id: str):
        self.modules = modules
        self.entry_id = entry_id

    def generate(self, options: BundleOptions) -> BundleResult:
        variables = self._assign_variables()
        externals: List[str] = []
        exports: Dict[str, Dict[str, str]] = {}
        rendered = [self._render(record, variables, externals, exports) for record in self.modules]

        lines: List[str] = []
        segments: List[List[Tuple[int, ...]]] = []

        def push(line: str, segment: Optional[Tuple[int, ...]] = None) -> None:
            lines.append(line)
            segments.append([segment] if segment and line.strip() else [])

        banner = options.get("banner")
        if banner:
            for line in str(banner).split("\n"):
                push(line)
        for statement in externals:
            push(statement)
        for index, code in enumerate(rendered):
            if lines:
                push("")
            for line_number, line in enumerate(code.split("\n")):
                push(line, (0, index, line_number, 0))
        footer = options.get("footer")
        if footer:
            for line in str(footer).split("\n"):
                push(line)

        code = "\n".join(lines)
        if not options.source_map:
            return BundleResult(code=code)

        output_file = options.get("file") or options.get("dest")
        source_map = SourceMap(
            sources=[record.id for record in self.modules],
            sources_content=[record.original for record in self.modules],
            mappings=encode_mappings(segments),
            file=os.path.basename(output_file) if output_file else None,
        )
        return BundleResult(code=code, map=source_map)

    def _assign_variables(self) -> Dict[str, str]:
        variables: Dict[str, str] = {}
        # Namespace import locals are declared in the shared scope too.
        used = {
            match.group("name")
            for record in self.modules
            for pattern in (_IMPORT_FROM, _EXPORT_FROM)
            for clause in pattern.finditer(record.code)
            for match in _NAMESPACE_CLAUSE.finditer(clause.group("clause"))
        }
        for record in self.modules:
            stem = os.path.splitext(os.path.basename(record.id))[0]
            name = re.sub(r"[^\w$]", "_", stem) or "module"
            if name[0].isdigit():
                name = "_" + name
            candidate, counter = name, 1
            while candidate in used:
                candidate = f"{name}${counter}"
                counter += 1
            used.add(candidate)
            variables[record.id] = candidate
        return variables

    def _render(
        self,
        record: ModuleRecord,
        variables: Dict[str, str],
        externals: List[str],
        exports: Dict[str, Dict[str, str]],
    ) -> str:
        """Rewrite one module and record its exports as {exported name: local name}.

        Dependencies are rendered first, so their exports are known when an
        importer binds them. Inside an import cycle the importer falls back
        to the imported names themselves.
        """
        own = exports.setdefault(record.id, {})
        if _EXPORT_DEFAULT.search(record.code):
            own["default"] = variables[record.id]
        for match in _EXPORTED_NAME.finditer(record.code):
            own[match.group("name")] = match.group("name")

        def keep_external(match: "re.Match") -> bool:
            if record.dependencies.get(match.group("source")) is not None:
                return False
            statement = match.group(0).strip()
            if statement not in externals:
                externals.append(statement)
            return True

        def exports_of(match: "re.Match") -> Dict[str, str]:
            return exports.get(record.dependencies[match.group("source")], {})

        def export_binding(exported: str, local: str) -> Optional[str]:
            if exported == "default":
                own["default"] = local
                return None
            own[exported] = exported
            return f"var {exported} = {local};" if exported != local else None

        def replace_import(match: "re.Match") -> str:
            if keep_external(match):
                return _keep_lines(match.group(0), "")
            target = record.dependencies[match.group("source")]
            target_exports = exports_of(match)
            default, named, namespace = parse_import_clause(match.group("clause"))
            bindings = []
            if default:
                value = target_exports.get("default", variables[target])
                if default != value:
                    bindings.append(f"var {default} = {value};")
            for imported, local in named:
                value = target_exports.get(imported, imported)
                if local != value:
                    bindings.append(f"var {local} = {value};")
            if namespace:
                bindings.append(f"var {namespace} = {namespace_object(target_exports)};")
            return _keep_lines(match.group(0), " ".join(bindings))

        def replace_reexport(match: "re.Match") -> str:
            if keep_external(match):
                return _keep_lines(match.group(0), "")
            target_exports = exports_of(match)
            clause = match.group("clause")
            bindings = []
            namespace = _NAMESPACE_CLAUSE.match(clause)
            if namespace:
                name = namespace.group("name")
                bindings.append(f"var {name} = {namespace_object(target_exports)};")
                own[name] = name
            elif clause.startswith("*"):
                for name, value in target_exports.items():
                    if name != "default":
                        own.setdefault(name, value)
            else:
                for imported, exported in parse_import_clause(clause)[1]:
                    bindings.append(export_binding(exported, target_exports.get(imported, imported)))
            return _keep_lines(match.group(0), " ".join(b for b in bindings if b))

        def replace_export_list(match: "re.Match") -> str:
            bindings = [
                export_binding(exported, local)
                for local, exported in parse_import_clause(match.group("clause"))[1]
            ]
            return _keep_lines(match.group(0), " ".join(b for b in bindings if b))

        def drop_statement(match: "re.Match") -> str:
            keep_external(match)
            return _keep_lines(match.group(0), "")

        code = _EXPORT_FROM.sub(replace_reexport, record.code)
        code = _IMPORT_FROM.sub(replace_import, code)
        code = _IMPORT_BARE.sub(drop_statement, code)
        code = _EXPORT_LIST.sub(replace_export_list, code)
        code = _EXPORT_DEFAULT.sub(f"var {variables[record.id]} = ", code)
        code = _EXPORT_DECLARATION.sub("", code)
        return code


def namespace_object(module_exports: Mapping[str, str]) -> str:
    """Render a module's exports as an object literal, e.g. ``{a: a, default: lib}``."""
    return "{" + ", ".join(f"{name}: {local}" for name, local in module_exports.items()) + "}"


class BuiltinBundler:
    """Default backend: build the module graph, then concatenate it.

    Example:
        >>> backend = BuiltinBundler()
        >>> bundle = await backend.build(options)
        >>> result = bundle.generate(options)
    """

    name = "builtin"

    async def build(self, options: BundleOptions) -> BuiltinBundle:
        if not options.entry:
            raise BuildError("The builtin backend requires options.entry")

        graph = _ModuleGraph(options.plugins, self._module_cache(options.cache))
        entry_id = await graph.resolve(options.entry, None)
        if entry_id is None:
            raise BuildError(f"Could not resolve entry module ({options.entry})")

        await graph.add(entry_id)
        logger.debug(f"Built {len(graph.order)} module(s) from {options.entry}")
        return BuiltinBundle(graph.order, entry_id)

    def _module_cache(self, cache: Any) -> Optional[MutableMapping]:
        if cache is None:
            return None
        if not isinstance(cache, MutableMapping):
            raise BuildError(
                f"The builtin backend requires options.cache to be a mutable mapping, "
                f"got {type(cache).__name__}"
            )
        modules = cache.setdefault("modules", {})
        if not isinstance(modules, MutableMapping):
            raise BuildError("options.cache['modules'] must be a mutable mapping")
        return modules
