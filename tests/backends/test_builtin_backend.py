"""
Tests for rollup_stream.backend.builtin

Covers module graph construction, plugin hooks, rendering of imports and
exports, the transform cache and source map generation.
"""

import os

import pytest

from rollup_stream.backend import BuiltinBundler
from rollup_stream.backend.builtin import parse_import_clause, scan_imports
from rollup_stream.config import BundleOptions
from rollup_stream.errors import BuildError
from rollup_stream.plugins import hypothetical
from rollup_stream.sourcemap import SourceMap


async def bundle(**options):
    snapshot = BundleOptions(**options)
    built = await BuiltinBundler().build(snapshot)
    return built.generate(snapshot)


class TestParsing:
    def test_parse_import_clause(self):
        assert parse_import_clause("x") == ("x", [], None)
        assert parse_import_clause("{ a, b as c }") == (None, [("a", "a"), ("b", "c")], None)
        assert parse_import_clause("d, { e }") == ("d", [("e", "e")], None)
        assert parse_import_clause("* as ns") == (None, [], "ns")

    def test_scan_imports_in_source_order(self):
        code = (
            'import a from "./a.js";\n'
            'import "./side-effect.js";\n'
            'export { b } from "./b.js";\n'
            'import again from "./a.js";\n'
        )
        assert scan_imports(code) == ["./a.js", "./side-effect.js", "./b.js"]

    def test_scan_ignores_member_access(self):
        assert scan_imports('loader.import("./x.js");') == []


class TestGraph:
    @pytest.mark.asyncio
    async def test_default_import(self):
        result = await bundle(entry="./entry.js", plugins=[hypothetical({
            "./entry.js": 'import x from "./x.js"; console.log(x);',
            "./x.js": 'export default "Hello, World!";',
        })])

        assert result.code == 'var x = "Hello, World!";\n\n console.log(x);'

    @pytest.mark.asyncio
    async def test_named_imports_and_exported_declarations(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import { greet as hello, name } from "./lib.js";\nhello(name);',
            "lib.js": 'export function greet(n) { return "hi " + n; }\nexport const name = "x";',
        })])

        assert result.code == (
            'function greet(n) { return "hi " + n; }\n'
            'const name = "x";\n'
            '\n'
            'var hello = greet;\n'
            'hello(name);'
        )

    @pytest.mark.asyncio
    async def test_dependencies_bundled_once(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import a from "./a.js";\nimport b from "./b.js";\nconsole.log(a, b);',
            "a.js": 'import shared from "./shared.js";\nexport default shared + 1;',
            "b.js": 'import shared from "./shared.js";\nexport default shared + 2;',
            "shared.js": 'export default 40;',
        })])

        assert result.code.count("var shared = 40;") == 1
        assert result.code.index("var shared") < result.code.index("var a =") < result.code.index("var b =")

    @pytest.mark.asyncio
    async def test_external_imports_hoisted(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import path from "path";\nconsole.log(path.sep);',
        })])

        assert result.code.startswith('import path from "path";\n')
        assert "console.log(path.sep);" in result.code
        assert result.code.count('from "path"') == 1

    @pytest.mark.asyncio
    async def test_resolve_hook_false_marks_external(self):
        plugin = {
            "resolveId": lambda importee, importer: False if importee == "./vendor.js" else None,
            "load": lambda module_id: 'import v from "./vendor.js";\nv();',
        }

        result = await bundle(entry="./main.js", plugins=[plugin])

        assert result.code.startswith('import v from "./vendor.js";')

    @pytest.mark.asyncio
    async def test_reexports_are_bundled(self):
        result = await bundle(entry="index.js", plugins=[hypothetical({
            "index.js": 'export { util } from "./util.js";\nexport * from "./more.js";',
            "util.js": 'export const util = 1;',
            "more.js": 'export const more = 2;',
        })])

        assert "const util = 1;" in result.code
        assert "const more = 2;" in result.code
        assert "export" not in result.code

    @pytest.mark.asyncio
    async def test_namespace_import_binds_exports_object(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import * as lib from "./lib.js";\nconsole.log(lib.a);',
            "lib.js": 'export const a = 1;',
        })])

        assert result.code == 'const a = 1;\n\nvar lib = {a: a};\nconsole.log(lib.a);'

    @pytest.mark.asyncio
    async def test_aliased_export_list(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import { b } from "./lib.js";\nconsole.log(b);',
            "lib.js": 'const a = 1;\nexport { a as b };',
        })])

        assert result.code == 'const a = 1;\nvar b = a;\n\n\nconsole.log(b);'

    @pytest.mark.asyncio
    async def test_export_list_as_default(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import one from "./lib.js";\nlog(one);',
            "lib.js": 'const a = 1;\nexport { a as default };',
        })])

        assert result.code == 'const a = 1;\n\n\nvar one = a;\nlog(one);'

    @pytest.mark.asyncio
    async def test_namespace_of_reexporting_module(self):
        result = await bundle(entry="main.js", plugins=[hypothetical({
            "main.js": 'import * as api from "./index.js";\napi.c(api.d);',
            "index.js": 'export { a as c } from "./a.js";\nexport * from "./b.js";',
            "a.js": 'export function a() {}',
            "b.js": 'export const d = 2;',
        })])

        assert "var c = a;" in result.code
        assert "var api = {c: c, d: d};" in result.code
        assert "export" not in result.code

    @pytest.mark.asyncio
    async def test_banner_and_footer(self):
        result = await bundle(
            entry="main.js",
            banner="/* banner */",
            footer="/* footer */",
            plugins=[hypothetical({"main.js": "run();"})],
        )

        assert result.code == "/* banner */\n\nrun();\n/* footer */"

    @pytest.mark.asyncio
    async def test_file_system_modules(self, tmp_path):
        (tmp_path / "main.js").write_text('import msg from "./lib/msg.js";\nconsole.log(msg);\n', encoding="utf-8")
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "msg.js").write_text('export default "from disk";\n', encoding="utf-8")

        result = await bundle(entry=str(tmp_path / "main.js"))

        assert 'var msg = "from disk";' in result.code
        assert "console.log(msg);" in result.code

    @pytest.mark.asyncio
    async def test_entry_extension_is_optional(self, tmp_path):
        (tmp_path / "main.js").write_text("go();\n", encoding="utf-8")

        result = await bundle(entry=str(tmp_path / "main"))

        assert result.code == "go();\n"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(BuildError, match="Could not load"):
            await bundle(entry=str(tmp_path / "missing.js"))

    @pytest.mark.asyncio
    async def test_entry_required(self):
        with pytest.raises(BuildError, match="requires options.entry"):
            await bundle(rollup="builtin")


class TestPluginHooks:
    @pytest.mark.asyncio
    async def test_hook_exception_becomes_build_error(self):
        def load(module_id):
            raise IOError("disk on fire")

        with pytest.raises(BuildError, match="disk on fire") as exc_info:
            await bundle(entry="main.js", plugins=[{"load": load}])
        assert isinstance(exc_info.value.__cause__, IOError)

    @pytest.mark.asyncio
    async def test_async_hooks(self):
        class AsyncPlugin:
            async def resolve_id(self, importee, importer):
                return "virtual:" + importee.lstrip("./")

            async def load(self, module_id):
                return {"code": f"console.log({module_id!r});"}

            async def transform(self, code, module_id):
                return {"code": code.replace("console.log", "print")}

        result = await bundle(entry="./main.js", plugins=[AsyncPlugin()])

        assert result.code == "print('virtual:main.js');"

    @pytest.mark.asyncio
    async def test_transforms_chain_in_plugin_order(self):
        plugins = [
            {"load": lambda module_id: "a"},
            {"transform": lambda code, module_id: code + "b"},
            {"transform": lambda code, module_id: None},
            {"transform": lambda code, module_id: code + "c"},
        ]

        result = await bundle(entry="main.js", plugins=plugins)

        assert result.code == "abc"

    @pytest.mark.asyncio
    async def test_load_returning_non_string(self):
        with pytest.raises(BuildError, match="load hook returned int"):
            await bundle(entry="main.js", plugins=[{"load": lambda module_id: 5}])


class TestCache:
    @pytest.mark.asyncio
    async def test_cache_records_modules(self, hello_plugin):
        cache = {}

        await bundle(entry="./entry.js", plugins=[hello_plugin], cache=cache)

        entry_id = os.path.abspath("entry.js")
        assert cache["modules"][entry_id] == {
            "original": 'console.log("Hello, World!");',
            "code": 'console.log("Hello, World!");',
        }

    @pytest.mark.asyncio
    async def test_cached_transform_reused(self):
        calls = []

        def transform(code, module_id):
            calls.append(module_id)
            return code.upper()

        plugins = [{"load": lambda module_id: "shout();", "transform": transform}]
        cache = {}

        first = await bundle(entry="main.js", plugins=plugins, cache=cache)
        second = await bundle(entry="main.js", plugins=plugins, cache=cache)

        assert first.code == second.code == "SHOUT();"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_cache_must_be_mapping(self, hello_plugin):
        with pytest.raises(BuildError, match="mutable mapping"):
            await bundle(entry="main.js", plugins=[hello_plugin], cache=["not", "a", "mapping"])


class TestSourceMap:
    @pytest.mark.asyncio
    async def test_no_map_unless_requested(self, hello_plugin):
        result = await bundle(entry="main.js", plugins=[hello_plugin])
        assert result.map is None

    @pytest.mark.asyncio
    async def test_map_describes_modules(self):
        result = await bundle(
            entry="main.js",
            sourceMap=True,
            file="dist/bundle.js",
            plugins=[hypothetical({
                "main.js": 'import x from "./x.js";\nlog(x);',
                "x.js": "export default 1;",
            })],
        )

        assert isinstance(result.map, SourceMap)
        data = result.map.to_dict()
        assert data["version"] == 3
        assert data["file"] == "bundle.js"
        assert data["sources"] == ["x.js", "main.js"]
        assert data["sourcesContent"] == ["export default 1;", 'import x from "./x.js";\nlog(x);']
        # x.js line 0; blank separator; main.js line 0 is empty after rewriting; main.js line 1
        assert data["mappings"] == "AAAA;;;ACCA"
