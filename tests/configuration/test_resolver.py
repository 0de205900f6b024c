"""
Tests for rollup_stream.config.resolver

Covers synchronous capture of invocation arguments, resolution of captured
paths through the loader, snapshot validation and the entry requirement.
"""

from pathlib import Path

import pytest

from rollup_stream.config import BundleOptions, ConfigurationResolver
from rollup_stream.errors import (
    ConfigLoadError,
    InvalidOptionsTypeError,
    MissingEntryError,
    OptionsError,
)


@pytest.fixture
def resolver():
    return ConfigurationResolver()


class TestCapture:
    def test_mapping_is_shallow_copied(self, resolver):
        plugins = [object()]
        options = {"entry": "./entry.js", "plugins": plugins}

        captured = resolver.capture(options)
        options["entry"] = "./other.js"

        assert captured["entry"] == "./entry.js"
        assert captured["plugins"] is plugins

    def test_string_is_kept_as_path(self, resolver):
        assert resolver.capture("rollup.config.py") == "rollup.config.py"

    def test_path_like_becomes_string(self, resolver):
        assert resolver.capture(Path("configs") / "rollup.yaml") == str(Path("configs") / "rollup.yaml")

    def test_snapshot_passes_through(self, resolver):
        snapshot = BundleOptions(entry="./entry.js")
        assert resolver.capture(snapshot) is snapshot

    @pytest.mark.parametrize("argument", [None, 0, 1.5, False, ["entry.js"], ("entry.js",)])
    def test_invalid_types_rejected(self, resolver, argument):
        with pytest.raises(InvalidOptionsTypeError) as exc_info:
            resolver.capture(argument)
        assert str(exc_info.value) == "options must be an object or a string!"


class TestResolve:
    @pytest.mark.asyncio
    async def test_mapping_resolves_to_snapshot(self, resolver):
        options = await resolver.resolve({"entry": "./entry.js", "sourceMap": True, "format": "iife"})

        assert isinstance(options, BundleOptions)
        assert options.entry == "./entry.js"
        assert options.source_map is True
        assert options.extras == {"format": "iife"}

    @pytest.mark.asyncio
    async def test_missing_entry(self, resolver):
        with pytest.raises(MissingEntryError) as exc_info:
            await resolver.resolve({})
        assert str(exc_info.value) == "You must supply options.entry to rollup"

    @pytest.mark.asyncio
    async def test_empty_entry_counts_as_missing(self, resolver):
        with pytest.raises(MissingEntryError):
            await resolver.resolve({"entry": ""})

    @pytest.mark.asyncio
    async def test_injected_backend_does_not_need_entry(self, resolver):
        backend = object()
        options = await resolver.resolve({"rollup": backend})

        assert options.entry is None
        assert options.rollup is backend

    @pytest.mark.asyncio
    async def test_invalid_field_type(self, resolver):
        with pytest.raises(OptionsError, match="Invalid rollup options"):
            await resolver.resolve({"entry": ["a.js", "b.js"]})

    @pytest.mark.asyncio
    async def test_path_is_loaded(self, resolver, fixtures_dir):
        options = await resolver.resolve(str(fixtures_dir / "config.py"))

        assert options.entry == "./entry.js"
        assert len(options.plugins) == 1

    @pytest.mark.asyncio
    async def test_path_producing_list_rejected(self, resolver, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- entry.js\n", encoding="utf-8")

        with pytest.raises(InvalidOptionsTypeError):
            await resolver.resolve(str(config_file))

    @pytest.mark.asyncio
    async def test_loaded_config_still_needs_entry(self, resolver, tmp_path):
        config_file = tmp_path / "empty.json"
        config_file.write_text("{}", encoding="utf-8")

        with pytest.raises(MissingEntryError):
            await resolver.resolve(str(config_file))

    @pytest.mark.asyncio
    async def test_missing_config_file(self, resolver, tmp_path):
        with pytest.raises(ConfigLoadError, match="Configuration file not found"):
            await resolver.resolve(str(tmp_path / "missing.py"))
