"""
Tests for rollup_stream.sourcemap

Covers the inline annotation, map serialization and Base64 VLQ encoding.
"""

import base64
import json
import types

import pytest

from rollup_stream.errors import GenerateError
from rollup_stream.sourcemap import (
    SOURCE_MAPPING_URL_PREFIX,
    SourceMap,
    annotate,
    encode_mappings,
    encode_vlq,
    serialize_map,
)


def decode_comment(code):
    encoded = code.rsplit(SOURCE_MAPPING_URL_PREFIX, 1)[1]
    return json.loads(base64.b64decode(encoded).decode("utf-8"))


class TestAnnotate:
    def test_disabled_returns_code_unchanged(self):
        assert annotate("code();", {"version": 3}, False) == "code();"

    def test_missing_map_returns_code_unchanged(self):
        assert annotate("code();", None, True) == "code();"

    def test_appends_single_comment_line(self):
        source_map = {"version": 3, "sources": ["a.js"], "names": [], "mappings": "AAAA"}

        annotated = annotate("code();", source_map, True)

        head, comment = annotated.split("\n")
        assert head == "code();"
        assert comment.startswith("//# sourceMappingURL=data:application/json;charset=utf-8;base64,")
        assert decode_comment(annotated) == source_map

    def test_source_map_object(self):
        source_map = SourceMap(sources=["a.js"], sources_content=["a();"], mappings="AAAA", file="out.js")

        decoded = decode_comment(annotate("a();", source_map, True))

        assert decoded == {
            "version": 3,
            "file": "out.js",
            "sources": ["a.js"],
            "sourcesContent": ["a();"],
            "names": [],
            "mappings": "AAAA",
        }

    def test_json_string_map_used_verbatim(self):
        raw = '{"version":3,"mappings":""}'
        annotated = annotate("x", raw, True)
        assert base64.b64decode(annotated.split(",", 1)[1]).decode("utf-8") == raw

    def test_non_ascii_content(self):
        source_map = SourceMap(sources=["é.js"], sources_content=['log("héllo");'], mappings="AAAA")
        assert decode_comment(annotate('log("héllo");', source_map, True))["sourcesContent"] == ['log("héllo");']


class TestSerializeMap:
    def test_compact_json(self):
        assert serialize_map({"version": 3, "mappings": "A"}) == '{"version":3,"mappings":"A"}'

    def test_read_only_mapping(self):
        source_map = types.MappingProxyType({"version": 3, "sources": ["a.js"], "mappings": "AAAA"})

        assert serialize_map(source_map) == '{"version":3,"sources":["a.js"],"mappings":"AAAA"}'
        assert decode_comment(annotate("a();", source_map, True)) == dict(source_map)

    def test_unsupported_type(self):
        with pytest.raises(GenerateError, match="Unsupported source map type: int"):
            serialize_map(12)


class TestVlq:
    @pytest.mark.parametrize("value, expected", [
        (0, "A"),
        (1, "C"),
        (-1, "D"),
        (15, "e"),
        (16, "gB"),
        (-16, "hB"),
        (1000, "w+B"),
    ])
    def test_known_values(self, value, expected):
        assert encode_vlq(value) == expected

    def test_mappings_are_relative(self):
        lines = [
            [(0, 0, 0, 0)],
            [],
            [(2, 0, 1, 2), (8, 1, 0, 0)],
        ]
        assert encode_mappings(lines) == "AAAA;;EACE,MCDF"

    def test_empty_mappings(self):
        assert encode_mappings([]) == ""
        assert encode_mappings([[], []]) == ";"
