"""
Source map support.

Provides the inline source-map annotation applied to generated code before
it is emitted, the version-3 SourceMap record produced by the built-in
backend, and Base64 VLQ encoding for the ``mappings`` field.

Usage:
    >>> annotate("console.log(1);", {"version": 3, "mappings": "AAAA"}, True)
    'console.log(1);\\n//# sourceMappingURL=data:application/json;charset=utf-8;base64,eyJ2...'
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rollup_stream.errors import GenerateError


SOURCE_MAPPING_URL_PREFIX = "//# sourceMappingURL=data:application/json;charset=utf-8;base64,"

_BASE64_DIGITS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_BASE_SHIFT = 5
_VLQ_BASE_MASK = (1 << _VLQ_BASE_SHIFT) - 1
_VLQ_CONTINUATION_BIT = 1 << _VLQ_BASE_SHIFT


@dataclass
class SourceMap:
    """Version 3 source map.

    Attributes:
        sources: Module ids, in the order referenced by ``mappings``
        sources_content: Original source text for each entry of ``sources``
        mappings: Base64 VLQ encoded segment data
        file: Name of the generated file, if known
        names: Symbol names referenced by mappings
    """
    sources: List[str]
    sources_content: List[Optional[str]]
    mappings: str
    file: Optional[str] = None
    names: List[str] = field(default_factory=list)
    version: int = 3

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"version": self.version}
        if self.file is not None:
            data["file"] = self.file
        data.update({
            "sources": list(self.sources),
            "sourcesContent": list(self.sources_content),
            "names": list(self.names),
            "mappings": self.mappings,
        })
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def serialize_map(source_map: Any) -> str:
    """Serialize map data produced by a backend to compact JSON."""
    if isinstance(source_map, str):
        return source_map
    if hasattr(source_map, "to_json"):
        return source_map.to_json()
    if isinstance(source_map, Mapping):
        return json.dumps(dict(source_map), separators=(",", ":"))
    raise GenerateError(f"Unsupported source map type: {type(source_map).__name__}")


def annotate(code: str, source_map: Any, enabled: bool) -> str:
    """Append an inline source-map comment to generated code.

    Returns ``code`` unchanged when ``enabled`` is false or no map is given;
    otherwise nothing but the trailing comment line is added.
    """
    if not enabled or source_map is None:
        return code
    return f"{code}\n{SOURCE_MAPPING_URL_PREFIX}{_b64(serialize_map(source_map))}"


def encode_vlq(value: int) -> str:
    """Encode a single integer as a Base64 VLQ string."""
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    digits = []
    while True:
        digit = vlq & _VLQ_BASE_MASK
        vlq >>= _VLQ_BASE_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION_BIT
        digits.append(_BASE64_DIGITS[digit])
        if not vlq:
            return "".join(digits)


def encode_mappings(lines: Sequence[Sequence[Sequence[int]]]) -> str:
    """Encode per-line segments into a ``mappings`` string.

    Each segment holds absolute values ``(generated_column,)`` or
    ``(generated_column, source, original_line, original_column[, name])``,
    all zero-based. Generated columns are relative within a line; the other
    fields are relative to the previous segment across the whole map.
    """
    previous = [0, 0, 0, 0]
    encoded_lines = []

    for segments in lines:
        generated_column = 0
        encoded_segments = []
        for segment in segments:
            parts = [encode_vlq(segment[0] - generated_column)]
            generated_column = segment[0]
            for index, value in enumerate(segment[1:]):
                parts.append(encode_vlq(value - previous[index]))
                previous[index] = value
            encoded_segments.append("".join(parts))
        encoded_lines.append(",".join(encoded_segments))

    return ";".join(encoded_lines)
