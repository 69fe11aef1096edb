"""
Text splicing with source map generation.

:class:`SourceSplicer` records non-overlapping overwrites against an original
string and renders both the edited text and a Source Map v3 payload that maps
the edited text back to the original. Unchanged spans are mapped at every
line start; each overwritten span maps as a single segment to the start of
the range it replaced. Columns are counted in code points.
"""

from bisect import bisect_right
from typing import Any, Dict, Iterator, List, Optional, Tuple

_BASE64_DIGITS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1

# (generated column, original line, original column)
Segment = Tuple[int, int, int]


def encode_vlq(value: int) -> str:
    """Encode one signed integer as a base64 VLQ string."""
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    digits = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        digits.append(_BASE64_DIGITS[digit])
        if not vlq:
            return "".join(digits)


def encode_mappings(lines: List[List[Segment]]) -> str:
    """Encode per-line segments into a v3 ``mappings`` string (single source)."""
    encoded_lines = []
    prev_orig_line = 0
    prev_orig_col = 0
    for segments in lines:
        prev_gen_col = 0
        encoded = []
        for gen_col, orig_line, orig_col in segments:
            parts = [
                encode_vlq(gen_col - prev_gen_col),
                encode_vlq(0),
                encode_vlq(orig_line - prev_orig_line),
                encode_vlq(orig_col - prev_orig_col),
            ]
            encoded.append("".join(parts))
            prev_gen_col = gen_col
            prev_orig_line = orig_line
            prev_orig_col = orig_col
        encoded_lines.append(",".join(encoded))
    return ";".join(encoded_lines)


class SourceSplicer:
    """Accumulates overwrites against ``original`` and renders the result."""

    def __init__(self, original: str):
        self.original = original
        self._edits: List[Tuple[int, int, str]] = []
        self._line_starts = [0]
        for index, char in enumerate(original):
            if char == "\n":
                self._line_starts.append(index + 1)

    def overwrite(self, start: int, end: int, content: str) -> "SourceSplicer":
        """Replace ``original[start:end]`` with ``content``.

        Raises:
            ValueError: If the range is empty, out of bounds, or overlaps an
                earlier overwrite.
        """
        if not 0 <= start < end <= len(self.original):
            raise ValueError(
                f"Invalid overwrite range [{start}, {end}) for text of length {len(self.original)}"
            )
        for edit_start, edit_end, _ in self._edits:
            if start < edit_end and edit_start < end:
                raise ValueError(
                    f"Overwrite [{start}, {end}) overlaps [{edit_start}, {edit_end})"
                )
        self._edits.append((start, end, content))
        return self

    def has_changed(self) -> bool:
        return bool(self._edits)

    def _chunks(self) -> Iterator[Tuple[int, int, Optional[str]]]:
        """Yield ``(start, end, replacement)``; replacement is None for kept text."""
        cursor = 0
        for start, end, content in sorted(self._edits):
            if cursor < start:
                yield cursor, start, None
            yield start, end, content
            cursor = end
        if cursor < len(self.original):
            yield cursor, len(self.original), None

    def to_string(self) -> str:
        parts = []
        for start, end, content in self._chunks():
            parts.append(self.original[start:end] if content is None else content)
        return "".join(parts)

    def _original_location(self, offset: int) -> Tuple[int, int]:
        line = bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]

    def _segments(self) -> List[List[Segment]]:
        lines: List[List[Segment]] = [[]]
        gen_col = 0
        for start, end, content in self._chunks():
            if content is None:
                pieces = self.original[start:end].split("\n")
                pos = start
                lines[-1].append((gen_col, *self._original_location(pos)))
                for index, piece in enumerate(pieces):
                    if index > 0:
                        lines.append([])
                        gen_col = 0
                        if pos < end:
                            lines[-1].append((0, *self._original_location(pos)))
                    gen_col += len(piece)
                    pos += len(piece) + 1
            else:
                if content:
                    lines[-1].append((gen_col, *self._original_location(start)))
                pieces = content.split("\n")
                for index, piece in enumerate(pieces):
                    if index > 0:
                        lines.append([])
                        gen_col = 0
                    gen_col += len(piece)
        return lines

    def generate_map(
        self,
        source: str,
        file: Optional[str] = None,
        include_content: bool = True,
    ) -> Dict[str, Any]:
        """Render a Source Map v3 payload for the edited text.

        Args:
            source: Name recorded in ``sources`` for the original text.
            file: Optional ``file`` field (name of the generated file).
            include_content: Whether to embed the original in ``sourcesContent``.
        """
        payload: Dict[str, Any] = {
            "version": 3,
            "sources": [source],
            "names": [],
            "mappings": encode_mappings(self._segments()),
        }
        if file is not None:
            payload["file"] = file
        if include_content:
            payload["sourcesContent"] = [self.original]
        return payload
