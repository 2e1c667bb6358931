"""
Text extraction from loosely structured JSONL transcript records.

Records drift across assistant versions, so nothing here assumes a schema:
text is pulled out by a depth-bounded walk over an allowlist of keys, with
known content-block shapes (text, thinking, tool calls, tool results)
handled explicitly.

Copyright (c) 2026 Andrew Hundt
Licensed under the Apache License, Version 2.0
"""

import json
from typing import Any, Iterable, List, Optional

try:
    from orjson import loads as _json_loads
except ImportError:
    from json import loads as _json_loads  # type: ignore[assignment]

from .models import Role

#: Raw lines read from a session file when looking for a preview.
PREVIEW_LINE_LIMIT = 64

#: Default preview length in characters.
DEFAULT_PREVIEW_CHARS = 80

#: Recursion bound for the record walk.
MAX_DEPTH = 15

NO_CONTENT = "No content available"

_ELLIPSIS = "..."

#: Object keys the record walk is allowed to descend into.
_WALK_KEYS = frozenset(("text", "content", "message", "output", "result", "input", "thought", "reasoning"))

_KNOWN_ROLES = {r.value: r for r in Role if r is not Role.ENTRY}

_UNPARSED = object()


def _parse(line: str) -> Any:
    """Parse one JSON value, returning the _UNPARSED sentinel on failure."""
    try:
        return _json_loads(line)
    except (json.JSONDecodeError, ValueError):
        return _UNPARSED


def _unescape(text: str) -> str:
    """Turn literal backslash-n sequences into real newlines and trim."""
    return text.replace("\\n", "\n").strip()


def truncate(text: str, max_chars: int) -> str:
    """Cut text to max_chars characters, the last three being '...'."""
    if len(text) <= max_chars:
        return text
    return text[:max(max_chars - len(_ELLIPSIS), 0)] + _ELLIPSIS


def _first_text(content: Any) -> Optional[str]:
    """Preview rule for one content value: the string itself, or the first block's text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for item in content:
            if isinstance(item, dict) and isinstance(item.get("text"), str):
                return item["text"]
    return None


class ContentExtractor:
    """Produce previews and full renderings of session transcripts."""

    def __init__(self, max_depth: int = MAX_DEPTH):
        """Initialize with the recursion bound for the record walk."""
        self.max_depth = max_depth

    # ── Preview ──────────────────────────────────────────────────────────────

    def extract_preview(self, lines: Iterable[str], max_chars: int = DEFAULT_PREVIEW_CHARS) -> Optional[str]:
        """Return a single-line preview of the first non-blank line.

        Blank lines are skipped. A JSON line is searched
        for ``message.content`` then top-level ``content``; anything else is
        previewed as its raw trimmed text.

        Args:
            lines: Lines of the session file, in file order. Consumed lazily;
                   callers bound how many are read (see PREVIEW_LINE_LIMIT).
            max_chars: Maximum preview length in characters, ellipsis included.

        Returns:
            The preview, or None if every line is blank.
        """
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            text = self._preview_from_record(_parse(line))
            if text is None:
                text = line
            return truncate(text.replace("\n", " "), max_chars)
        return None

    @staticmethod
    def _preview_from_record(record: Any) -> Optional[str]:
        if not isinstance(record, dict):
            return None
        message = record.get("message")
        if isinstance(message, dict):
            text = _first_text(message.get("content"))
            if text is not None:
                return text
        return _first_text(record.get("content"))

    # ── Full rendering ───────────────────────────────────────────────────────

    def render_transcript(self, full_text: str) -> str:
        """Render a whole JSONL transcript as labelled, blank-line separated blocks.

        Unparseable lines are kept verbatim as their own paragraph. Records with
        no extractable text are dropped.

        Returns:
            The rendering, or NO_CONTENT when nothing could be rendered.
        """
        paragraphs: List[str] = []
        for raw in full_text.split("\n"):
            line = raw.strip()
            if not line:
                continue
            record = _parse(line)
            if record is _UNPARSED:
                paragraphs.append(line)
                continue
            text = self.extract_text(record)
            if not text:
                continue
            paragraphs.append(f"─── {self.classify(record).label} ───\n{text}")

        if not paragraphs:
            return NO_CONTENT
        return "\n\n".join(paragraphs).rstrip()

    @staticmethod
    def classify(record: Any) -> Role:
        """Role of a record: ``type`` first, then ``message.role``, else ENTRY."""
        if not isinstance(record, dict):
            return Role.ENTRY
        record_type = record.get("type")
        if isinstance(record_type, str) and record_type in _KNOWN_ROLES:
            return _KNOWN_ROLES[record_type]
        message = record.get("message")
        if isinstance(message, dict):
            role = message.get("role")
            if isinstance(role, str) and role in _KNOWN_ROLES:
                return _KNOWN_ROLES[role]
        return Role.ENTRY

    def extract_text(self, record: Any) -> str:
        """All human-readable text in a record, fragments separated by a blank line."""
        fragments: List[str] = []
        self._walk(record, fragments, 0)
        return "\n\n".join(fragments).strip()

    def _walk(self, value: Any, out: List[str], depth: int) -> None:  # noqa: C901
        if depth > self.max_depth:
            return

        if isinstance(value, dict):
            message = value.get("message")
            if isinstance(message, dict) and self._take_content(message.get("content"), out, depth):
                return
            if self._take_content(value.get("content"), out, depth):
                return
            for key, child in value.items():
                if key in _WALK_KEYS:
                    self._walk(child, out, depth + 1)
        elif isinstance(value, list):
            for item in value:
                self._content_block(item, out, depth)
        elif isinstance(value, str):
            text = _unescape(value)
            # Bare '{...}' strings are serialized structures nobody rendered.
            if not text.startswith("{"):
                _append(out, text)

    def _take_content(self, content: Any, out: List[str], depth: int) -> bool:
        """Consume a ``content`` value if it is a block list or a string."""
        if isinstance(content, list):
            for block in content:
                self._content_block(block, out, depth)
            return True
        if isinstance(content, str):
            _append(out, _unescape(content))
            return True
        return False

    def _content_block(self, block: Any, out: List[str], depth: int) -> None:
        if depth > self.max_depth or not isinstance(block, dict):
            return

        text = block.get("text")
        if isinstance(text, str):
            _append(out, _unescape(text))

        thinking = block.get("thinking")
        if isinstance(thinking, str):
            thought = _unescape(thinking)
            if thought:
                out.append(f"[Thinking]\n{thought}")

        name = block.get("name")
        if isinstance(name, str):
            tool_text = f"[Tool: {name}]"
            tool_input = block.get("input")
            if isinstance(tool_input, dict) and tool_input:
                tool_text += "\n" + json.dumps(tool_input, ensure_ascii=False)
            out.append(tool_text)

        content = block.get("content")
        if isinstance(content, str):
            _append(out, _unescape(content))
        elif isinstance(content, dict):
            if isinstance(content.get("text"), str):
                _append(out, _unescape(content["text"]))
        elif isinstance(content, list):
            for item in content:
                self._content_block(item, out, depth + 1)


def _append(out: List[str], text: str) -> None:
    if text and text != "{}":
        out.append(text)
