"""Line-oriented extraction of values from a small YAML subset.

Only section-scoped lookups are supported: walk a dot separated path of
mapping keys (``acronyms.keys``), then read the list items or ``key: value``
pairs nested under the last key. A section ends at the first non-blank line
indented at or below its header. Malformed input yields fewer matches,
never an exception.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_re_key_value = re.compile(r"""^(?P<key>[\w-]+|"[^"]*"|'[^']*')\s*:(?:\s+(?P<rest>.*?))?\s*$""")
_re_fence = re.compile(r"^(?:---|\.\.\.)\s*$")


@dataclass(frozen=True)
class Section:
    """A located section header and the lines nested under it."""

    header_indent: int
    inline: str
    body: list[str]


def split_frontmatter(text: str) -> str | None:
    """Return the YAML block delimited by ``---`` lines at the top of a document.

    Returns None when the document has no frontmatter or the block is not closed.
    """
    lines = text.splitlines()
    if not lines or lines[0].rstrip() != "---":
        return None
    for index in range(1, len(lines)):
        if _re_fence.match(lines[index]):
            return "\n".join(lines[1:index])
    return None


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _is_ignorable(stripped: str) -> bool:
    return not stripped or stripped.startswith("#")


def _unquote(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] in "\"'" and value[-1] == value[0]:
        return value[1:-1]
    if value[:1] in ("'", '"'):
        closing = value.find(value[0], 1)
        if closing > 0:
            return value[1:closing]
        return value[1:]
    # Trailing comment on an unquoted scalar
    comment = value.find(" #")
    if comment >= 0:
        value = value[:comment].rstrip()
    return value


def _split_key_value(text: str) -> tuple[str, str] | None:
    match = _re_key_value.match(text.strip())
    if not match:
        return None
    return _unquote(match.group("key")), match.group("rest") or ""


def _split_flow(text: str) -> list[str]:
    """Split the inside of a flow collection on top-level commas."""
    parts: list[str] = []
    depth = 0
    quote = ""
    current: list[str] = []
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = ""
            continue
        if char in "\"'":
            quote = char
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def _parse_flow_mapping(text: str) -> dict[str, str]:
    text = text.strip()
    if not (text.startswith("{") and text.endswith("}")):
        return {}
    mapping: dict[str, str] = {}
    for part in _split_flow(text[1:-1]):
        key, sep, value = part.partition(":")
        if sep and key.strip():
            mapping[_unquote(key)] = _unquote(value)
    return mapping


def _parse_flow_sequence(text: str) -> list[dict[str, str] | str]:
    text = text.strip()
    if not (text.startswith("[") and text.endswith("]")):
        return []
    entries: list[dict[str, str] | str] = []
    for part in _split_flow(text[1:-1]):
        if part.startswith("{"):
            entries.append(_parse_flow_mapping(part))
        else:
            entries.append(_unquote(part))
    return entries


def find_section(text: str, section_path: str) -> Section | None:
    """Locate the section named by a dot separated key path.

    Each path component must be a direct child key of the previous one. When
    the same key appears twice at one level the first occurrence wins.
    """
    parts = [part for part in section_path.split(".") if part]
    if not parts:
        return None

    lines = text.splitlines()
    # One [header_indent, child_indent] pair per matched path component
    levels: list[list[int | None]] = []
    top_indent: int | None = None

    for index, line in enumerate(lines):
        stripped = line.strip()
        if _is_ignorable(stripped):
            continue
        indent = _indent(line)

        while levels and indent <= levels[-1][0]:
            levels.pop()

        if levels:
            if levels[-1][1] is None:
                levels[-1][1] = indent
            if indent != levels[-1][1]:
                continue
        else:
            if top_indent is None:
                top_indent = indent
            if indent != top_indent:
                continue

        pair = _split_key_value(stripped)
        if pair is None or pair[0] != parts[len(levels)]:
            continue

        key, rest = pair
        if len(levels) == len(parts) - 1:
            body = []
            for following in lines[index + 1 :]:
                following_stripped = following.strip()
                if not _is_ignorable(following_stripped) and _indent(following) <= indent:
                    break
                body.append(following)
            return Section(header_indent=indent, inline=rest, body=body)

        if rest and not rest.startswith("#"):
            # Scalar or flow value, cannot descend further
            continue
        levels.append([indent, None])

    return None


def _block_entries(body: list[str]) -> list[dict[str, str] | str]:
    entries: list[dict[str, str] | str] = []
    current: dict[str, str] | None = None
    item_indent: int | None = None
    key_indent: int | None = None

    for line in body:
        stripped = line.strip()
        if _is_ignorable(stripped):
            continue
        indent = _indent(line)

        if (stripped == "-" or stripped.startswith("- ")) and (
            item_indent is None or indent == item_indent
        ):
            item_indent = indent
            rest = stripped[1:].strip()
            if not rest:
                current = {}
                entries.append(current)
                key_indent = None
                continue
            if rest.startswith("{"):
                current = _parse_flow_mapping(rest)
                entries.append(current)
                key_indent = None
                continue
            pair = _split_key_value(rest)
            if pair is None:
                current = None
                entries.append(_unquote(rest))
                continue
            current = {pair[0]: _unquote(pair[1])}
            entries.append(current)
            key_indent = indent + len(stripped) - len(rest)
            continue

        if current is None or item_indent is None or indent <= item_indent:
            continue
        if key_indent is None:
            key_indent = indent
        if indent != key_indent:
            continue
        pair = _split_key_value(stripped)
        if pair is not None:
            current[pair[0]] = _unquote(pair[1])

    return entries


def section_entries(text: str, section_path: str) -> list[dict[str, str] | str]:
    """Return the list items under a section, mappings as dicts and scalars as strings."""
    section = find_section(text, section_path)
    if section is None:
        return []
    inline = section.inline.strip()
    if inline.startswith("["):
        return _parse_flow_sequence(inline)
    if inline and not inline.startswith("#"):
        return [_unquote(inline)]
    return _block_entries(section.body)


def extract_items(text: str, section_path: str) -> list[dict[str, str]]:
    """Return the mapping items of the list under a section, in declaration order."""
    return [entry for entry in section_entries(text, section_path) if isinstance(entry, dict)]


def extract_mapping(text: str, section_path: str) -> list[tuple[str, str]]:
    """Return the ``key: value`` pairs directly under a section."""
    section = find_section(text, section_path)
    if section is None:
        return []
    inline = section.inline.strip()
    if inline.startswith("{"):
        return list(_parse_flow_mapping(inline).items())

    pairs: list[tuple[str, str]] = []
    child_indent: int | None = None
    for line in section.body:
        stripped = line.strip()
        if _is_ignorable(stripped):
            continue
        indent = _indent(line)
        if child_indent is None:
            child_indent = indent
        if indent != child_indent:
            continue
        pair = _split_key_value(stripped)
        if pair is not None and pair[1]:
            pairs.append((pair[0], _unquote(pair[1])))
    return pairs


def list_contains(text: str, section_path: str, value: str) -> bool:
    """Check whether a list (block, flow or single scalar) under a section holds ``value``."""
    return any(entry == value for entry in section_entries(text, section_path))
