"""Find the directive instance enclosing the cursor on a line."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from functools import lru_cache

from shortcode_lsp.constants import SHORTCODE_CLOSE, SHORTCODE_OPEN, SPAN_CLOSE, SPAN_OPEN
from shortcode_lsp.models import DirectiveKind, RawContext


@lru_cache(maxsize=64)
def _shortcode_marker(name: str) -> re.Pattern[str]:
    # opening marker then the directive name as a whole word
    return re.compile(re.escape(SHORTCODE_OPEN) + r"\s*" + re.escape(name) + r"(?=\s|>|$)")


def locate_shortcode(line: str, cursor: int, name: str) -> RawContext | None:
    """Locate ``{{< name ... >}}`` around ``cursor``.

    The nearest opening marker before the cursor is used; if it is closed
    before the cursor, or no closing marker follows the cursor, the cursor is
    not inside an instance and None is returned.
    """
    if cursor < 0 or cursor > len(line):
        return None

    # The lookahead needs the text after the cursor, so match on the whole line
    matches = [m for m in _shortcode_marker(name).finditer(line) if m.end() <= cursor]
    if not matches:
        return None
    marker = matches[-1]
    marker_end = marker.end()

    # Closed before the cursor
    if SHORTCODE_CLOSE in line[marker.start() : cursor]:
        return None

    close_index = line.find(SHORTCODE_CLOSE, cursor)
    if close_index < 0:
        return None
    content_end = close_index

    has_space_before_end = content_end > cursor and line[content_end - 1].isspace()

    return RawContext(
        kind=DirectiveKind.SHORTCODE,
        full_content=line[marker_end:content_end].strip(),
        content_start=marker_end,
        content_end=content_end,
        cursor=cursor,
        has_space_after_name=marker_end < len(line) and line[marker_end].isspace(),
        has_space_before_end=has_space_before_end,
    )


def has_span_class(content: str, classes: Iterable[str]) -> bool:
    """Check that span content carries one of ``classes`` as a whole ``.class`` token.

    ``.rn`` does not match ``.rn-type``.
    """
    for css_class in classes:
        if re.search(r"(?:^|\s)\." + re.escape(css_class) + r"(?=\s|$)", content):
            return True
    return False


def locate_span(
    line: str, cursor: int, accepts: Callable[[str], bool] | None = None
) -> RawContext | None:
    """Locate the ``{...}`` attribute block around ``cursor``.

    Scanning stops with None when a closing brace is met before an opening
    one (backwards) or an opening brace before a closing one (forwards).
    ``accepts`` rejects spans whose content lacks the expected class.
    """
    if cursor < 0 or cursor > len(line):
        return None

    brace_start = -1
    for i in range(cursor - 1, -1, -1):
        if line[i] == SPAN_OPEN:
            brace_start = i
            break
        if line[i] == SPAN_CLOSE:
            return None
    if brace_start == -1:
        return None

    brace_end = -1
    for i in range(cursor, len(line)):
        if line[i] == SPAN_CLOSE:
            brace_end = i
            break
        if line[i] == SPAN_OPEN:
            return None
    if brace_end == -1:
        return None

    content = line[brace_start + 1 : brace_end]
    if accepts is not None and not accepts(content):
        return None

    content_start = brace_start + 1
    return RawContext(
        kind=DirectiveKind.SPAN,
        full_content=content.strip(),
        content_start=content_start,
        content_end=brace_end,
        cursor=cursor,
        has_space_after_name=content[:1].isspace(),
        has_space_before_end=content[-1:].isspace(),
    )
