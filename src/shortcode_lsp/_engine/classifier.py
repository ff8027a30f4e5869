"""Turn a located directive and cursor into a description of what is being typed."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable

from shortcode_lsp.models import (
    CompletionKind,
    DirectiveKind,
    DirectiveSpec,
    ParsedContext,
    RawContext,
)

# Compiled regex patterns for performance
_re_attribute_value = re.compile(r"(?:^|(?<=\s))([\w-]+)=(\S*)$")
_re_last_token = re.compile(r"\S*$")

PrimaryPredicate = Callable[[str], bool]


def used_attributes(content: str, names: Iterable[str]) -> set[str]:
    """Return the attribute names already assigned (``name=``) in ``content``.

    Only whole tokens count: ``siz`` never registers ``size`` and
    ``fullsize=`` never registers ``size``.
    """
    used = set()
    for name in names:
        if re.search(r"(?:^|(?<=\s))" + re.escape(name) + "=", content):
            used.add(name)
    return used


def has_primary_value(
    content: str, spec: DirectiveSpec, multi_word_values: Iterable[str] = ()
) -> bool:
    """Check whether the positional argument of ``spec`` is already complete.

    ``content`` is the directive text before the cursor with leading
    whitespace removed. A token counts once whitespace follows it, unless
    one of ``multi_word_values`` continues with it (``brands github``).
    """
    if not spec.arguments:
        return False

    tokens = content.split()
    if not content[-1:].isspace():
        # The token under the cursor is still being typed
        tokens = tokens[:-1]
    tokens = [token for token in tokens if "=" not in token]
    if not tokens or tokens[0] in spec.get_attribute_names():
        return False

    typed = " ".join(tokens).lower() + " "
    return not any(value.lower().startswith(typed) for value in multi_word_values)


def _last_token(text: str) -> str:
    match = _re_last_token.search(text)
    return match.group(0) if match else ""


def classify(
    raw: RawContext,
    line: str,
    spec: DirectiveSpec,
    has_primary: PrimaryPredicate | None = None,
) -> ParsedContext:
    """Classify the cursor position inside a located directive.

    States are tried in order: attribute value (``name=partial``), attribute
    name after a complete primary value, primary value, and attribute name
    for directives without positional arguments.
    """
    cursor = raw.cursor
    content_before_cursor = line[raw.content_start : cursor]
    stripped_before_cursor = content_before_cursor.lstrip()
    nothing_typed = stripped_before_cursor.strip() == ""

    base = {
        "full_content": raw.full_content,
        "content_start": raw.content_start,
        "cursor": cursor,
        "has_space_before_end": raw.has_space_before_end,
        "directive_kind": raw.kind,
    }

    if has_primary is None:
        has_primary = lambda content: has_primary_value(content, spec)  # noqa: E731

    value_match = _re_attribute_value.search(content_before_cursor)
    if value_match:
        partial = value_match.group(2)
        quote = ""
        if partial[:1] in ("'", '"'):
            quote, partial = partial[0], partial[1:]
        context = ParsedContext(
            **base,
            completion_kind=CompletionKind.ATTRIBUTE_VALUE,
            typed_text=partial,
            token_start=cursor - len(partial),
            needs_leading_space=False,
            attribute_name=value_match.group(1),
            quote=quote,
            quote_closed=bool(quote) and line[cursor : cursor + 1] == quote,
        )
    elif spec.arguments and has_primary(stripped_before_cursor):
        typed_text = _last_token(content_before_cursor)
        context = ParsedContext(
            **base,
            completion_kind=CompletionKind.ATTRIBUTE_NAME,
            typed_text=typed_text,
            token_start=cursor - len(typed_text),
            needs_leading_space=False,
        )
    elif spec.arguments:
        context = ParsedContext(
            **base,
            completion_kind=CompletionKind.PRIMARY,
            typed_text=stripped_before_cursor,
            token_start=cursor - len(stripped_before_cursor),
            needs_leading_space=not raw.has_space_after_name and nothing_typed,
        )
    else:
        typed_text = _last_token(content_before_cursor)
        needs_leading_space = not raw.has_space_after_name and nothing_typed
        if raw.kind is DirectiveKind.SPAN and typed_text[:1] in (".", "#"):
            # Right after a class or id token: start a new attribute
            typed_text = ""
            needs_leading_space = True
        context = ParsedContext(
            **base,
            completion_kind=CompletionKind.ATTRIBUTE_NAME,
            typed_text=typed_text,
            token_start=cursor - len(typed_text),
            needs_leading_space=needs_leading_space,
        )

    assert context.token_start <= cursor, "token must start at or before the cursor"
    assert line[context.token_start : cursor] == context.typed_text, "typed text must end here"
    return context
