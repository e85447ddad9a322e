"""Map parsed elements back to character offsets in their source markup.

Trees built with the ``html.parser`` backend record the line and column of
every start tag. These helpers turn that into absolute offsets so blocks and
field values can be sliced from the original text instead of re-serialized.
"""

import re

from bs4 import Tag


START_TAG_RE = re.compile(
    r"""<[a-zA-Z][^\s/>]*"""
    r"""(?:\s+[^\s"'=/>]+(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+))?)*"""
    r"""\s*/?>"""
)


def line_offsets(markup: str) -> list[int]:
    """Return the offset at which each line of markup starts."""
    offsets = [0]
    offsets.extend(i + 1 for i, ch in enumerate(markup) if ch == "\n")
    return offsets


def source_offset(tag: Tag, offsets: list[int]) -> int | None:
    """Absolute offset of tag's '<' in the markup it was parsed from, or None if unknown."""
    if tag.sourceline is None or tag.sourcepos is None:
        return None
    return offsets[tag.sourceline - 1] + tag.sourcepos


def start_tag_end(markup: str, start: int) -> int:
    """Offset just past the start tag beginning at start."""
    m = START_TAG_RE.match(markup, start)
    if m:
        return m.end()
    close = markup.find(">", start)
    return close + 1 if close != -1 else len(markup)


def element_end(markup: str, name: str, start: int, bound: int) -> int:
    """Offset just past the last </name> in markup[start:bound], else past the start tag.

    bound is where the next sibling starts, so the last matching close tag
    before it belongs to this element (or to a same-named descendant that
    this element encloses anyway).
    """
    close_re = re.compile(rf"</{re.escape(name)}\s*>", re.IGNORECASE)
    end = None
    for m in close_re.finditer(markup, start, bound):
        end = m.end()
    return end if end is not None else start_tag_end(markup, start)


def strip_span(markup: str, start: int, end: int) -> tuple[int, int]:
    """Shrink [start, end) so it excludes leading and trailing whitespace."""
    while start < end and markup[start].isspace():
        start += 1
    while end > start and markup[end - 1].isspace():
        end -= 1
    return start, end


def inner_end(markup: str, name: str, start: int) -> int | None:
    """Offset of the close tag matching the element whose start tag begins at start.

    Same-named elements nested inside are balanced out. None if the element
    is never closed.
    """
    tag_re = re.compile(rf"<(/?){re.escape(name)}(?=[\s/>])[^>]*>", re.IGNORECASE)
    depth = 0
    for m in tag_re.finditer(markup, start_tag_end(markup, start)):
        if m.group(1):
            if depth == 0:
                return m.start()
            depth -= 1
        elif not m.group(0).endswith("/>"):
            depth += 1
    return None
