"""Block segmentation: one ordered pass over marker comments and body children.

Two kinds of boundary are collected as source offsets into the raw document:

  manual  <!-- BLOCK:name[:draggable] --> ... <!-- /BLOCK:name -->
  auto    each element that is a direct child of <body>

Both go into a single list sorted by start offset and are swept once. Where
two boundaries overlap the manual one is kept, so a marker pair always wins
over the element(s) it touches.
"""

import logging
import re

from bs4 import Tag

from blockpress.core.models import ParsedPage, Segment
from blockpress.core.utils.source import element_end, line_offsets, source_offset, start_tag_end, strip_span
from blockpress.crud.models import ProvenanceEnum


logger = logging.getLogger(__name__)

MARKER_OPEN_RE = re.compile(r'<!--\s*BLOCK:(\w+)(?::(\w+))?\s*-->')
MARKER_ANY_RE = re.compile(r'<!--\s*/?BLOCK\b.*?-->', re.DOTALL)
BODY_CLOSE_RE = re.compile(r'</body\s*>', re.IGNORECASE)
CLASS_TOKEN_RE = re.compile(r'\w+')

DRAGGABLE_MODIFIER = 'draggable'
NAMED_TAG_TYPES = {
    'nav':    'navigation',
    'footer': 'footer',
    'header': 'header',
}


def _close_marker_re(name: str) -> re.Pattern:
    return re.compile(rf'<!--\s*/BLOCK:{re.escape(name)}\s*-->')


def _body_span(doc: ParsedPage, offsets: list[int]) -> tuple[int, int]:
    """Offsets of the body's content: just past <body ...> up to the last </body>."""
    markup = doc.raw_html
    body_start = source_offset(doc.soup.body, offsets)
    inner_start = start_tag_end(markup, body_start) if body_start is not None else 0
    end = len(markup)
    for m in BODY_CLOSE_RE.finditer(markup, inner_start):
        end = m.start()
    return inner_start, end


def find_marker_segments(markup: str, start: int, end: int) -> list[Segment]:
    """Scan markup[start:end] for marker pairs. Unclosed, nested or malformed markers are ignored."""
    segments: list[Segment] = []
    used: set[int] = set()
    cursor = start

    for m in MARKER_OPEN_RE.finditer(markup, start, end):
        if m.start() < cursor:
            continue
        name, modifier = m.group(1), m.group(2)
        close = _close_marker_re(name).search(markup, m.end(), end)
        if close is None:
            continue
        if modifier and modifier != DRAGGABLE_MODIFIER:
            logger.warning("Unknown modifier %r on BLOCK:%s marker; block stays fixed", modifier, name)
        s, e = strip_span(markup, m.end(), close.start())
        segments.append(Segment(
            type=name,
            start=s,
            end=e,
            draggable=modifier == DRAGGABLE_MODIFIER,
            provenance=ProvenanceEnum.manual,
        ))
        used.update((m.start(), close.start()))
        cursor = close.end()

    for m in MARKER_ANY_RE.finditer(markup, start, end):
        if m.start() not in used:
            logger.warning("Ignoring unmatched or malformed block marker %r", m.group(0))
    return segments


def auto_block_type(tag: Tag, counter: int) -> str:
    """Derive a block type from a body child element."""
    name = tag.name.lower()
    if name == 'section':
        if tag.get('id'):
            return tag['id']
        classes = tag.get('class')
        if classes:
            joined = classes if isinstance(classes, str) else ' '.join(classes)
            m = CLASS_TOKEN_RE.search(joined)
            if m:
                return m.group(0)
        return f'section-{counter}'
    if name in NAMED_TAG_TYPES:
        return NAMED_TAG_TYPES[name]
    return f'{name}-{counter}'


def find_auto_segments(
    doc: ParsedPage,
    offsets: list[int],
    body_end: int,
    claimed: list[Segment] = (),
    ) -> list[Segment]:
    """One segment per element child of <body> not overlapping a claimed span, in document order.

    The positional counter only advances for children that become auto blocks.
    """
    markup = doc.raw_html
    children = [c for c in doc.soup.body.children if isinstance(c, Tag)]
    starts = [source_offset(c, offsets) for c in children]

    segments: list[Segment] = []
    counter = 1
    for i, child in enumerate(children):
        start = starts[i]
        if start is None:
            continue
        bound = next((s for s in starts[i + 1:] if s is not None), body_end)
        end = element_end(markup, child.name, start, bound)
        if any(start < c.end and c.start < end for c in claimed):
            continue
        segments.append(Segment(
            type=auto_block_type(child, counter),
            start=start,
            end=end,
            draggable=False,
            provenance=ProvenanceEnum.auto,
        ))
        counter += 1
    return segments


def _overlaps(a: Segment, b: Segment) -> bool:
    return a.start < b.end and b.start < a.end


def resolve_boundaries(segments: list[Segment]) -> list[Segment]:
    """Sort by start offset and sweep once; on overlap the manual boundary wins."""
    ordered = sorted(segments, key=lambda s: (s.start, s.provenance != ProvenanceEnum.manual))
    kept: list[Segment] = []
    for seg in ordered:
        if kept and _overlaps(kept[-1], seg):
            last = kept[-1]
            if seg.provenance == ProvenanceEnum.manual and last.provenance == ProvenanceEnum.auto:
                logger.debug("Manual block %s replaces auto block %s", seg.type, last.type)
                kept[-1] = seg
            else:
                logger.debug("Dropping %s block %s overlapped by %s", seg.provenance.value, seg.type, last.type)
            continue
        kept.append(seg)
    return kept


def _unique_types(segments: list[Segment]) -> None:
    """Suffix repeated block types with -2, -3, ... in document order, skipping names already taken."""
    taken: set[str] = set()
    next_suffix: dict[str, int] = {}
    for seg in segments:
        base, name = seg.type, seg.type
        n = next_suffix.get(base, 1)
        while name in taken:
            n += 1
            name = f'{base}-{n}'
        next_suffix[base] = n
        taken.add(name)
        seg.type = name


def segment(doc: ParsedPage, editable_attr: str = 'data-editable') -> list[Segment]:
    """Split a parsed document into ordered block segments.

    Segments without any editable element are dropped unless draggable;
    a draggable one is kept with no fields so it can still be reordered.
    """
    markup = doc.raw_html
    offsets = line_offsets(markup)
    body_start, body_end = _body_span(doc, offsets)

    manual = find_marker_segments(markup, body_start, body_end)
    boundaries = resolve_boundaries(manual + find_auto_segments(doc, offsets, body_end, claimed=manual))

    editable_offsets = [
        off for off in (source_offset(t, offsets) for t in doc.soup.body.find_all(attrs={editable_attr: True}))
        if off is not None
    ]

    segments: list[Segment] = []
    for seg in boundaries:
        editable = any(seg.start <= off < seg.end for off in editable_offsets)
        if not editable and not seg.draggable:
            logger.info("Skipping block %r: no editable elements and not draggable", seg.type)
            continue
        seg.raw_html = markup[seg.start:seg.end]
        segments.append(seg)

    _unique_types(segments)
    logger.debug("Detected blocks in %s: %s", doc.slug, [(s.type, s.draggable) for s in segments])
    return segments
