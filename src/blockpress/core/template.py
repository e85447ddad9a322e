"""Placeholder template building for extracted blocks.

Each field's value is cut out of the block's source markup and replaced by a
{{field_name}} token. The field keeps the exact source text that was cut, so
substituting the values back reproduces the source byte for byte. Text values
that hold entities or inline markup are therefore stored as markup.

Values are located by position rather than by a global first-match: the
search for a field starts at its own element (the start tag for attribute
fields, just after it for text fields), stops at the element's close tag or
the next editable element that is not nested inside it, and never starts
before the end of the previous substitution. Two fields holding the same
literal text therefore each bind to their own element. A text value that is
not found verbatim falls back to the element's whole inner markup.
"""

import html
import logging
import re

from bs4 import Tag

from blockpress.core.errors import TemplateError
from blockpress.core.fields import DEFAULT_EDITABLE_ATTR, VALUE_ATTRS, find_editables
from blockpress.core.models import StagedField
from blockpress.core.parse import make_soup
from blockpress.core.utils.source import inner_end, line_offsets, source_offset, start_tag_end, strip_span


logger = logging.getLogger(__name__)

TAG_NAME_RE = re.compile(r'<([a-zA-Z][^\s/>]*)')


def placeholder(field_name: str) -> str:
    return '{{' + field_name + '}}'


def _attr_value_span(markup: str, attr: str, start: int, end: int) -> tuple[int, int] | None:
    """Span of attr's value inside the start tag markup[start:end], quotes excluded."""
    attr_re = re.compile(
        rf'''\s{re.escape(attr)}\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'>]+))''',
        re.IGNORECASE,
    )
    m = attr_re.search(markup, start, end)
    if m is None:
        return None
    group = next(g for g in ('dq', 'sq', 'bare') if m.group(g) is not None)
    return m.span(group)


def _text_span(markup: str, value: str, start: int, bound: int) -> tuple[int, int] | None:
    """Earliest literal (or HTML-escaped) occurrence of value in markup[start:bound]."""
    if not value:
        return start, start
    hits = []
    for candidate in dict.fromkeys((value, html.escape(value, quote=False))):
        pos = markup.find(candidate, start, bound)
        if pos != -1:
            hits.append((pos, pos + len(candidate)))
    return min(hits) if hits else None


def _inner_span(markup: str, start: int) -> tuple[int, int] | None:
    """Whitespace-trimmed span between the element's start tag and its close tag."""
    m = TAG_NAME_RE.match(markup, start)
    if m is None:
        return None
    end = inner_end(markup, m.group(1), start)
    if end is None:
        return None
    return strip_span(markup, start_tag_end(markup, start), end)


def _search_bound(elements: list[Tag], index: int, starts: list[int | None], default: int) -> int:
    """Start of the next editable element that is not a descendant of elements[index]."""
    current = elements[index]
    for el, start in zip(elements[index + 1:], starts[index + 1:]):
        if start is not None and current not in el.parents:
            return start
    return default


def locate_value(
    markup: str,
    field: StagedField,
    start: int,
    bound: int,
    cursor: int = 0,
    whole_inner: bool = True,
    ) -> tuple[int, int] | None:
    """Source span holding field's value for the element starting at start, or None.

    Text values are searched from the later of the end of the start tag and
    cursor, up to the element's close tag. With whole_inner, a text value not
    found there resolves to the element's entire inner markup.
    """
    tag_end = start_tag_end(markup, start)
    attr = VALUE_ATTRS.get(field.field_type)
    if attr:
        return _attr_value_span(markup, attr, start, tag_end)

    inner = _inner_span(markup, start)
    text_start = max(tag_end, cursor)
    if inner is not None:
        bound = min(bound, inner[1])
    span = _text_span(markup, field.value, text_start, max(bound, text_start))
    if span is None and whole_inner and inner is not None and inner[0] >= cursor:
        logger.debug("Field %r not found verbatim; using the element's inner markup", field.field_name)
        return inner
    return span


def build_template(
    raw_html: str,
    fields: list[StagedField],
    editable_attr: str = DEFAULT_EDITABLE_ATTR,
    ) -> tuple[str, list[StagedField]]:
    """Return (template, fields) for a block's source markup.

    fields must be the output of extract_fields for the same markup. Each
    returned field's value is the exact source text its token replaced, so
    rendering the template with these values reproduces raw_html. A field
    that cannot be located (an unclosed element, or a container of other
    editable elements whose text is not found verbatim) is left literal in
    the template and dropped from the returned fields, with a warning.
    """
    elements = find_editables(make_soup(raw_html), editable_attr)
    if len(elements) != len(fields):
        raise TemplateError(
            f"Block has {len(elements)} editable elements but {len(fields)} fields",
            details={"fields": [f.field_name for f in fields]},
        )

    offsets = line_offsets(raw_html)
    starts = [source_offset(el, offsets) for el in elements]
    spans: list[tuple[int, int, str]] = []
    bound_fields: list[StagedField] = []
    cursor = 0

    for i, field in enumerate(fields):
        if starts[i] is None:
            logger.warning("No source position for field %r; left literal", field.field_name)
            continue
        bound = _search_bound(elements, i, starts, len(raw_html))
        has_nested = any(elements[i] in el.parents for el in elements[i + 1:])
        span = locate_value(raw_html, field, starts[i], bound, cursor, whole_inner=not has_nested)
        if span is None:
            logger.warning("Value of field %r not found in block markup; left literal", field.field_name)
            continue
        if span[0] < cursor:
            logger.warning("Field %r overlaps a previous field; left literal", field.field_name)
            continue
        spans.append((span[0], span[1], field.field_name))
        bound_fields.append(field.model_copy(update={'value': raw_html[span[0]:span[1]]}))
        cursor = span[1]

    parts: list[str] = []
    last = 0
    for s, e, name in spans:
        parts.append(raw_html[last:s])
        parts.append(placeholder(name))
        last = e
    parts.append(raw_html[last:])
    return ''.join(parts), bound_fields
