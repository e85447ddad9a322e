"""Editable-element discovery, field naming and type inference"""

import logging
import re

from bs4 import BeautifulSoup, Tag

from blockpress.core.models import StagedField
from blockpress.core.parse import make_soup
from blockpress.crud.models import FieldTypeEnum


logger = logging.getLogger(__name__)

DEFAULT_EDITABLE_ATTR = 'data-editable'
BRACES_RE = re.compile(r'[{}]')

TAG_FIELD_TYPES: dict[str, FieldTypeEnum] = {
    'img':  FieldTypeEnum.image,
    'a':    FieldTypeEnum.link,
    'p':    FieldTypeEnum.textarea,
    'div':  FieldTypeEnum.textarea,
}

# attribute holding the value for attribute-backed field types
VALUE_ATTRS: dict[FieldTypeEnum, str] = {
    FieldTypeEnum.image: 'src',
    FieldTypeEnum.link:  'href',
}


def find_editables(soup: BeautifulSoup, editable_attr: str = DEFAULT_EDITABLE_ATTR) -> list[Tag]:
    """All elements carrying editable_attr, at any depth, in document order."""
    return soup.find_all(attrs={editable_attr: True})


def detect_field_type(tag: Tag) -> FieldTypeEnum:
    """Infer the field type from the tag name; anything unknown is plain text."""
    return TAG_FIELD_TYPES.get(tag.name.lower(), FieldTypeEnum.text)


def display_name(field_name: str) -> str:
    """'main_title' -> 'Main Title', 'hero-1' -> 'Hero 1'."""
    spaced = re.sub(r'[-_]', ' ', field_name)
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), spaced)


def field_name(explicit: str | None, block_type: str, counter: int) -> str:
    """Explicit attribute value with underscores as spaces, else '{block_type}-{counter}'.

    Braces are removed so the name always forms a resolvable {{token}}.
    """
    name = explicit.replace('_', ' ') if explicit else ''
    if BRACES_RE.search(name):
        cleaned = BRACES_RE.sub('', name)
        logger.warning("Field name %r contains braces; using %r", name, cleaned)
        name = cleaned
    if name.strip():
        return name
    return BRACES_RE.sub('', f'{block_type}-{counter}')


def field_value(tag: Tag, field_type: FieldTypeEnum) -> str:
    attr = VALUE_ATTRS.get(field_type)
    if attr:
        return tag.get(attr) or ''
    return tag.get_text().strip()


def extract_fields(raw_html: str, block_type: str, editable_attr: str = DEFAULT_EDITABLE_ATTR) -> list[StagedField]:
    """Extract one StagedField per editable element of a block, in document order.

    The counter used for synthesized names advances on every editable element,
    named or not. A repeated explicit name within the block is suffixed with
    '-{counter}' so each template token maps to exactly one field.
    """
    fields: list[StagedField] = []
    seen: set[str] = set()

    for counter, tag in enumerate(find_editables(make_soup(raw_html), editable_attr), start=1):
        name = field_name(tag.get(editable_attr), block_type, counter)
        if name in seen:
            renamed = f'{name}-{counter}'
            logger.warning("Duplicate field name %r in block %r; renamed to %r", name, block_type, renamed)
            name = renamed
        seen.add(name)

        ftype = detect_field_type(tag)
        fields.append(StagedField(
            field_name=name,
            display_name=display_name(name),
            field_type=ftype,
            value=field_value(tag, ftype),
        ))
    return fields
