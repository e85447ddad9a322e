"""Convert a ParsedPage into a StagedPage: segment, extract fields, build templates"""

from blockpress.core.fields import DEFAULT_EDITABLE_ATTR, extract_fields
from blockpress.core.models import ParsedPage, StagedBlock, StagedPage
from blockpress.core.segment import segment
from blockpress.core.template import build_template


def extract_page(parsed: ParsedPage, editable_attr: str = DEFAULT_EDITABLE_ATTR) -> StagedPage:
    """Run segmentation, field extraction and template building, strictly in that order."""
    blocks = []
    for seg in segment(parsed, editable_attr):
        fields = extract_fields(seg.raw_html, seg.type, editable_attr)
        template, fields = build_template(seg.raw_html, fields, editable_attr)
        blocks.append(StagedBlock(
            type=seg.type,
            draggable=seg.draggable,
            provenance=seg.provenance,
            html_template=template,
            fields=fields,
        ))

    return StagedPage(
        slug=parsed.slug,
        path=str(parsed.path) if parsed.path else parsed.slug,
        title=parsed.title,
        head_content=parsed.head_content,
        hash=parsed.hash,
        blocks=blocks,
    )
