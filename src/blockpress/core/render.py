"""Render-time page assembly: token substitution, asset rewriting, document shell"""

import logging
import re
from collections.abc import Iterable

from blockpress.core.models import BlockView, PageView


logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r'\{\{([^{}]+)\}\}')
STYLESHEET_RE = re.compile(r'''href=(["'])(?:\./)?styles\.css\1''')
ATTR_ASSET_RE = re.compile(r'''\b(src|href)=(["'])(?:\./)?assets/''')
CSS_URL_RE = re.compile(r'''url\(\s*(["']?)(?:\./)?assets/''')
STRAY_ASSET_RE = re.compile(r'(?<![\w/])assets/')

EMPTY_PAGE_HTML = '<div>No content blocks found</div>'

DOCUMENT_SHELL = """<!DOCTYPE html>
<html>
<head>
{head}
</head>
<body>
{body}
</body>
</html>"""


def rewrite_assets(markup: str, slug: str) -> str:
    """Point relative asset references at the page's published locations.

    src/href "assets/..." and url(assets/...) go to /assets/<slug>/...,
    href="styles.css" goes to /css/<slug>.css.
    """
    markup = STYLESHEET_RE.sub(lambda m: f'href={m.group(1)}/css/{slug}.css{m.group(1)}', markup)
    markup = ATTR_ASSET_RE.sub(lambda m: f'{m.group(1)}={m.group(2)}/assets/{slug}/', markup)
    markup = CSS_URL_RE.sub(lambda m: f'url({m.group(1)}/assets/{slug}/', markup)
    # tokens still present came from field values; fix any asset path they carry
    return PLACEHOLDER_RE.sub(
        lambda m: STRAY_ASSET_RE.sub(f'/assets/{slug}/', m.group(1)) if 'assets/' in m.group(1) else m.group(0),
        markup,
    )


def render_block(block: BlockView) -> str:
    """Substitute every {{field_name}} token; unknown tokens become '' and are logged."""
    values = {f.field_name: f.value for f in block.fields}

    def _sub(m: re.Match) -> str:
        name = m.group(1)
        if name not in values:
            logger.warning("Block %r: no field for placeholder %r; rendering empty", block.type, name)
            return ''
        return values[name]

    return PLACEHOLDER_RE.sub(_sub, block.html_template)


def render_body(blocks: Iterable[BlockView]) -> str:
    """Render blocks in ascending order, each followed by a newline."""
    ordered = sorted(blocks, key=lambda b: b.order)
    if not ordered:
        return EMPTY_PAGE_HTML
    return ''.join(render_block(b) + '\n' for b in ordered)


def render(page: PageView, standalone: bool = False) -> str:
    """Assemble a page: the body fragment alone, or a full document with its head.

    Pure function of the page view; nothing is cached or mutated between calls.
    """
    body = rewrite_assets(render_body(page.blocks), page.slug)
    if not standalone:
        return body
    head = rewrite_assets(page.head_content or '', page.slug)
    return DOCUMENT_SHELL.format(head=head, body=body)
