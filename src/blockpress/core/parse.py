"""File discovery and HTML document parsing"""

import hashlib
from pathlib import Path

from bs4 import BeautifulSoup

from blockpress.core.errors import DocumentError
from blockpress.core.models import ParsedPage
from blockpress.core.utils.source import element_end, line_offsets, source_offset, start_tag_end, strip_span


HTML_EXTENSIONS = {'.html', '.htm'}
PARSER = 'html.parser'      # the only bs4 backend that records source positions


def make_soup(markup: str) -> BeautifulSoup:
    """Build a fresh tree for markup; trees are never shared between calls."""
    return BeautifulSoup(markup, PARSER)


def discover_files(path: Path) -> list[Path]:
    """Return sorted .html files directly under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix.lower() in HTML_EXTENSIONS else []
    return sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in HTML_EXTENSIONS)


def source_hash(raw: str) -> str:
    """Hex SHA-256 of the raw page source; an unchanged hash skips re-import."""
    return hashlib.sha256(raw.encode('utf-8')).hexdigest()


def _default_title(slug: str) -> str:
    return slug[:1].upper() + slug[1:]


def _head_content(raw: str, soup: BeautifulSoup) -> str:
    """Inner source markup of <head>, sliced from the original text."""
    head = soup.head
    if head is None:
        return ''
    offsets = line_offsets(raw)
    start = source_offset(head, offsets)
    if start is None:
        return head.decode_contents().strip()
    inner_start = start_tag_end(raw, start)
    body_start = source_offset(soup.body, offsets) if soup.body is not None else None
    end = element_end(raw, 'head', start, body_start or len(raw))
    if end <= inner_start:
        # unclosed <head>
        return head.decode_contents().strip()
    s, e = strip_span(raw, inner_start, raw.rfind('</', inner_start, end))
    return raw[s:e]


def parse_html(raw: str, slug: str, path: Path | None = None) -> ParsedPage:
    """Parse one HTML document. Raises DocumentError when it has no <body>."""
    soup = make_soup(raw)
    if soup.body is None:
        raise DocumentError(f"No body element found in {path or slug}", path=str(path) if path else None)

    title_tag = soup.title
    title = title_tag.get_text().strip() if title_tag is not None else ''
    return ParsedPage(
        path=path,
        slug=slug,
        raw_html=raw,
        hash=source_hash(raw),
        title=title or _default_title(slug),
        head_content=_head_content(raw, soup),
        soup=soup,
    )


def parse_file(path: Path) -> ParsedPage:
    """Parse a single .html file; its basename without extension becomes the slug."""
    try:
        raw = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise DocumentError(f"Cannot decode {path} as UTF-8: {e}", path=str(path)) from e
    return parse_html(raw, path.stem, path)
