"""Unit tests for core/extract.py"""

from blockpress.core.extract import extract_page
from blockpress.core.models import StagedPage
from blockpress.core.parse import parse_html
from blockpress.crud.models import FieldTypeEnum, ProvenanceEnum


def test_extract_page_blocks(sample_doc):
    staged = extract_page(sample_doc)
    assert isinstance(staged, StagedPage)
    assert staged.slug == "home"
    assert staged.title == "Acme Home"
    assert staged.hash == sample_doc.hash
    assert [(b.type, b.draggable, b.provenance) for b in staged.blocks] == [
        ("navigation", False, ProvenanceEnum.auto),
        ("hero", False, ProvenanceEnum.auto),
        ("features", True, ProvenanceEnum.manual),
        ("gallery", True, ProvenanceEnum.manual),
        ("footer", False, ProvenanceEnum.auto),
    ]


def test_extract_page_fields(sample_doc):
    staged = extract_page(sample_doc)
    fields = {b.type: [(f.field_name, f.field_type, f.value) for f in b.fields] for b in staged.blocks}
    assert fields == {
        "navigation": [("home link", FieldTypeEnum.link, "/")],
        "hero": [
            ("hero-1", FieldTypeEnum.text, "Welcome"),
            ("intro text", FieldTypeEnum.textarea, "We build things."),
            ("hero image", FieldTypeEnum.image, "assets/hero.png"),
        ],
        "features": [("features-1", FieldTypeEnum.text, "Features")],
        "gallery": [],
        "footer": [("footer-1", FieldTypeEnum.textarea, "© Acme")],
    }


def test_extract_page_templates(sample_doc):
    blocks = {b.type: b for b in extract_page(sample_doc).blocks}
    assert blocks["navigation"].html_template == (
        '<nav class="top-nav">\n    <a href="{{home link}}" data-editable="home_link">Home</a>\n  </nav>'
    )
    assert '<img src="{{hero image}}" data-editable="hero_image">' in blocks["hero"].html_template
    assert "<h1 data-editable>{{hero-1}}</h1>" in blocks["hero"].html_template
    assert blocks["gallery"].html_template == '<section class="gallery"><img src="assets/a.png"></section>'
    assert blocks["footer"].html_template == "<footer>\n    <p data-editable>{{footer-1}}</p>\n  </footer>"


def test_extract_page_footer_link():
    doc = parse_html(
        '<html><body><footer><a data-editable="contact_link" href="/contact">Contact</a></footer></body></html>',
        "contact",
    )
    staged = extract_page(doc)
    assert len(staged.blocks) == 1
    block = staged.blocks[0]
    assert (block.type, block.draggable, block.provenance) == ("footer", False, ProvenanceEnum.auto)
    assert [(f.field_name, f.field_type, f.value) for f in block.fields] == [
        ("contact link", FieldTypeEnum.link, "/contact"),
    ]


def test_extract_page_staging_json_roundtrip(sample_doc):
    staged = extract_page(sample_doc)
    assert StagedPage.model_validate_json(staged.model_dump_json()) == staged


def test_extract_page_reimport_same_structure(sample_html):
    first = extract_page(parse_html(sample_html, "home"))
    second = extract_page(parse_html(sample_html, "home"))
    assert [(b.type, [f.field_name for f in b.fields]) for b in first.blocks] == \
        [(b.type, [f.field_name for f in b.fields]) for b in second.blocks]


def test_extract_page_escaped_and_inline_text_render_back():
    body = (
        "<section><h2 data-editable>Fish &amp; Chips</h2>"
        "<p data-editable>Hello <b>world</b></p></section>"
    )
    staged = extract_page(parse_html(f"<html><body>{body}</body></html>", "menu"))
    block = staged.blocks[0]
    assert block.html_template == (
        "<section><h2 data-editable>{{section-1-1}}</h2><p data-editable>{{section-1-2}}</p></section>"
    )
    assert [f.value for f in block.fields] == ["Fish &amp; Chips", "Hello <b>world</b>"]
