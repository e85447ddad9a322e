"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session

from blockpress.core.models import StagedBlock, StagedField, StagedPage
from blockpress.core.parse import source_hash
from blockpress.crud.pages import commit_page


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test."""
    with Session(engine) as s:
        yield s


def make_staged(slug: str = "home", source: str = "v1") -> StagedPage:
    """Staged page: fixed header, two draggable blocks, fixed footer."""
    return StagedPage(
        slug=slug,
        path=f"site/{slug}.html",
        title="Home",
        head_content="<title>Home</title>",
        hash=source_hash(source),
        blocks=[
            StagedBlock(
                type="header",
                html_template="<header><h1>{{title}}</h1></header>",
                fields=[StagedField(field_name="title", display_name="Title", value="Welcome")],
            ),
            StagedBlock(
                type="features", draggable=True, provenance="manual",
                html_template="<section><p>{{features-1}}</p></section>",
                fields=[StagedField(field_name="features-1", display_name="Features 1",
                                    field_type="textarea", value="Fast")],
            ),
            StagedBlock(
                type="gallery", draggable=True, provenance="manual",
                html_template="<section>gallery</section>",
            ),
            StagedBlock(
                type="footer",
                html_template='<footer><a href="{{contact link}}">Contact</a></footer>',
                fields=[StagedField(field_name="contact link", display_name="Contact Link",
                                    field_type="link", value="/contact")],
            ),
        ],
    )


@pytest.fixture(name="staged")
def staged_fixture():
    return make_staged()


@pytest.fixture(name="page")
def page_fixture(session, staged):
    """The staged page committed to the database."""
    page, _ = commit_page(session, staged)
    session.commit()
    return page


@pytest.fixture(name="make_staged")
def make_staged_fixture():
    """Factory for staged pages with a given slug and source text."""
    return make_staged
