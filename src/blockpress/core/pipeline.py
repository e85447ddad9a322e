"""Pipeline step functions: extract, publish, commit, and export orchestration"""

import logging
from datetime import datetime
from pathlib import Path

from sqlmodel import Session

from blockpress.core.assets import publish_assets
from blockpress.core.errors import BlockpressError
from blockpress.core.extract import extract_page
from blockpress.core.fields import DEFAULT_EDITABLE_ATTR
from blockpress.core.models import StagedPage
from blockpress.core.parse import discover_files, parse_file
from blockpress.core.render import render
from blockpress.crud.models import Page
from blockpress.crud.pages import commit_page, page_view


logger = logging.getLogger(__name__)


def run_extract(
    path: str,
    staging_dir: Path,
    editable_attr: str = DEFAULT_EDITABLE_ATTR,
    ) -> tuple[list[tuple[Path, Path]], list[tuple[Path, str]]]:
    """Parse each .html file under path and write StagedPage JSON to staging_dir.

    A file that fails (e.g. no <body>) is reported and skipped; the rest continue.
    Returns (results, failures): (source_path, staging_file) and (source_path, error) pairs.
    """
    staging_dir.mkdir(parents=True, exist_ok=True)
    results, failures = [], []
    for p in discover_files(Path(path)):
        try:
            staged = extract_page(parse_file(p), editable_attr)
        except BlockpressError as e:
            logger.error("Failed to extract %s: %s", p, e)
            failures.append((p, str(e)))
            continue
        out_file = staging_dir / f"{staged.slug}.json"
        out_file.write_text(staged.model_dump_json(indent=2), encoding='utf-8')
        logger.info("Extracted %s: %d block(s)", p, len(staged.blocks))
        results.append((p, out_file))
    return results, failures


def run_publish(path: str, slugs: list[str], public_dir: Path) -> list[Path]:
    """Publish styles.css and assets/ from the import directory once per slug."""
    src = Path(path)
    import_dir = src if src.is_dir() else src.parent
    written = []
    for slug in slugs:
        written.extend(publish_assets(import_dir, slug, public_dir))
    return written


def run_commit(
    engine,
    staging_dir: Path,
    force: bool = False,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Read staged StagedPage JSON and commit to the database in one transaction.

    Returns (counts, changes) where changes is a list of (status, slug) for
    created/updated pages. Returns ({}, []) when staging_dir is empty.
    """
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    if not files:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for f in files:
            staged = StagedPage.model_validate_json(f.read_text(encoding='utf-8'))
            page, status = commit_page(session, staged, committed_at, force=force)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, page.slug))
        session.commit()
    return counts, changes


def run_export(
    session: Session,
    pages: list[Page],
    output_dir: Path,
    standalone: bool = True,
    ) -> list[tuple[str, Path]]:
    """Render pages to output_dir/<slug>.html using an open session. Returns (slug, path) pairs."""
    output_dir.mkdir(parents=True, exist_ok=True)
    results = []
    for page in pages:
        out = output_dir / f"{page.slug}.html"
        out.write_text(render(page_view(session, page), standalone=standalone), encoding='utf-8')
        results.append((page.slug, out))
    return results
