"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional
from uuid import UUID

import typer
from pydantic import ValidationError
from sqlmodel import Session, SQLModel

from blockpress.config import Settings, load_config
from blockpress.core.errors import BatchUpdateError
from blockpress.core.models import BlockUpdate, PageUpdate
from blockpress.core.ordering import move_block
from blockpress.core.pipeline import run_commit, run_export, run_extract, run_publish
from blockpress.core.render import render
from blockpress.crud.database import init_db, make_engine
from blockpress.crud.models import Page
from blockpress.crud.pages import (
    apply_page_update,
    get_last_committed,
    get_page_by_slug,
    list_pages,
    page_view,
    set_published,
)
from blockpress.logger import setup_logger


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except (ValueError, ValidationError) as e:
        _fail(str(e))
    setup_logger(settings.log_level)
    return settings


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _require_page(session: Session, slug: str) -> Page:
    page = get_page_by_slug(session, slug)
    if page is None:
        _fail(f"No page with slug '{slug}'")
    return page


def _echo_extract(results: list, failures: list, staging_dir: Path) -> None:
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    for src, err in failures:
        typer.echo(f"  FAILED {src}: {err}", err=True)
    typer.echo(f"Extracted {len(results)} page(s) to {staging_dir}/")


def _echo_commit(counts: dict, changes: list) -> None:
    """Print per-page commit status and a summary line."""
    for status, slug in changes:
        typer.echo(f"  {status}: {slug}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def build_cmd(
    path: Annotated[str, typer.Argument(help="HTML file or directory to import")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory for rendered pages")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    public: Annotated[Optional[str], typer.Option("--public-dir", help="Published css/ and assets/ root")] = None,
    standalone: Annotated[Optional[bool], typer.Option("--standalone/--fragment", help="Full documents or body fragments")] = None,
    force: Annotated[bool, typer.Option("--force", help="Re-import pages whose source is unchanged")] = False,
    ):
    """Run the full pipeline: extract -> publish assets -> commit -> export."""
    settings = _settings(overrides={
        "output_dir": out, "staging_dir": staging, "public_dir": public, "standalone": standalone,
    })
    engine = _engine(settings)
    staging_dir = Path(settings.staging_dir)

    # --- extract ---
    results, failures = run_extract(path, staging_dir, settings.editable_attr)
    _echo_extract(results, failures, staging_dir)
    if failures and not results:
        _fail("No page could be extracted")

    # --- publish ---
    published = run_publish(path, [Path(src).stem for src, _ in results], Path(settings.public_dir))
    for dest in published:
        typer.echo(f"  published {dest}")

    # --- commit ---
    try:
        counts, changes = run_commit(engine, staging_dir, force=force)
    except Exception as e:
        _fail("Commit failed", e)
    _echo_commit(counts, changes)

    # --- export ---
    output_dir = Path(settings.output_dir)
    try:
        with Session(engine) as session:
            pages = [p for p in get_last_committed(session) if p.published]
            exported = run_export(session, pages, output_dir, settings.standalone)
    except Exception as e:
        _fail("Export failed", e)
    for slug, html_path in exported:
        typer.echo(f"  {slug} -> {html_path}")
    typer.echo(f"Exported {len(exported)} page(s) to {output_dir}/")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def extract_cmd(
    path: Annotated[str, typer.Argument(help="HTML file or directory to extract from")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    attr: Annotated[Optional[str], typer.Option("--editable-attr", help="Attribute flagging editable elements")] = None,
    ):
    """Segment pages into blocks, extract fields and build templates."""
    settings = _settings(overrides={"staging_dir": staging, "editable_attr": attr})
    staging_dir = Path(settings.staging_dir)
    results, failures = run_extract(path, staging_dir, settings.editable_attr)
    _echo_extract(results, failures, staging_dir)
    if failures and not results:
        raise typer.Exit(1)


def commit_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    force: Annotated[bool, typer.Option("--force", help="Re-import pages whose source is unchanged")] = False,
    ):
    """Replace each staged page's blocks and fields in the database."""
    settings = _settings(overrides={"staging_dir": staging})
    engine = _engine(settings)
    try:
        counts, changes = run_commit(engine, Path(settings.staging_dir), force=force)
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("Nothing staged. Run 'blockpress extract <path>' first.")
        raise typer.Exit(1)
    _echo_commit(counts, changes)


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    slug: Annotated[Optional[str], typer.Option("--slug", help="Export a single page")] = None,
    all_pages: Annotated[bool, typer.Option("--all", help="Export every published page")] = False,
    standalone: Annotated[Optional[bool], typer.Option("--standalone/--fragment", help="Full documents or body fragments")] = None,
    ):
    """Render pages to HTML files in the output dir."""
    settings = _settings(overrides={"output_dir": out, "standalone": standalone})
    engine = _engine(settings)
    output_dir = Path(settings.output_dir)

    try:
        with Session(engine) as session:
            if slug:
                pages = [_require_page(session, slug)]
                scope = f"slug '{slug}'"
            elif all_pages:
                pages = list_pages(session, published_only=True)
                scope = "all"
            else:
                pages = [p for p in get_last_committed(session) if p.published]
                scope = "last commit"

            if not pages:
                typer.echo(f"No pages found for scope: {scope}.")
                raise typer.Exit(1)  # intentional early exit; re-raised below

            results = run_export(session, pages, output_dir, settings.standalone)
    except typer.Exit:
        raise  # re-raise intentional exits before generic handler
    except Exception as e:
        _fail("Export failed", e)

    for page_slug, html_path in results:
        typer.echo(f"  {page_slug} -> {html_path}")
    typer.echo(f"Exported {len(results)} page(s) to {output_dir}/")


def list_cmd():
    """List imported pages with their block counts."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        pages = list_pages(session)
        if not pages:
            typer.echo("No pages found in database.")
            raise typer.Exit(1)
        for page in pages:
            view = page_view(session, page)
            state = "" if page.published else " [draft]"
            typer.echo(f"- /{page.slug} ({page.title}) - {len(view.blocks)} blocks{state}")


def fields_cmd(
    slug: Annotated[str, typer.Argument(help="Page slug")],
    ):
    """Show a page's blocks and their field values in render order."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        view = page_view(session, _require_page(session, slug))
    typer.echo(f"Page: {view.title}")
    for block in view.blocks:
        flag = "draggable" if block.draggable else "fixed"
        typer.echo(f"\n[{block.order}] {block.type} ({flag}) id={block.id}")
        for f in block.fields:
            typer.echo(f"  {f.field_name} ({f.display_name}, {f.field_type.value}): {f.value!r}  id={f.id}")


def render_cmd(
    slug: Annotated[str, typer.Argument(help="Page slug")],
    standalone: Annotated[Optional[bool], typer.Option("--standalone/--fragment", help="Full document or body fragment")] = None,
    ):
    """Print one rendered page to stdout."""
    settings = _settings(overrides={"standalone": standalone})
    engine = _engine(settings)
    with Session(engine) as session:
        view = page_view(session, _require_page(session, slug))
    typer.echo(render(view, standalone=settings.standalone))


def update_cmd(
    slug: Annotated[str, typer.Argument(help="Page slug")],
    batch: Annotated[Path, typer.Argument(exists=True, readable=True, help="JSON batch of block orders and field values")],
    ):
    """Apply an editing batch ({"blocks": [{id, order, fields: [{id, value, display_name}]}]}) atomically."""
    settings = _settings()
    engine = _engine(settings)
    try:
        update = PageUpdate.model_validate_json(batch.read_text(encoding='utf-8'))
    except ValidationError as e:
        _fail(f"Invalid batch file {batch}", e)

    with Session(engine) as session:
        page = _require_page(session, slug)
        try:
            apply_page_update(session, page, update)
        except BatchUpdateError as e:
            _fail(f"Update rejected (block {e.block_id})", e)
    typer.echo(f"Updated {len(update.blocks)} block(s) on {slug}")


def move_cmd(
    slug: Annotated[str, typer.Argument(help="Page slug")],
    block_id: Annotated[str, typer.Argument(help="Id of the block to move")],
    direction: Annotated[str, typer.Argument(help="up or down")],
    ):
    """Move a draggable block one step past an adjacent draggable block."""
    if direction not in ("up", "down"):
        _fail(f"Direction must be 'up' or 'down', got '{direction}'")
    try:
        target = UUID(block_id)
    except ValueError as e:
        _fail(f"Invalid block id '{block_id}'", e)

    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        page = _require_page(session, slug)
        view = page_view(session, page)
        moved = move_block(view.blocks, target, direction)
        if [b.id for b in moved] == [b.id for b in view.blocks]:
            _fail(f"Block {block_id} cannot move {direction}")
        try:
            apply_page_update(session, page, PageUpdate(blocks=[BlockUpdate(id=b.id, order=b.order) for b in moved]))
        except BatchUpdateError as e:
            _fail(f"Move rejected (block {e.block_id})", e)
    typer.echo(f"Moved {block_id} {direction}")


def publish_cmd(
    slug: Annotated[str, typer.Argument(help="Page slug")],
    unpublish: Annotated[bool, typer.Option("--unpublish", help="Hide the page from exports")] = False,
    ):
    """Mark a page published (or unpublished)."""
    settings = _settings()
    engine = _engine(settings)
    with Session(engine) as session:
        page = set_published(session, _require_page(session, slug), not unpublish)
        state = "published" if page.published else "unpublished"
    typer.echo(f"{slug} {state}")
