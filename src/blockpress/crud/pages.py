"""Page persistence: upsert by slug, block replacement, views and atomic edit batches"""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from blockpress.core.errors import BatchUpdateError
from blockpress.core.models import BlockView, FieldView, PageUpdate, PageView, StagedPage
from blockpress.core.ordering import check_reorder
from blockpress.crud.models import Block, BlockField, Page


logger = logging.getLogger(__name__)


def get_page_by_slug(session: Session, slug: str) -> Page | None:
    """Return the Page with the given slug, or None if not found."""
    return session.exec(select(Page).where(Page.slug == slug)).one_or_none()


def list_pages(session: Session, published_only: bool = False) -> list[Page]:
    """Return all pages ordered by slug."""
    stmt = select(Page).order_by(Page.slug)
    if published_only:
        stmt = stmt.where(Page.published == True)  # noqa: E712
    return list(session.exec(stmt).all())


def get_last_committed(session: Session) -> list[Page]:
    """Return pages from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Page.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(select(Page).where(Page.committed_at == max_ts).order_by(Page.slug)).all())


def get_blocks(session: Session, page_id) -> list[Block]:
    """Blocks of a page in render order."""
    return list(session.exec(select(Block).where(Block.page_id == page_id).order_by(Block.order)).all())


def get_fields(session: Session, block_id) -> list[BlockField]:
    """Fields of a block in document order."""
    return list(session.exec(
        select(BlockField).where(BlockField.block_id == block_id).order_by(BlockField.position)
    ).all())


def page_view(session: Session, page: Page) -> PageView:
    """Detached, read-only snapshot of a page with its ordered blocks and fields."""
    return PageView(
        id=page.id,
        slug=page.slug,
        title=page.title,
        head_content=page.head_content,
        published=page.published,
        blocks=[
            BlockView(
                id=b.id,
                type=b.type,
                order=b.order,
                draggable=b.draggable,
                html_template=b.html_template,
                fields=[
                    FieldView(
                        id=f.id,
                        field_name=f.field_name,
                        display_name=f.display_name,
                        field_type=f.field_type,
                        value=f.value,
                    )
                    for f in get_fields(session, b.id)
                ],
            )
            for b in get_blocks(session, page.id)
        ],
    )


def delete_page_blocks(session: Session, page_id) -> int:
    """Delete every block and field of a page. Returns the number of blocks deleted."""
    blocks = get_blocks(session, page_id)
    for b in blocks:
        for f in get_fields(session, b.id):
            session.delete(f)
        session.delete(b)
    session.flush()
    return len(blocks)


def _insert_blocks(session: Session, page_id, staged: StagedPage) -> None:
    for order, blk in enumerate(staged.blocks, start=1):
        block = Block(
            page_id=page_id,
            type=blk.type,
            html_template=blk.html_template,
            order=order,
            draggable=blk.draggable,
            provenance=blk.provenance,
        )
        session.add(block)
        session.flush()
        for position, fld in enumerate(blk.fields):
            session.add(BlockField(
                block_id=block.id,
                position=position,
                field_name=fld.field_name,
                display_name=fld.display_name,
                field_type=fld.field_type,
                value=fld.value,
            ))
    session.flush()


def commit_page(
    session: Session,
    staged: StagedPage,
    committed_at: datetime | None = None,
    force: bool = False,
    ) -> tuple[Page, str]:
    """Upsert a staged page by slug.

    Returns (page, status) where status is 'created', 'updated', or 'unchanged'.
    An unchanged source hash leaves the stored page (and any edits) alone unless
    force is set; otherwise all prior blocks and fields are replaced.
    Flushes but does not commit; the caller controls the transaction.
    """
    page = get_page_by_slug(session, staged.slug)

    if page:
        if page.hash == staged.hash and not force:
            return page, 'unchanged'
        page.title = staged.title
        page.head_content = staged.head_content
        page.hash = staged.hash
        page.path = staged.path
        page.updated_at = datetime.now()
        page.committed_at = committed_at
        session.add(page)
        session.flush()
        delete_page_blocks(session, page.id)
        _insert_blocks(session, page.id, staged)
        return page, 'updated'

    page = Page(
        slug=staged.slug,
        title=staged.title,
        head_content=staged.head_content,
        hash=staged.hash,
        path=staged.path,
        committed_at=committed_at,
    )
    session.add(page)
    session.flush()
    _insert_blocks(session, page.id, staged)
    return page, 'created'


def set_published(session: Session, page: Page, published: bool) -> Page:
    page.published = published
    page.updated_at = datetime.now()
    session.add(page)
    session.commit()
    session.refresh(page)
    return page


def apply_page_update(session: Session, page: Page, update: PageUpdate) -> None:
    """Apply an editor's batch of block orders and field values atomically.

    The new orders are validated first (1..N, fixed blocks stay put, draggable
    blocks stay in their run). Any failure rolls back the whole batch and
    raises BatchUpdateError naming the failing block; a failed commit names
    no single block and lists the whole batch instead. Commits on success.
    """
    slug = page.slug
    current = page_view(session, page)
    check_reorder(current.blocks, {b.id: b.order for b in update.blocks})

    try:
        for bu in update.blocks:
            try:
                block = session.get(Block, bu.id)
                if block is None or block.page_id != page.id:
                    raise LookupError(f"block {bu.id} does not belong to page {slug}")
                block.order = bu.order
                session.add(block)

                for fu in bu.fields:
                    field = session.get(BlockField, fu.id)
                    if field is None or field.block_id != block.id:
                        raise LookupError(f"field {fu.id} does not belong to block {bu.id}")
                    field.value = fu.value
                    if fu.display_name is not None:
                        field.display_name = fu.display_name
                    field.updated_at = datetime.now()
                    session.add(field)
                session.flush()
            except (LookupError, SQLAlchemyError) as e:
                raise BatchUpdateError(f"Failed to update block {bu.id}: {e}", block_id=bu.id) from e
            logger.debug("Updated block %s (order %d, %d fields)", bu.id, bu.order, len(bu.fields))

        page.updated_at = datetime.now()
        session.add(page)
        try:
            session.commit()
        except SQLAlchemyError as e:
            raise BatchUpdateError(
                f"Failed to commit update of page {slug}: {e}",
                details={"blocks": [str(bu.id) for bu in update.blocks]},
            ) from e
    except BatchUpdateError:
        session.rollback()
        raise
