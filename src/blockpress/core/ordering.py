"""Block reordering rules for the editor.

Only a draggable block may move, and only by swapping with an adjacent
draggable block. Fixed blocks therefore never change position, and a
draggable block never leaves its run of consecutive draggable blocks.
"""

from typing import Literal
from uuid import UUID

from blockpress.core.errors import ReorderError
from blockpress.core.models import BlockView


Direction = Literal['up', 'down']


def normalize_orders(blocks: list[BlockView]) -> list[BlockView]:
    """Copies of blocks renumbered 1..N in their current list order."""
    return [b.model_copy(update={'order': i}) for i, b in enumerate(blocks, start=1)]


def can_move(blocks: list[BlockView], index: int, direction: Direction) -> bool:
    """True if blocks[index] is draggable and so is its neighbour in direction."""
    if not 0 <= index < len(blocks) or not blocks[index].draggable:
        return False
    target = index - 1 if direction == 'up' else index + 1
    if not 0 <= target < len(blocks):
        return False
    return blocks[target].draggable


def move_block(blocks: list[BlockView], block_id: UUID, direction: Direction) -> list[BlockView]:
    """Swap block_id with its neighbour if allowed and renumber; disallowed moves return blocks unchanged."""
    ordered = sorted(blocks, key=lambda b: b.order)
    index = next((i for i, b in enumerate(ordered) if b.id == block_id), -1)
    if index == -1 or not can_move(ordered, index, direction):
        return ordered
    target = index - 1 if direction == 'up' else index + 1
    ordered[index], ordered[target] = ordered[target], ordered[index]
    return normalize_orders(ordered)


def _run_ids(blocks: list[BlockView]) -> list[int | None]:
    """Per position: index of the draggable run it belongs to, or None for fixed blocks."""
    runs: list[int | None] = []
    run = -1
    prev_draggable = False
    for b in blocks:
        if b.draggable and not prev_draggable:
            run += 1
        runs.append(run if b.draggable else None)
        prev_draggable = b.draggable
    return runs


def check_reorder(blocks: list[BlockView], proposed: dict[UUID, int]) -> None:
    """Validate new orders for blocks (missing ids keep their order). Raises ReorderError."""
    current = sorted(blocks, key=lambda b: b.order)
    known = {b.id for b in current}
    unknown = [bid for bid in proposed if bid not in known]
    if unknown:
        raise ReorderError(f"Unknown block {unknown[0]}", block_id=unknown[0])

    new_orders = {b.id: proposed.get(b.id, b.order) for b in current}
    if sorted(new_orders.values()) != list(range(1, len(current) + 1)):
        raise ReorderError(
            f"Block orders must be exactly 1..{len(current)}",
            details={"orders": sorted(new_orders.values())},
        )

    runs = _run_ids(current)
    run_positions: dict[int, set[int]] = {}
    for pos, run in enumerate(runs, start=1):
        if run is not None:
            run_positions.setdefault(run, set()).add(pos)

    for old_pos, (block, run) in enumerate(zip(current, runs), start=1):
        new_pos = new_orders[block.id]
        if run is None and new_pos != old_pos:
            raise ReorderError(f"Block {block.type!r} is fixed and cannot move", block_id=block.id)
        if run is not None and new_pos not in run_positions[run]:
            raise ReorderError(
                f"Block {block.type!r} cannot move past a fixed block", block_id=block.id,
            )
