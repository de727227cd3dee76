"""Ordering service — position assignment and adjacent swaps for curriculum items.

Sections are ordered within their course and lessons within their section;
that parent is the item's *scope*. ``order`` is unique per scope at rest but
may have gaps after deletions (1, 2, 4 is valid).

Both operations lock the scope's parent row before reading sibling orders, so
concurrent appends and swaps in the same scope run one after another. This
module is the only writer of the ``order`` columns.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from learnhub.errors import NotFoundError
from learnhub.models.course import Course
from learnhub.models.lesson import Lesson
from learnhub.models.section import Section
from learnhub.schemas.curriculum import MoveDirection

logger = logging.getLogger(__name__)

# Never a valid position; holds the moving item while its old slot is reused.
SENTINEL_ORDER = -1

OrderedItem = Union[Section, Lesson]

# model -> (scope column, parent model)
_SCOPES = {
    Section: (Section.course_id, Course),
    Lesson: (Lesson.section_id, Section),
}


@dataclass
class SwapResult:
    success: bool
    item: OrderedItem
    message: Optional[str] = None


def _scope_of(model):
    try:
        return _SCOPES[model]
    except KeyError:
        raise TypeError(f"{model.__name__} is not an ordered curriculum model")


def _lock_scope(db: Session, model, scope_id: str) -> None:
    """SELECT ... FOR UPDATE on the parent row (a no-op lock on SQLite)."""
    _, parent = _scope_of(model)
    row = db.query(parent.id).filter(parent.id == scope_id).with_for_update().first()
    if row is None:
        raise NotFoundError(
            f"{parent.__name__} {scope_id} not found",
            f"{parent.__name__} not found.",
        )


def scope_id_of(item: OrderedItem) -> str:
    scope_col, _ = _scope_of(type(item))
    return getattr(item, scope_col.key)


def next_order(db: Session, model, scope_id: str) -> int:
    """Position for a new item appended to the scope: max(order) + 1.

    Uses max rather than count so a slot freed by a deletion in the middle
    never hands out an order still held by a later sibling.
    """
    scope_col, _ = _scope_of(model)
    _lock_scope(db, model, scope_id)
    current = (
        db.query(func.coalesce(func.max(model.order), 0))
        .filter(scope_col == scope_id)
        .scalar()
    )
    return int(current) + 1


def append_item(db: Session, item: OrderedItem) -> OrderedItem:
    """Insert ``item`` at the end of its scope and commit.

    The order is computed and the row inserted in one transaction. A
    uniqueness violation (a concurrent append won the slot) is retried once
    with a fresh order.
    """
    model = type(item)
    scope_id = scope_id_of(item)
    for attempt in (1, 2):
        item.order = next_order(db, model, scope_id)
        db.add(item)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt == 2:
                raise
            logger.warning(
                "Order %d already taken in %s scope %s, retrying",
                item.order, model.__name__, scope_id,
            )
            continue
        db.refresh(item)
        return item
    raise AssertionError("unreachable")


def swap_order(db: Session, model, item_id: str, direction) -> SwapResult:
    """Exchange an item's order with its immediate neighbor in the scope.

    ``up`` takes the sibling with the greatest order below the item's, ``down``
    the one with the smallest order above it. With no such sibling nothing is
    written and the result carries ``success=False`` and a reason.

    The exchange is three writes (item -> sentinel, neighbor -> item's order,
    item -> neighbor's order) committed as a single transaction, so readers
    only ever see the before or after state and the (scope, order) unique
    constraint holds after every statement.
    """
    direction = MoveDirection(direction)
    scope_col, _ = _scope_of(model)
    label = model.__name__

    item = db.query(model).filter(model.id == item_id).first()
    if item is None:
        raise NotFoundError(f"{label} {item_id} not found", f"{label} not found.")

    scope_id = getattr(item, scope_col.key)
    _lock_scope(db, model, scope_id)
    # The order may have changed while we waited on the lock.
    db.refresh(item)

    siblings = db.query(model).filter(scope_col == scope_id, model.id != item.id)
    if direction is MoveDirection.UP:
        neighbor = (
            siblings.filter(model.order < item.order)
            .order_by(model.order.desc())
            .first()
        )
    else:
        neighbor = (
            siblings.filter(model.order > item.order)
            .order_by(model.order.asc())
            .first()
        )

    if neighbor is None:
        db.rollback()
        edge = "top" if direction is MoveDirection.UP else "bottom"
        return SwapResult(success=False, item=item, message=f"{label} is already at the {edge}")

    item_order, neighbor_order = item.order, neighbor.order
    try:
        item.order = SENTINEL_ORDER
        db.flush()
        neighbor.order = item_order
        db.flush()
        item.order = neighbor_order
        db.flush()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "Moved %s %s %s: order %d <-> %d (with %s)",
        label, item.id, direction.value, item_order, neighbor_order, neighbor.id,
    )
    return SwapResult(success=True, item=item)
