"""Manual ordering for sibling groups.

A sibling group is every row of one model matching some criteria: all
categories, the links of one category, all hero slides. Each member carries a
zero-based ``sort_order``. New members go to the end, deletes leave gaps, and a
reorder always renumbers the whole group to 0..n-1 in one transaction.
"""
import logging
import re

from sqlalchemy import func, select, update

from models import db
from services.errors import ReorderConflictError, ValidationError

logger = logging.getLogger(__name__)

MAX_ID = 2 ** 63 - 1


class SiblingGroup:
    """A model plus the criteria that select one ordering context."""

    def __init__(self, model, *criteria, label=None):
        self.model = model
        self.criteria = criteria
        self.label = label or model.__tablename__

    def member_ids(self):
        stmt = select(self.model.id).where(*self.criteria)
        return set(db.session.scalars(stmt))

    def members(self):
        stmt = (
            select(self.model)
            .where(*self.criteria)
            .order_by(self.model.sort_order, self.model.id)
        )
        return list(db.session.scalars(stmt))

    def __repr__(self):
        return f"<SiblingGroup {self.label}>"


def next_sort_order(group):
    # no_autoflush: a pending member must not count towards its own position
    with db.session.no_autoflush:
        current = db.session.scalar(
            select(func.max(group.model.sort_order)).where(*group.criteria)
        )
    return 0 if current is None else current + 1


def append(group, entity):
    """Place ``entity`` after the last member of ``group`` and stage it."""
    entity.sort_order = next_sort_order(group)
    db.session.add(entity)
    return entity


def remove(entity):
    """Stage a delete. Remaining siblings keep their values; the next reorder closes the gap."""
    db.session.delete(entity)


def coerce_id(value):
    """Non-negative int id from an int or an ASCII digit string, within signed 64-bit range."""
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str) and re.fullmatch(r"\d+", value.strip(), re.ASCII):
        result = int(value.strip())
    else:
        raise ValidationError(f"Invalid id: {value!r}")
    if not 0 <= result <= MAX_ID:
        raise ValidationError(f"Invalid id: {value!r}")
    return result


def reorder(group, ordered_ids):
    """Rewrite ``sort_order`` of every member of ``group`` to its index in ``ordered_ids``.

    The list must be an exact permutation of the group's current ids. Anything
    else (stale client state, duplicates, ids from another group) raises
    ReorderConflictError before a single row is touched. The updates share one
    transaction; on any failure it is rolled back and the error propagates.
    """
    ids = [coerce_id(value) for value in ordered_ids]
    current = group.member_ids()

    if len(ids) != len(set(ids)):
        raise ReorderConflictError("Order list contains duplicate ids")
    if set(ids) != current:
        missing = sorted(current - set(ids))
        unknown = sorted(set(ids) - current)
        logger.warning(
            "Rejected reorder of %s: missing=%s unknown=%s", group.label, missing, unknown
        )
        raise ReorderConflictError(
            "Order list does not match the current items; reload and try again"
        )

    model = group.model
    try:
        for index, entity_id in enumerate(ids):
            db.session.execute(
                update(model).where(model.id == entity_id).values(sort_order=index)
            )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Reordered %s (%d items)", group.label, len(ids))
    return ids
