# estate_filters/crud.py
"""CRUD operations for the filter catalogue and listing associations.

Covers filter groups and values (create, partial update, cascading delete,
search, bulk reorder) and the replace-all sync of the filter values assigned
to a listing. Every multi-row mutation runs inside `db.atomic`.
"""
from collections.abc import Iterable
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .db import atomic
from .errors import Conflict, NotFound, TransactionFailure, ValidationFailure
from .models import FilterGroup, FilterValue, Listing, ListingFilter
from .utils import like_pattern, logger

# schema field -> ORM attribute where they differ
_VALUE_COLUMNS = {"metadata": "extra"}


def _next_display_order(db: Session, column, *criteria) -> int:
    current = db.query(func.max(column)).filter(*criteria).scalar()
    return 0 if current is None else current + 1


def _slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(FilterGroup.id).filter(FilterGroup.slug == slug)
    if exclude_id is not None:
        q = q.filter(FilterGroup.id != exclude_id)
    return q.first() is not None


# -- filter groups ---------------------------------------------------------

def list_groups(db: Session, page: str, active_only: bool = True) -> List[FilterGroup]:
    q = db.query(FilterGroup).options(selectinload(FilterGroup.active_values)).filter(FilterGroup.page == page)
    if active_only:
        q = q.filter(FilterGroup.is_active.is_(True))
    return q.order_by(FilterGroup.display_order, FilterGroup.id).all()


def get_group(db: Session, group_id: int) -> FilterGroup:
    obj = (
        db.query(FilterGroup)
        .options(selectinload(FilterGroup.values), selectinload(FilterGroup.active_values))
        .filter(FilterGroup.id == group_id)
        .first()
    )
    if not obj:
        raise NotFound(f"Filter group {group_id} not found")
    return obj


def create_group(db: Session, data: Dict[str, Any]) -> FilterGroup:
    if _slug_taken(db, data["slug"]):
        raise Conflict(f"Filter group slug '{data['slug']}' already exists")
    fields = dict(data)
    if fields.get("display_order") is None:
        fields["display_order"] = _next_display_order(
            db, FilterGroup.display_order, FilterGroup.page == fields["page"]
        )
    obj = FilterGroup(**fields)
    try:
        with atomic(db):
            db.add(obj)
    except TransactionFailure as e:
        # lost a race for the slug
        if isinstance(e.__cause__, IntegrityError) and _slug_taken(db, fields["slug"]):
            raise Conflict(f"Filter group slug '{fields['slug']}' already exists") from e
        raise
    db.refresh(obj)
    logger.info("Created filter group %s (%s)", obj.id, obj.slug)
    return obj


def update_group(db: Session, group_id: int, updates: Dict[str, Any]) -> FilterGroup:
    obj = get_group(db, group_id)
    if updates.get("slug") and _slug_taken(db, updates["slug"], exclude_id=group_id):
        raise Conflict(f"Filter group slug '{updates['slug']}' already exists")
    with atomic(db):
        for k, v in updates.items():
            setattr(obj, k, v)
    db.refresh(obj)
    return obj


def delete_group(db: Session, group_id: int) -> None:
    """Remove a group, its values and every association pointing at them."""
    get_group(db, group_id)
    value_ids = db.query(FilterValue.id).filter(FilterValue.filter_group_id == group_id)
    with atomic(db):
        removed = (
            db.query(ListingFilter)
            .filter(or_(ListingFilter.filter_value_id.in_(value_ids.scalar_subquery()),
                        ListingFilter.filter_group_id == group_id))
            .delete(synchronize_session=False)
        )
        db.query(FilterValue).filter(FilterValue.filter_group_id == group_id).delete(synchronize_session=False)
        db.query(FilterGroup).filter(FilterGroup.id == group_id).delete(synchronize_session=False)
    logger.info("Deleted filter group %s and %d listing associations", group_id, removed)


# -- filter values ---------------------------------------------------------

def list_values(db: Session, group_id: int, active_only: bool = True) -> List[FilterValue]:
    if db.get(FilterGroup, group_id) is None:
        raise NotFound(f"Filter group {group_id} not found")
    q = db.query(FilterValue).filter(FilterValue.filter_group_id == group_id)
    if active_only:
        q = q.filter(FilterValue.is_active.is_(True))
    return q.order_by(FilterValue.display_order, FilterValue.id).all()


def get_value(db: Session, value_id: int) -> FilterValue:
    obj = (
        db.query(FilterValue)
        .options(selectinload(FilterValue.group))
        .filter(FilterValue.id == value_id)
        .first()
    )
    if not obj:
        raise NotFound(f"Filter value {value_id} not found")
    return obj


def _value_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_VALUE_COLUMNS.get(k, k): v for k, v in data.items()}


def create_value(db: Session, data: Dict[str, Any]) -> FilterValue:
    group_id = data["filter_group_id"]
    if db.get(FilterGroup, group_id) is None:
        raise NotFound(f"Filter group {group_id} not found")
    fields = _value_kwargs(data)
    if fields.get("display_order") is None:
        fields["display_order"] = _next_display_order(
            db, FilterValue.display_order, FilterValue.filter_group_id == group_id
        )
    obj = FilterValue(**fields)
    with atomic(db):
        db.add(obj)
    db.refresh(obj)
    return obj


def bulk_create_values(db: Session, group_id: int, values: Sequence[Dict[str, Any]]) -> List[FilterValue]:
    if db.get(FilterGroup, group_id) is None:
        raise NotFound(f"Filter group {group_id} not found")
    start = _next_display_order(db, FilterValue.display_order, FilterValue.filter_group_id == group_id)
    objs = []
    for index, item in enumerate(values):
        display_order = item.get("display_order")
        is_active = item.get("is_active")
        objs.append(FilterValue(
            filter_group_id=group_id,
            value=item["value"],
            label=item.get("label") or item["value"],
            slug=item.get("slug"),
            color=item.get("color"),
            icon=item.get("icon"),
            description=item.get("description"),
            display_order=start + index if display_order is None else display_order,
            is_active=True if is_active is None else is_active,
            extra=item.get("metadata"),
        ))
    with atomic(db):
        db.add_all(objs)
    for obj in objs:
        db.refresh(obj)
    logger.info("Created %d values in filter group %s", len(objs), group_id)
    return objs


def update_value(db: Session, value_id: int, updates: Dict[str, Any]) -> FilterValue:
    obj = get_value(db, value_id)
    new_group = updates.get("filter_group_id")
    if new_group is not None and db.get(FilterGroup, new_group) is None:
        raise NotFound(f"Filter group {new_group} not found")
    with atomic(db):
        if new_group is not None and new_group != obj.filter_group_id:
            # associations carry the group id too
            db.query(ListingFilter).filter(ListingFilter.filter_value_id == value_id).update(
                {ListingFilter.filter_group_id: new_group}, synchronize_session=False
            )
        for k, v in _value_kwargs(updates).items():
            setattr(obj, k, v)
    db.refresh(obj)
    return obj


def delete_value(db: Session, value_id: int) -> None:
    get_value(db, value_id)
    with atomic(db):
        removed = (
            db.query(ListingFilter)
            .filter(ListingFilter.filter_value_id == value_id)
            .delete(synchronize_session=False)
        )
        db.query(FilterValue).filter(FilterValue.id == value_id).delete(synchronize_session=False)
    logger.info("Deleted filter value %s and %d listing associations", value_id, removed)


def search_values(db: Session, text: str, group_id: Optional[int] = None) -> List[FilterValue]:
    pattern = like_pattern(text)
    q = db.query(FilterValue).filter(or_(
        FilterValue.value.ilike(pattern, escape="\\"),
        FilterValue.label.ilike(pattern, escape="\\"),
    ))
    if group_id is not None:
        q = q.filter(FilterValue.filter_group_id == group_id)
    return (
        q.filter(FilterValue.is_active.is_(True))
        .order_by(FilterValue.display_order, FilterValue.id)
        .all()
    )


# -- ordering --------------------------------------------------------------

def _existing_ids(db: Session, model, ids: Sequence[int]) -> set:
    if not ids:
        return set()
    return {row[0] for row in db.query(model.id).filter(model.id.in_(ids))}


def _reorder(db: Session, model, ordered_ids: Sequence[int]) -> None:
    ids = list(ordered_ids)
    if len(set(ids)) != len(ids):
        raise ValidationFailure("Reorder contains duplicate ids")
    found = _existing_ids(db, model, ids)
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFound(f"{model.__name__} ids not found: {missing}")
    with atomic(db):
        for position, obj_id in enumerate(ids):
            updated = db.query(model).filter(model.id == obj_id).update(
                {model.display_order: position}, synchronize_session=False
            )
            if not updated:
                # deleted after the existence check
                raise NotFound(f"{model.__name__} ids not found: [{obj_id}]")


def reorder_groups(db: Session, ordered_ids: Sequence[int]) -> None:
    _reorder(db, FilterGroup, ordered_ids)


def reorder_values(db: Session, ordered_ids: Sequence[int]) -> None:
    _reorder(db, FilterValue, ordered_ids)


# -- listing associations --------------------------------------------------

def _as_value_ids(raw) -> List[int]:
    if isinstance(raw, Iterable) and not isinstance(raw, (str, bytes)):
        ids = list(raw)
    else:
        ids = [raw]
    # keep first occurrence, preserve caller order
    return list(dict.fromkeys(ids))


def sync_listing_filters(db: Session, listing_id: int, selection: Dict[int, Any]) -> List[ListingFilter]:
    """Replace every association of a listing with `selection`.

    `selection` maps a group id to one value id or an ordered iterable of
    value ids. Existing rows are deleted and the new ones inserted in the
    same transaction, so calling this twice with the same input is a no-op.
    """
    if db.get(Listing, listing_id) is None:
        raise NotFound(f"Listing {listing_id} not found")
    pairs = [(group_id, value_id) for group_id, raw in selection.items() for value_id in _as_value_ids(raw)]

    group_ids = {g for g, _ in pairs}
    groups = {g.id: g for g in db.query(FilterGroup).filter(FilterGroup.id.in_(list(group_ids)))} if group_ids else {}
    missing_groups = sorted(group_ids - groups.keys())
    if missing_groups:
        raise NotFound(f"Filter groups not found: {missing_groups}")

    value_ids = {v for _, v in pairs}
    owners = dict(
        db.query(FilterValue.id, FilterValue.filter_group_id).filter(FilterValue.id.in_(list(value_ids)))
    ) if value_ids else {}
    missing_values = sorted(value_ids - owners.keys())
    if missing_values:
        raise NotFound(f"Filter values not found: {missing_values}")
    for group_id, value_id in pairs:
        if owners[value_id] != group_id:
            raise ValidationFailure(f"Filter value {value_id} does not belong to group {group_id}")

    for group_id, group in groups.items():
        chosen = sum(1 for g, _ in pairs if g == group_id)
        if chosen > 1 and not group.is_multiple:
            logger.warning(
                "Listing %s gets %d values for single-value filter group %s", listing_id, chosen, group.slug
            )

    rows = [ListingFilter(listing_id=listing_id, filter_group_id=g, filter_value_id=v) for g, v in pairs]
    with atomic(db):
        db.query(ListingFilter).filter(ListingFilter.listing_id == listing_id).delete(synchronize_session=False)
        db.add_all(rows)
    logger.info("Synced %d filters for listing %s", len(rows), listing_id)
    return rows


def listing_filter_values(db: Session, listing_id: int, group_id: Optional[int] = None) -> List[FilterValue]:
    if db.get(Listing, listing_id) is None:
        raise NotFound(f"Listing {listing_id} not found")
    q = (
        db.query(FilterValue)
        .join(ListingFilter, ListingFilter.filter_value_id == FilterValue.id)
        .join(FilterGroup, FilterGroup.id == FilterValue.filter_group_id)
        .filter(ListingFilter.listing_id == listing_id)
    )
    if group_id is not None:
        q = q.filter(FilterValue.filter_group_id == group_id)
    return q.order_by(
        FilterGroup.display_order, FilterGroup.id, FilterValue.display_order, FilterValue.id
    ).all()
