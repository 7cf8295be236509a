# estate_filters/query.py
"""Compile facet selections and scalar filters into a listing query.

A listing matches a facet selection when, for every selected group, it holds
at least one of that group's selected values: AND across groups, OR within a
group. Each group becomes its own correlated EXISTS check on
`listing_filters`, so values from different groups never share a join row.
"""
import math
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy import and_, exists, or_
from sqlalchemy.orm import Query, Session

from .models import FilterGroup, Listing, ListingFilter
from .schemas import ListingFilters
from .utils import like_pattern, logger, utcnow

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50

SORT_KEYS = {
    "price_asc": Listing.price.asc(),
    "price_desc": Listing.price.desc(),
    "newest": Listing.published_at.desc(),
    "oldest": Listing.published_at.asc(),
    "bedrooms_asc": Listing.bedrooms.asc(),
    "bedrooms_desc": Listing.bedrooms.desc(),
    "sqft_asc": Listing.square_footage.asc(),
    "sqft_desc": Listing.square_footage.desc(),
}
DEFAULT_ORDER = (Listing.is_featured.desc(), Listing.published_at.desc())


def is_public():
    """Active, with a publish time that is set and not in the future."""
    return and_(
        Listing.is_active.is_(True),
        Listing.published_at.isnot(None),
        Listing.published_at <= utcnow(),
    )


def public_listings(db: Session) -> Query:
    return db.query(Listing).filter(is_public())


def clamp_page_size(page_size: Optional[int], default: int = DEFAULT_PAGE_SIZE) -> int:
    if not page_size or page_size < 1:
        return default
    return min(page_size, MAX_PAGE_SIZE)


def facet_conditions(db: Session, selection: Mapping[int, Iterable[int]]):
    """One EXISTS clause per known group with a non-empty value set."""
    wanted = {gid: set(vids) for gid, vids in selection.items() if vids}
    if not wanted:
        return []
    known = {row[0] for row in db.query(FilterGroup.id).filter(FilterGroup.id.in_(list(wanted)))}
    conds = []
    for group_id, value_ids in wanted.items():
        if group_id not in known:
            logger.debug("Ignoring unknown filter group %s in selection", group_id)
            continue
        conds.append(
            exists().where(
                ListingFilter.listing_id == Listing.id,
                ListingFilter.filter_value_id.in_(sorted(value_ids)),
            )
        )
    return conds


def scalar_conditions(filters: ListingFilters):
    conds = []
    if filters.min_price is not None:
        conds.append(Listing.price >= filters.min_price)
    if filters.max_price is not None:
        conds.append(Listing.price <= filters.max_price)
    if filters.bedrooms is not None:
        conds.append(Listing.bedrooms == filters.bedrooms)
    if filters.bathrooms is not None:
        conds.append(Listing.bathrooms >= filters.bathrooms)
    if filters.city:
        conds.append(Listing.city == filters.city)
    if filters.state:
        conds.append(Listing.state == filters.state)
    if filters.featured:
        conds.append(Listing.is_featured.is_(True))
    if filters.search:
        pattern = like_pattern(filters.search)
        conds.append(or_(
            Listing.title.ilike(pattern, escape="\\"),
            Listing.description.ilike(pattern, escape="\\"),
            Listing.address.ilike(pattern, escape="\\"),
            Listing.city.ilike(pattern, escape="\\"),
            Listing.neighborhood.ilike(pattern, escape="\\"),
        ))
    return conds


def apply_sort(q: Query, sort: Optional[str]) -> Query:
    # the default order always follows as tie-break, then id for stable pages
    primary = SORT_KEYS.get(sort) if sort else None
    if sort and primary is None:
        logger.debug("Unknown sort key %r, using default order", sort)
    if primary is not None:
        q = q.order_by(primary)
    return q.order_by(*DEFAULT_ORDER, Listing.id.desc())


def build_listing_query(
    db: Session,
    selection: Optional[Mapping[int, Iterable[int]]] = None,
    filters: Optional[ListingFilters] = None,
) -> Query:
    filters = filters or ListingFilters()
    conds = facet_conditions(db, selection or {}) + scalar_conditions(filters)
    q = public_listings(db)
    if conds:
        q = q.filter(and_(*conds))
    return apply_sort(q, filters.sort)


def query_listings(
    db: Session,
    selection: Optional[Mapping[int, Iterable[int]]] = None,
    filters: Optional[ListingFilters] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    q = build_listing_query(db, selection, filters)
    page_size = clamp_page_size(page_size)
    page = max(page or 1, 1)
    total = q.order_by(None).count()
    items = q.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "total": total,
        "items": items,
        "page": page,
        "page_size": page_size,
        "last_page": max(math.ceil(total / page_size), 1),
    }


def featured_listings(db: Session, limit: int = 6):
    return (
        public_listings(db)
        .filter(Listing.is_featured.is_(True))
        .order_by(Listing.published_at.desc(), Listing.id.desc())
        .limit(clamp_page_size(limit, default=6))
        .all()
    )
