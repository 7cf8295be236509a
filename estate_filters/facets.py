# estate_filters/facets.py
"""Aggregates over the public listing corpus.

Facet counts per filter value, association usage per value, headline listing
statistics and equal-width price bands. None of these are narrowed by a
current search selection.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from .models import FilterGroup, FilterValue, Listing, ListingFilter
from .query import is_public, public_listings
from .utils import format_money

PRICE_BUCKETS = 5


def value_counts_for_page(db: Session, page: str) -> List[Dict[str, Any]]:
    """Distinct public listings per active value of the active groups on `page`.

    Values nobody uses are kept with a count of zero.
    """
    listings_count = func.count(Listing.id.distinct()).label("listings_count")
    rows = (
        db.query(FilterValue, listings_count)
        .join(FilterGroup, FilterValue.filter_group_id == FilterGroup.id)
        .outerjoin(ListingFilter, ListingFilter.filter_value_id == FilterValue.id)
        .outerjoin(Listing, and_(ListingFilter.listing_id == Listing.id, is_public()))
        .filter(
            FilterGroup.page == page,
            FilterGroup.is_active.is_(True),
            FilterValue.is_active.is_(True),
        )
        .group_by(FilterValue.id, FilterGroup.id)
        .order_by(FilterGroup.display_order, FilterGroup.id, FilterValue.display_order, FilterValue.id)
        .all()
    )
    return [
        {
            "id": value.id,
            "filter_group_id": value.filter_group_id,
            "value": value.value,
            "label": value.label,
            "display_order": value.display_order,
            "listings_count": count,
        }
        for value, count in rows
    ]


def usage_stats(db: Session, group_id: Optional[int] = None) -> List[Dict[str, int]]:
    usage_count = func.count(ListingFilter.id).label("usage_count")
    q = (
        db.query(ListingFilter.filter_value_id, usage_count)
        .join(FilterValue, ListingFilter.filter_value_id == FilterValue.id)
        .join(Listing, ListingFilter.listing_id == Listing.id)
        .filter(is_public())
    )
    if group_id is not None:
        q = q.filter(FilterValue.filter_group_id == group_id)
    rows = q.group_by(ListingFilter.filter_value_id).order_by(usage_count.desc(), ListingFilter.filter_value_id).all()
    return [{"filter_value_id": value_id, "usage_count": count} for value_id, count in rows]


def listing_stats(db: Session) -> Dict[str, Any]:
    active = db.query(Listing).filter(Listing.is_active.is_(True))
    avg_price, min_price, max_price = (
        db.query(func.avg(Listing.price), func.min(Listing.price), func.max(Listing.price))
        .filter(is_public())
        .one()
    )
    return {
        "total_listings": active.count(),
        "published_listings": public_listings(db).count(),
        "featured_listings": public_listings(db).filter(Listing.is_featured.is_(True)).count(),
        "average_price": avg_price,
        "min_price": min_price,
        "max_price": max_price,
    }


def bucketize(prices, buckets: int = PRICE_BUCKETS) -> List[Dict[str, Any]]:
    """Split `[min(prices), max(prices)]` into equal-width bands.

    Each band's upper bound is the next band's lower bound and the last band
    closes exactly at the maximum. A single distinct price gives one
    zero-width band; no prices give no bands.
    """
    prices = [Decimal(str(p)) for p in prices if p is not None]
    if not prices:
        return []
    low, high = min(prices), max(prices)
    if low == high:
        return [{"min": low, "max": high, "label": f"{format_money(low)} - {format_money(high)}"}]
    step = (high - low) / buckets
    bands = []
    for i in range(buckets):
        lo = low + step * i
        hi = high if i == buckets - 1 else low + step * (i + 1)
        bands.append({"min": lo, "max": hi, "label": f"{format_money(lo)} - {format_money(hi)}"})
    return bands


def price_buckets(db: Session, buckets: int = PRICE_BUCKETS) -> List[Dict[str, Any]]:
    prices = [row[0] for row in public_listings(db).with_entities(Listing.price)]
    return bucketize(prices, buckets)
