# estate_filters/similar.py
"""Comparable listings by price, city and bedroom proximity.

Every condition is a hard filter; candidates are then ranked featured first
and newest first. There is no scoring.
"""
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from .errors import NotFound
from .models import Listing
from .query import DEFAULT_ORDER, clamp_page_size, public_listings

PRICE_TOLERANCE = Decimal("0.2")
BEDROOM_TOLERANCE = 1
DEFAULT_LIMIT = 4


def similar_to(db: Session, listing_id: int, limit: int = DEFAULT_LIMIT) -> List[Listing]:
    source = db.get(Listing, listing_id)
    if source is None:
        raise NotFound(f"Listing {listing_id} not found")
    if source.price is None or not source.city:
        return []

    price = Decimal(source.price)
    q = public_listings(db).filter(
        Listing.id != source.id,
        Listing.price.between(price * (1 - PRICE_TOLERANCE), price * (1 + PRICE_TOLERANCE)),
        Listing.city == source.city,
    )
    if source.bedrooms:
        q = q.filter(Listing.bedrooms.between(
            max(1, source.bedrooms - BEDROOM_TOLERANCE),
            source.bedrooms + BEDROOM_TOLERANCE,
        ))
    return q.order_by(*DEFAULT_ORDER, Listing.id.desc()).limit(clamp_page_size(limit, default=DEFAULT_LIMIT)).all()
