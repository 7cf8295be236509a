# estate_filters/seed.py
"""Default filter catalogue for the properties page.

Run with `python -m estate_filters.seed` against the configured database.
Groups whose slug already exists are left untouched.
"""
from sqlalchemy.orm import Session

from . import crud
from .db import Base, SessionLocal, engine
from .models import FilterGroup
from .utils import logger

DEFAULT_FILTERS = [
    {
        "group": {
            "page": "properties",
            "name": "Property Type",
            "slug": "property_type",
            "data_type": "string",
            "is_multiple": False,
            "is_required": True,
            "description": "Type of property (House, Apartment, etc.)",
        },
        "values": [
            {"value": "house", "label": "Single Family House", "color": "#10B981"},
            {"value": "apartment", "label": "Apartment", "color": "#3B82F6"},
            {"value": "condo", "label": "Condominium", "color": "#8B5CF6"},
            {"value": "townhouse", "label": "Townhouse", "color": "#F59E0B"},
            {"value": "villa", "label": "Villa", "color": "#EF4444"},
            {"value": "penthouse", "label": "Penthouse", "color": "#F97316"},
            {"value": "commercial", "label": "Commercial", "color": "#6B7280"},
            {"value": "land", "label": "Land/Lot", "color": "#84CC16"},
        ],
    },
    {
        "group": {
            "page": "properties",
            "name": "Status",
            "slug": "property_status",
            "data_type": "string",
            "is_multiple": False,
            "is_required": True,
            "description": "Current status of the property",
        },
        "values": [
            {"value": "for_sale", "label": "For Sale", "color": "#10B981"},
            {"value": "for_rent", "label": "For Rent", "color": "#3B82F6"},
            {"value": "sold", "label": "Sold", "color": "#6B7280"},
            {"value": "pending", "label": "Pending", "color": "#F59E0B"},
            {"value": "off_market", "label": "Off Market", "color": "#EF4444"},
        ],
    },
    {
        "group": {
            "page": "properties",
            "name": "Features",
            "slug": "property_features",
            "data_type": "string",
            "is_multiple": True,
            "is_required": False,
            "description": "Property features and amenities",
        },
        "values": [
            {"value": "pool", "label": "Swimming Pool", "icon": "pool"},
            {"value": "garage", "label": "Garage", "icon": "garage"},
            {"value": "garden", "label": "Garden", "icon": "garden"},
            {"value": "balcony", "label": "Balcony", "icon": "balcony"},
            {"value": "fireplace", "label": "Fireplace", "icon": "fireplace"},
            {"value": "gym", "label": "Gym/Fitness Center", "icon": "gym"},
            {"value": "security", "label": "24/7 Security", "icon": "security"},
            {"value": "elevator", "label": "Elevator", "icon": "elevator"},
            {"value": "air_conditioning", "label": "Air Conditioning", "icon": "ac"},
            {"value": "central_heating", "label": "Central Heating", "icon": "heating"},
            {"value": "walk_in_closet", "label": "Walk-in Closet", "icon": "closet"},
            {"value": "laundry_room", "label": "Laundry Room", "icon": "laundry"},
        ],
    },
]


def seed_default_filters(db: Session, catalogue=DEFAULT_FILTERS) -> int:
    """Create missing groups with their values; returns how many groups were added."""
    created = 0
    for entry in catalogue:
        slug = entry["group"]["slug"]
        if db.query(FilterGroup.id).filter(FilterGroup.slug == slug).first():
            logger.info("Filter group %s already present, skipping", slug)
            continue
        group = crud.create_group(db, entry["group"])
        values = [dict(v, slug=v["value"]) for v in entry["values"]]
        crud.bulk_create_values(db, group.id, values)
        created += 1
    return created


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = seed_default_filters(db)
        logger.info("Seeded %d filter groups", added)
    finally:
        db.close()
