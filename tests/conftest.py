# tests/conftest.py
import os
from datetime import timedelta
from decimal import Decimal

# in-memory database for the whole test run; must be set before estate_filters.db is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from estate_filters import crud, models
from estate_filters.db import Base, engine, SessionLocal
from estate_filters.utils import utcnow


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_listing(db):
    counter = {"n": 0}

    def _make(price=500000, city="Austin", bedrooms=3, days_ago=1, **kw):
        counter["n"] += 1
        fields = {
            "title": f"Listing {counter['n']}",
            "slug": f"listing-{counter['n']}",
            "price": Decimal(str(price)),
            "city": city,
            "state": "TX",
            "bedrooms": bedrooms,
            "is_active": True,
            "is_featured": False,
            "published_at": utcnow() - timedelta(days=days_ago),
        }
        fields.update(kw)
        obj = models.Listing(**fields)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    return _make


@pytest.fixture
def make_group(db):
    def _make(slug, page="properties", values=(), **kw):
        data = {"page": page, "name": slug.replace("_", " ").title(), "slug": slug, "data_type": "string"}
        data.update(kw)
        group = crud.create_group(db, data)
        created = crud.bulk_create_values(db, group.id, [{"value": v} for v in values])
        return group, {v.value: v for v in created}

    return _make
