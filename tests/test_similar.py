# tests/test_similar.py
import pytest

from estate_filters import similar
from estate_filters.errors import NotFound


def test_similar_respects_every_bound(db, make_listing):
    source = make_listing(price=1000000, city="X", bedrooms=3)
    inside = [
        make_listing(price=800000, city="X", bedrooms=2),
        make_listing(price=1200000, city="X", bedrooms=4),
        make_listing(price=1000000, city="X", bedrooms=3),
    ]
    make_listing(price=1200001, city="X", bedrooms=3)
    make_listing(price=799999, city="X", bedrooms=3)
    make_listing(price=1000000, city="Y", bedrooms=3)
    make_listing(price=1000000, city="X", bedrooms=5)
    make_listing(price=1000000, city="X", bedrooms=1)
    make_listing(price=1000000, city="X", bedrooms=None)
    make_listing(price=1000000, city="X", bedrooms=3, is_active=False)

    found = similar.similar_to(db, source.id, limit=50)
    assert {l.id for l in found} == {l.id for l in inside}
    for l in found:
        assert 800000 <= l.price <= 1200000
        assert l.city == "X"
        assert 2 <= l.bedrooms <= 4


def test_similar_without_bedrooms_ignores_bedroom_bound(db, make_listing):
    source = make_listing(price=500000, city="X", bedrooms=None)
    studio = make_listing(price=500000, city="X", bedrooms=0)
    mansion = make_listing(price=500000, city="X", bedrooms=9)
    assert {l.id for l in similar.similar_to(db, source.id)} == {studio.id, mansion.id}


def test_similar_bedroom_floor_is_one(db, make_listing):
    source = make_listing(price=500000, city="X", bedrooms=1)
    one = make_listing(price=500000, city="X", bedrooms=1)
    two = make_listing(price=500000, city="X", bedrooms=2)
    make_listing(price=500000, city="X", bedrooms=0)
    assert {l.id for l in similar.similar_to(db, source.id)} == {one.id, two.id}


def test_similar_order_and_limit(db, make_listing):
    source = make_listing(price=500000, city="X")
    newest = make_listing(price=500000, city="X", days_ago=1)
    featured = make_listing(price=500000, city="X", days_ago=20, is_featured=True)
    make_listing(price=500000, city="X", days_ago=10)
    make_listing(price=500000, city="X", days_ago=15)
    make_listing(price=500000, city="X", days_ago=30)
    found = similar.similar_to(db, source.id)
    assert len(found) == similar.DEFAULT_LIMIT
    assert [l.id for l in found[:2]] == [featured.id, newest.id]
    assert source.id not in {l.id for l in found}


def test_similar_unknown_listing(db):
    with pytest.raises(NotFound):
        similar.similar_to(db, 404)


def test_similar_without_city(db, make_listing):
    source = make_listing(price=500000, city=None)
    make_listing(price=500000, city=None)
    assert similar.similar_to(db, source.id) == []
