# tests/test_facets.py
from decimal import Decimal

from estate_filters import crud, facets


def test_value_counts_for_page(db, make_group, make_listing):
    features, feats = make_group("features", is_multiple=True, values=["pool", "garage", "garden"], display_order=1)
    ptype, types = make_group("property_type", values=["house"], display_order=0)
    hidden_group, hidden = make_group("hidden", values=["x"], is_active=False)
    make_group("services_only", page="services", values=["cleaning"])
    crud.update_value(db, feats["garden"].id, {"is_active": False})

    a = make_listing()
    b = make_listing()
    inactive = make_listing(is_active=False)
    draft = make_listing(published_at=None)
    crud.sync_listing_filters(db, a.id, {features.id: [feats["pool"].id, feats["garage"].id], ptype.id: types["house"].id})
    crud.sync_listing_filters(db, b.id, {features.id: [feats["pool"].id]})
    crud.sync_listing_filters(db, inactive.id, {features.id: [feats["pool"].id, feats["garage"].id]})
    crud.sync_listing_filters(db, draft.id, {features.id: [feats["garage"].id]})

    counts = facets.value_counts_for_page(db, "properties")
    assert [(c["value"], c["listings_count"]) for c in counts] == [
        ("house", 1),
        ("pool", 2),
        ("garage", 1),
    ]
    assert counts[1]["filter_group_id"] == features.id


def test_value_counts_keep_unused_values(db, make_group):
    make_group("features", values=["pool", "garage"])
    counts = facets.value_counts_for_page(db, "properties")
    assert [c["listings_count"] for c in counts] == [0, 0]
    assert facets.value_counts_for_page(db, "nowhere") == []


def test_usage_stats(db, make_group, make_listing):
    features, feats = make_group("features", is_multiple=True, values=["pool", "garage", "garden"])
    ptype, types = make_group("property_type", values=["house"])
    listings = [make_listing() for _ in range(3)]
    hidden = make_listing(is_active=False)
    crud.sync_listing_filters(db, listings[0].id, {features.id: [feats["pool"].id, feats["garage"].id]})
    crud.sync_listing_filters(db, listings[1].id, {features.id: [feats["garage"].id], ptype.id: types["house"].id})
    crud.sync_listing_filters(db, listings[2].id, {features.id: [feats["garage"].id]})
    crud.sync_listing_filters(db, hidden.id, {features.id: [feats["pool"].id, feats["garden"].id]})

    stats = facets.usage_stats(db)
    assert stats[0] == {"filter_value_id": feats["garage"].id, "usage_count": 3}
    assert {s["filter_value_id"] for s in stats} == {feats["garage"].id, feats["pool"].id, types["house"].id}

    scoped = facets.usage_stats(db, ptype.id)
    assert scoped == [{"filter_value_id": types["house"].id, "usage_count": 1}]


def test_listing_stats(db, make_listing):
    make_listing(price=100000)
    make_listing(price=300000, is_featured=True)
    make_listing(price=900000, published_at=None)
    make_listing(price=50000, is_active=False)
    stats = facets.listing_stats(db)
    assert stats["total_listings"] == 3
    assert stats["published_listings"] == 2
    assert stats["featured_listings"] == 1
    assert stats["min_price"] == Decimal("100000")
    assert stats["max_price"] == Decimal("300000")
    assert Decimal(str(stats["average_price"])) == Decimal("200000")


def test_price_buckets_even_spread(db, make_listing):
    for price in (100, 200, 300, 400, 500):
        make_listing(price=price)
    buckets = facets.price_buckets(db)
    assert len(buckets) == 5
    assert [(b["min"], b["max"]) for b in buckets] == [
        (100, 180), (180, 260), (260, 340), (340, 420), (420, 500),
    ]
    assert all(b["max"] - b["min"] == 80 for b in buckets)
    assert buckets[0]["label"] == "$100 - $180"


def test_price_buckets_single_price(db, make_listing):
    for _ in range(3):
        make_listing(price=100)
    assert facets.price_buckets(db) == [{"min": 100, "max": 100, "label": "$100 - $100"}]


def test_price_buckets_empty(db, make_listing):
    make_listing(price=100, is_active=False)
    assert facets.price_buckets(db) == []


def test_bucketize_labels_and_boundaries():
    bands = facets.bucketize([250000, 1250000])
    assert bands[0]["label"] == "$250,000 - $450,000"
    assert bands[-1]["label"] == "$1,050,000 - $1,250,000"
    assert bands[-1]["max"] == Decimal("1250000")
    for left, right in zip(bands, bands[1:]):
        assert left["max"] == right["min"]


def test_bucketize_rounds_labels():
    bands = facets.bucketize([0, 1001])
    assert bands[0]["label"] == "$0 - $200"
    assert bands[1]["label"] == "$200 - $400"
    assert bands[-1]["label"] == "$801 - $1,001"
