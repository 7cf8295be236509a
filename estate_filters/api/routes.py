# estate_filters/api/routes.py
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from .. import crud, facets, query, schemas, services, similar
from ..db import get_db

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}

# -- filter groups -----------------------------------------------------------

@router.get("/filters/groups", response_model=List[schemas.FilterGroupOut])
def list_groups(page: str = Query(..., max_length=50), db: Session = Depends(get_db)):
    return crud.list_groups(db, page)


@router.post("/filters/groups", response_model=schemas.FilterGroupOut, status_code=201)
def create_group(payload: schemas.FilterGroupCreate, db: Session = Depends(get_db)):
    return crud.create_group(db, payload.model_dump())


@router.post("/filters/groups/reorder")
def reorder_groups(payload: schemas.Reorder, db: Session = Depends(get_db)):
    crud.reorder_groups(db, payload.order)
    return {"status": "reordered"}


@router.get("/filters/groups/{group_id}", response_model=schemas.FilterGroupOut)
def get_group(group_id: int, db: Session = Depends(get_db)):
    return crud.get_group(db, group_id)


@router.patch("/filters/groups/{group_id}", response_model=schemas.FilterGroupOut)
def update_group(group_id: int, payload: schemas.FilterGroupUpdate, db: Session = Depends(get_db)):
    return crud.update_group(db, group_id, payload.model_dump(exclude_unset=True))


@router.delete("/filters/groups/{group_id}")
def delete_group(group_id: int, db: Session = Depends(get_db)):
    crud.delete_group(db, group_id)
    return {"status": "deleted"}


@router.get("/filters/groups/{group_id}/values", response_model=List[schemas.FilterValueOut])
def list_values(group_id: int, db: Session = Depends(get_db)):
    return crud.list_values(db, group_id)

# -- filter values -----------------------------------------------------------

@router.post("/filters/values", response_model=schemas.FilterValueOut, status_code=201)
def create_value(payload: schemas.FilterValueCreate, db: Session = Depends(get_db)):
    return crud.create_value(db, payload.model_dump())


@router.post("/filters/values/bulk", response_model=List[schemas.FilterValueOut], status_code=201)
def bulk_create_values(payload: schemas.FilterValueBulkCreate, db: Session = Depends(get_db)):
    values = [v.model_dump(exclude_unset=True) for v in payload.values]
    return crud.bulk_create_values(db, payload.filter_group_id, values)


@router.post("/filters/values/reorder")
def reorder_values(payload: schemas.Reorder, db: Session = Depends(get_db)):
    crud.reorder_values(db, payload.order)
    return {"status": "reordered"}


@router.get("/filters/values/search", response_model=List[schemas.FilterValueOut])
def search_values(
    q: str = Query(..., min_length=1),
    filter_group_id: Optional[int] = Query(None),
    db: Session = Depends(get_db)
):
    return crud.search_values(db, q, filter_group_id)


@router.get("/filters/values/{value_id}", response_model=schemas.FilterValueOut)
def get_value(value_id: int, db: Session = Depends(get_db)):
    return crud.get_value(db, value_id)


@router.patch("/filters/values/{value_id}", response_model=schemas.FilterValueOut)
def update_value(value_id: int, payload: schemas.FilterValueUpdate, db: Session = Depends(get_db)):
    return crud.update_value(db, value_id, payload.model_dump(exclude_unset=True))


@router.delete("/filters/values/{value_id}")
def delete_value(value_id: int, db: Session = Depends(get_db)):
    crud.delete_value(db, value_id)
    return {"status": "deleted"}

# -- aggregates --------------------------------------------------------------

@router.get("/filters/counts", response_model=List[schemas.FilterValueCount])
def value_counts(page: str = Query(..., max_length=50), db: Session = Depends(get_db)):
    return facets.value_counts_for_page(db, page)


@router.get("/filters/usage", response_model=List[schemas.UsageStat])
def usage_stats(filter_group_id: Optional[int] = Query(None), db: Session = Depends(get_db)):
    return facets.usage_stats(db, filter_group_id)

# -- listings ----------------------------------------------------------------

@router.get("/listings", response_model=schemas.ListingPage)
def listings(
    filters: Optional[str] = Query(None, description='JSON object, e.g. {"3": [7, 8]}'),
    min_price: Optional[str] = Query(None),
    max_price: Optional[str] = Query(None),
    bedrooms: Optional[str] = Query(None),
    bathrooms: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    featured: bool = Query(False),
    search: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    page: int = 1,
    per_page: Optional[int] = None,
    db: Session = Depends(get_db)
):
    scalar = {
        "min_price": min_price,
        "max_price": max_price,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "city": city,
        "state": state,
        "featured": featured,
        "search": search,
        "sort": sort,
    }
    return services.search_listings(db, filters, scalar, page=page, page_size=per_page)


@router.get("/listings/price-ranges", response_model=List[schemas.PriceBucket])
def price_ranges(db: Session = Depends(get_db)):
    return facets.price_buckets(db)


@router.get("/listings/featured", response_model=List[schemas.ListingOut])
def featured(limit: int = 6, db: Session = Depends(get_db)):
    return query.featured_listings(db, limit)


@router.get("/listings/stats", response_model=schemas.ListingStats)
def stats(db: Session = Depends(get_db)):
    return facets.listing_stats(db)


@router.get("/listings/{listing_id}/similar", response_model=List[schemas.ListingOut])
def similar_listings(listing_id: int, limit: int = similar.DEFAULT_LIMIT, db: Session = Depends(get_db)):
    return similar.similar_to(db, listing_id, limit)


@router.get("/listings/{listing_id}/filters", response_model=List[schemas.FilterValueOut])
def listing_filters(listing_id: int, filter_group_id: Optional[int] = None, db: Session = Depends(get_db)):
    return crud.listing_filter_values(db, listing_id, filter_group_id)


@router.put("/listings/{listing_id}/filters")
def sync_filters(listing_id: int, selection: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    rows = services.assign_filters(db, listing_id, selection)
    return {"status": "synced", "count": len(rows)}
