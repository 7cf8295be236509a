# estate_filters/schemas.py
from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from decimal import Decimal

DataType = Literal["string", "integer", "decimal", "boolean"]

def _reject_nulls(model, fields):
    nulls = [f for f in fields if f in model.model_fields_set and getattr(model, f) is None]
    if nulls:
        raise ValueError(f"{', '.join(nulls)} cannot be null")
    return model


class FilterGroupCreate(BaseModel):
    page: str = Field(..., max_length=50)
    name: str = Field(..., max_length=100)
    slug: str = Field(..., max_length=100)
    data_type: DataType
    is_multiple: bool = False
    is_required: bool = False
    is_active: bool = True
    display_order: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None

class FilterGroupUpdate(BaseModel):
    page: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    data_type: Optional[DataType] = None
    is_multiple: Optional[bool] = None
    is_required: Optional[bool] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None

    @model_validator(mode="after")
    def check_not_null(self):
        return _reject_nulls(self, ("page", "name", "slug", "data_type", "is_multiple",
                                    "is_required", "is_active", "display_order"))

class FilterValueFields(BaseModel):
    value: str = Field(..., max_length=255)
    label: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = Field(None, max_length=7, pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_active: bool = True
    metadata: Optional[Dict[str, Any]] = None

class FilterValueCreate(FilterValueFields):
    filter_group_id: int
    label: str = Field(..., max_length=255)

class FilterValueBulkCreate(BaseModel):
    filter_group_id: int
    values: List[FilterValueFields] = Field(..., min_length=1)

class FilterValueUpdate(BaseModel):
    filter_group_id: Optional[int] = None
    value: Optional[str] = Field(None, max_length=255)
    label: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    color: Optional[str] = Field(None, max_length=7, pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_not_null(self):
        return _reject_nulls(self, ("filter_group_id", "value", "label", "display_order", "is_active"))

class FilterValueOut(BaseModel):
    id: int
    filter_group_id: int
    value: str
    label: str
    slug: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    display_order: int
    is_active: bool
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="extra")
    class Config:
        from_attributes = True

class FilterGroupOut(BaseModel):
    id: int
    page: str
    name: str
    slug: str
    data_type: str
    is_multiple: bool
    is_required: bool
    is_active: bool
    display_order: int
    description: Optional[str] = None
    active_values: List[FilterValueOut] = []
    class Config:
        from_attributes = True

class FilterValueCount(BaseModel):
    id: int
    filter_group_id: int
    value: str
    label: str
    display_order: int
    listings_count: int

class UsageStat(BaseModel):
    filter_value_id: int
    usage_count: int

class Reorder(BaseModel):
    order: List[int]

class ListingFilters(BaseModel):
    """Scalar filters ANDed on top of the facet selection."""
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[Decimal] = Field(None, ge=0)
    city: Optional[str] = None
    state: Optional[str] = None
    featured: bool = False
    search: Optional[str] = None
    sort: Optional[str] = None

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self

class ListingOut(BaseModel):
    id: int
    title: Optional[str] = None
    slug: Optional[str] = None
    price: Optional[Decimal] = None
    price_type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[Decimal] = None
    square_footage: Optional[int] = None
    city: Optional[str] = None
    state: Optional[str] = None
    is_featured: bool
    published_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class ListingPage(BaseModel):
    total: int
    page: int
    page_size: int
    last_page: int
    items: List[ListingOut]

class PriceBucket(BaseModel):
    min: Decimal
    max: Decimal
    label: str

class ListingStats(BaseModel):
    total_listings: int
    published_listings: int
    featured_listings: int
    average_price: Optional[Decimal] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
