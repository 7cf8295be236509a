# estate_filters/models.py
"""SQLAlchemy ORM models for persisted entities.

`FilterGroup` and `FilterValue` describe the facet catalogue, `Listing` holds
the columns the engine reads, and `ListingFilter` is the join table linking a
listing to the filter values assigned to it.
"""
from sqlalchemy import (
    Boolean, Column, ForeignKey, Index, Integer, JSON, Numeric, String, Text,
    TIMESTAMP, UniqueConstraint, func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from .db import Base

DATA_TYPES = ("string", "integer", "decimal", "boolean")


class FilterGroup(Base):
    __tablename__ = "filter_groups"
    id = Column(Integer, primary_key=True, index=True)
    page = Column(String(50), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    data_type = Column(String(20), nullable=False, default="string")
    is_multiple = Column(Boolean, nullable=False, default=False)
    is_required = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)
    description = Column(String(255))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    values = relationship(
        "FilterValue",
        back_populates="group",
        order_by="(FilterValue.display_order, FilterValue.id)",
    )
    active_values = relationship(
        "FilterValue",
        primaryjoin="and_(FilterGroup.id == FilterValue.filter_group_id, FilterValue.is_active == True)",
        order_by="(FilterValue.display_order, FilterValue.id)",
        viewonly=True,
    )

    def __repr__(self):
        return f"<FilterGroup {self.slug} page={self.page}>"


class FilterValue(Base):
    __tablename__ = "filter_values"
    id = Column(Integer, primary_key=True, index=True)
    filter_group_id = Column(Integer, ForeignKey("filter_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(String(255), nullable=False)
    label = Column(String(255), nullable=False)
    slug = Column(String(255))
    color = Column(String(7))
    icon = Column(String(100))
    description = Column(Text)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    # `metadata` is reserved on declarative classes
    extra = Column("metadata", JSON().with_variant(JSONB, "postgresql"))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    group = relationship("FilterGroup", back_populates="values")

    def __repr__(self):
        return f"<FilterValue {self.value} group={self.filter_group_id}>"


class Listing(Base):
    __tablename__ = "listings"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text)
    slug = Column(String(255), unique=True)
    description = Column(Text)
    price = Column(Numeric(12, 2))
    price_type = Column(String(20), default="sale")
    bedrooms = Column(Integer)
    bathrooms = Column(Numeric(3, 1))
    square_footage = Column(Integer)
    address = Column(Text)
    neighborhood = Column(String(100))
    city = Column(String(100))
    state = Column(String(100))
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    published_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    filters = relationship("ListingFilter", back_populates="listing")


class ListingFilter(Base):
    __tablename__ = "listing_filters"
    __table_args__ = (
        UniqueConstraint("listing_id", "filter_group_id", "filter_value_id", name="listing_filter_unique"),
    )
    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False)
    filter_group_id = Column(Integer, ForeignKey("filter_groups.id", ondelete="CASCADE"), nullable=False)
    filter_value_id = Column(Integer, ForeignKey("filter_values.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    listing = relationship("Listing", back_populates="filters")
    value = relationship("FilterValue")

Index("idx_filter_groups_page_active", FilterGroup.page, FilterGroup.is_active)
Index("idx_filter_values_group_order", FilterValue.filter_group_id, FilterValue.display_order)
Index("idx_listing_filters_listing_group", ListingFilter.listing_id, ListingFilter.filter_group_id)
Index("idx_listing_filters_group_value", ListingFilter.filter_group_id, ListingFilter.filter_value_id)
Index("idx_listings_price", Listing.price)
Index("idx_listings_city", Listing.city)
