"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM model for the product catalog.

This module defines:
- Category: Enum of catalog categories
- Product: Product row model

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                           products                               │
    ├─────────────────────────────────────────────────────────────────┤
    │ id (INTEGER, PK, AUTO INCREMENT)                                │
    │ name (VARCHAR, NOT NULL)                                        │
    │ description (TEXT, NOT NULL, DEFAULT '')                        │
    │ category (ENUM: electronics, clothing, home, books, toys, misc) │
    │ price (NUMERIC(10, 2), NOT NULL)                                │
    │ inventory (INTEGER, NOT NULL, CHECK >= 0)                       │
    │ is_deleted (BOOLEAN, DEFAULT false)                             │
    │ created_at (DATETIME, SERVER DEFAULT now)                       │
    │ updated_at (DATETIME, SERVER DEFAULT now, AUTO UPDATE)          │
    └─────────────────────────────────────────────────────────────────┘

created_at and updated_at are owned by the database. is_deleted only ever
moves from false to true.

=============================================================================
"""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    false,
    func,
)

from app.db.database import Base


# =============================================================================
# ENUMS
# =============================================================================

class Category(str, enum.Enum):
    """
    Product category enumeration.

    The value is the stored label and also its text rendering, which is
    what the search query compares against.
    """

    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    HOME = "home"
    BOOKS = "books"
    TOYS = "toys"
    MISC = "misc"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value

    @classmethod
    def values(cls) -> list:
        """All category labels in declaration order."""
        return [member.value for member in cls]


# =============================================================================
# PRODUCT MODEL
# =============================================================================

class Product(Base):
    """
    Product catalog row.

    Attributes:
        id: Unique identifier (auto increment)
        name: Display name
        description: Free text description
        category: Catalog category
        price: Unit price
        inventory: Units in stock
        is_deleted: Soft-delete flag
        created_at: Row creation timestamp (database managed)
        updated_at: Last modification timestamp (database managed)
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("inventory >= 0", name="ck_products_inventory_non_negative"),
        Index("ix_products_live_updated", "is_deleted", "updated_at"),
    )

    # =========================================================================
    # COLUMNS
    # =========================================================================

    id: int = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique product identifier"
    )

    name: str = Column(
        String(255),
        nullable=False,
        doc="Product display name"
    )

    description: str = Column(
        Text,
        nullable=False,
        default="",
        server_default="",
        doc="Product description"
    )

    category: Category = Column(
        Enum(
            Category,
            name="category",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        index=True,
        doc="Catalog category"
    )

    price: Decimal = Column(
        Numeric(10, 2),
        nullable=False,
        doc="Unit price"
    )

    inventory: int = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="Units in stock"
    )

    is_deleted: bool = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        doc="Soft-delete flag (never reset once true)"
    )

    created_at: datetime = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        doc="Row creation timestamp"
    )

    updated_at: datetime = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        doc="Last modification timestamp"
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Product(id={self.id}, name={self.name!r}, "
            f"category={self.category}, deleted={self.is_deleted})>"
        )
