"""
Product repository for database operations.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from member_api.core.time import utcnow
from member_api.db.models import Product

UPDATABLE_FIELDS = frozenset(
    {
        "product_name",
        "product_price",
        "product_description",
        "product_image",
        "product_stock",
    }
)


def get_product_by_id(db: Session, product_id: int) -> Product | None:
    """Get a non-deleted product by ID."""
    stmt = select(Product).where(Product.id == product_id, Product.is_deleted.is_(False))
    return db.execute(stmt).scalar_one_or_none()


def list_products(db: Session, limit: int = 50, offset: int = 0) -> tuple[list[Product], int]:
    """
    List non-deleted products.

    Returns:
        Tuple of (page of products, total live product count).
    """
    stmt = (
        select(Product)
        .where(Product.is_deleted.is_(False))
        .order_by(Product.id)
        .limit(limit)
        .offset(offset)
    )
    total_stmt = select(func.count(Product.id)).where(Product.is_deleted.is_(False))
    products = list(db.execute(stmt).scalars())
    total = db.execute(total_stmt).scalar_one()
    return products, total


def create_product(
    db: Session,
    product_name: str,
    product_price: Decimal,
    product_stock: int,
    product_description: str = "",
    product_image: str = "",
    creator_id: int | None = None,
) -> Product:
    """Create a new product."""
    product = Product(
        product_name=product_name,
        product_price=product_price,
        product_description=product_description,
        product_image=product_image,
        product_stock=product_stock,
        creator_id=creator_id,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(
    db: Session,
    product: Product,
    updates: dict[str, Any],
    modifier_id: int | None = None,
) -> Product:
    """
    Apply a partial update.

    Unknown keys are ignored; only ``UPDATABLE_FIELDS`` are written.
    """
    for field, value in updates.items():
        if field in UPDATABLE_FIELDS:
            setattr(product, field, value)
    product.last_modifier_id = modifier_id
    db.commit()
    db.refresh(product)
    return product


def soft_delete_product(db: Session, product_id: int, deleter_id: int | None = None) -> bool:
    """Mark a product as deleted. Returns False if no live product matched."""
    now = utcnow()
    stmt = (
        update(Product)
        .where(Product.id == product_id, Product.is_deleted.is_(False))
        .values(
            is_deleted=True,
            deleted_at=now,
            last_modifier_id=deleter_id,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0
