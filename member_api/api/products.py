"""
Product catalogue endpoints.

All routes require authentication.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from member_api.api.schemas import (
    CreateProductRequest,
    ProductResponse,
    UpdateProductRequest,
)
from member_api.auth import RequireAuth
from member_api.core import ProductNotFoundError
from member_api.db import get_db
from member_api.db.repositories import (
    create_product,
    get_product_by_id,
    list_products,
    soft_delete_product,
    update_product,
)

router = APIRouter(prefix="/api/v1", tags=["products"])


@router.get("/products")
def get_products(
    _auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> dict[str, Any]:
    """List products with limit/offset paging."""
    products, total = list_products(db, limit=limit, offset=offset)
    return {
        "products": [ProductResponse.model_validate(p).model_dump() for p in products],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/product/{product_id}")
def get_product(
    product_id: int,
    _auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """Get a single product by ID."""
    product = get_product_by_id(db, product_id)
    if product is None:
        raise ProductNotFoundError()
    return {"product": ProductResponse.model_validate(product).model_dump()}


@router.post("/product", status_code=status.HTTP_201_CREATED)
def create_product_endpoint(
    body: CreateProductRequest,
    auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """Create a product."""
    member, _ = auth
    product = create_product(
        db,
        product_name=body.product_name,
        product_price=body.product_price,
        product_stock=body.product_stock,
        product_description=body.product_description,
        product_image=body.product_image,
        creator_id=member.id,
    )
    return {"product": ProductResponse.model_validate(product).model_dump()}


@router.put("/product/{product_id}")
def update_product_endpoint(
    product_id: int,
    body: UpdateProductRequest,
    auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, Any]:
    """Partially update a product; omitted fields are left unchanged."""
    member, _ = auth
    product = get_product_by_id(db, product_id)
    if product is None:
        raise ProductNotFoundError()

    product = update_product(
        db,
        product,
        body.model_dump(exclude_none=True),
        modifier_id=member.id,
    )
    return {"product": ProductResponse.model_validate(product).model_dump()}


@router.delete("/product/{product_id}")
def delete_product(
    product_id: int,
    auth: RequireAuth,
    db: Annotated[Session, Depends(get_db)],
) -> dict[str, str]:
    """Soft-delete a product."""
    member, _ = auth
    if not soft_delete_product(db, product_id, deleter_id=member.id):
        raise ProductNotFoundError()
    return {"message": "Product deleted"}
