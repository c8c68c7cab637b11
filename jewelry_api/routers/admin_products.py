# jewelry_api/routers/admin_products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from jewelry_api.core.auth import get_current_admin
from jewelry_api.database import get_session
from jewelry_api.routers.products import service
from jewelry_api.schemas.common import ApiResponse
from jewelry_api.schemas.product import (
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductType,
    ProductUpdate,
)

router = APIRouter(
    prefix="/admin/products",
    tags=["Admin products"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=ApiResponse[ProductPage])
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    product_type: ProductType | None = None,
    is_active: bool | None = None,
    search: str | None = Query(None, max_length=100),
):
    """
    List all products, active or not.
    """
    return ApiResponse(
        data=service.list_products(
            session,
            page=page,
            limit=limit,
            product_type=product_type,
            is_active=is_active,
            search=search,
        )
    )


@router.post(
    "",
    response_model=ApiResponse[ProductRead],
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a product.

    The product code (CH001, BR001, ...) is allocated by the server from
    product_type and cannot be supplied.
    """
    product = service.create_product(session, payload)
    return ApiResponse(
        data=ProductRead.model_validate(product),
        message="Product created successfully",
    )


@router.get("/{product_id}", response_model=ApiResponse[ProductRead])
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    product = service.get_product(session, product_id)
    return ApiResponse(data=ProductRead.model_validate(product))


@router.patch("/{product_id}", response_model=ApiResponse[ProductRead])
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update. product_type and product_code are immutable.
    """
    product = service.update_product(session, product_id, payload)
    return ApiResponse(
        data=ProductRead.model_validate(product),
        message="Product updated successfully",
    )


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Hard delete. Existing orders keep their product snapshots.
    """
    service.delete_product(session, product_id)
    return ApiResponse(message="Product deleted successfully")
