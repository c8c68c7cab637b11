# jewelry_api/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from jewelry_api.core.config import get_settings
from jewelry_api.database import get_session
from jewelry_api.repositories.code_sequence_repo import CodeSequenceRepository
from jewelry_api.repositories.product_repo import ProductRepository
from jewelry_api.schemas.common import ApiResponse
from jewelry_api.schemas.product import ProductPage, ProductRead, ProductType
from jewelry_api.services.code_service import CodeAllocator
from jewelry_api.services.product_service import ProductService

settings = get_settings()

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(
    repo,
    CodeAllocator(CodeSequenceRepository(), settings.CODE_ALLOCATION_MAX_ATTEMPTS),
)


# -------- Public endpoints --------


@router.get("", response_model=ApiResponse[ProductPage])
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    product_type: ProductType | None = None,
    search: str | None = Query(None, max_length=100),
):
    """
    List active products.

    - Public endpoint; inactive products are never returned.
    """
    return ApiResponse(
        data=service.list_public(
            session, page=page, limit=limit, product_type=product_type, search=search
        )
    )


@router.get("/code/{product_code}", response_model=ApiResponse[ProductRead])
def get_product_by_code(
    product_code: str,
    session: Session = Depends(get_session),
):
    """
    Get an active product by its code (e.g. CH001).
    """
    product = service.get_public_by_code(session, product_code)
    return ApiResponse(data=ProductRead.model_validate(product))


@router.get("/{product_id}", response_model=ApiResponse[ProductRead])
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single active product by id.
    """
    product = service.get_public(session, product_id)
    return ApiResponse(data=ProductRead.model_validate(product))
