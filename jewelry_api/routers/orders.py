# jewelry_api/routers/orders.py
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from jewelry_api.core.config import get_settings
from jewelry_api.core.rate_limit import RateLimiter
from jewelry_api.core.recaptcha import RecaptchaVerifier, get_recaptcha_verifier
from jewelry_api.core.whatsapp import WhatsAppNotifier
from jewelry_api.database import get_session
from jewelry_api.repositories.code_sequence_repo import CodeSequenceRepository
from jewelry_api.repositories.order_repo import OrderRepository
from jewelry_api.repositories.product_repo import ProductRepository
from jewelry_api.schemas.common import ApiResponse
from jewelry_api.schemas.order import OrderReceipt, OrderTracking, PublicOrderCreate
from jewelry_api.services.code_service import CodeAllocator
from jewelry_api.services.order_service import OrderService

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

allocator = CodeAllocator(
    CodeSequenceRepository(),
    max_attempts=settings.CODE_ALLOCATION_MAX_ATTEMPTS,
)
service = OrderService(
    OrderRepository(),
    ProductRepository(),
    allocator,
    WhatsAppNotifier(settings.WHATSAPP_BUSINESS_PHONE),
    estimated_delivery=settings.ORDER_ESTIMATED_DELIVERY,
)

order_limiter = RateLimiter(
    "orders",
    max_requests=settings.ORDER_RATE_LIMIT,
    window_seconds=settings.ORDER_RATE_WINDOW_SECONDS,
    message="Too many orders from this IP, please try again later",
)


# -------- Public endpoints --------


@router.post(
    "",
    response_model=ApiResponse[OrderReceipt],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(order_limiter)],
)
def create_order(
    payload: PublicOrderCreate,
    request: Request,
    session: Session = Depends(get_session),
    verifier: RecaptchaVerifier = Depends(get_recaptcha_verifier),
):
    """
    Place an order from the storefront.

    - No authentication; rate-limited per IP.
    - Prices come from the catalog, never from the client.
    - New orders start as payment_pending.
    """
    receipt = service.create_public_order(
        session,
        payload,
        verifier,
        remote_ip=request.client.host if request.client else None,
    )
    return ApiResponse(
        data=receipt,
        message="Order created successfully! We will contact you soon with payment details.",
    )


@router.get(
    "/track/{order_code}",
    response_model=ApiResponse[OrderTracking],
)
def track_order(
    order_code: str,
    session: Session = Depends(get_session),
):
    """
    Public order status by order code (e.g. ORD001).
    """
    return ApiResponse(data=service.track_order(session, order_code))
