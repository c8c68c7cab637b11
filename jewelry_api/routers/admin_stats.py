# jewelry_api/routers/admin_stats.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from jewelry_api.core.auth import get_current_admin
from jewelry_api.database import get_session
from jewelry_api.repositories.stats_repo import StatsRepository
from jewelry_api.schemas.common import ApiResponse
from jewelry_api.schemas.stats import DashboardStats, MonthlyTrend, NetRevenue, TopProduct
from jewelry_api.services.stats_service import StatsService

router = APIRouter(
    prefix="/admin/stats",
    tags=["Admin stats"],
    dependencies=[Depends(get_current_admin)],
)

repo = StatsRepository()
service = StatsService(repo)


@router.get("/dashboard", response_model=ApiResponse[DashboardStats])
def get_dashboard(session: Session = Depends(get_session)):
    """
    Aggregated statistics for the admin dashboard:

      - total revenue (cancelled orders excluded), active products, orders
      - current vs previous calendar month revenue and growth in percent
      - the 5 most recent orders
    """
    return ApiResponse(
        data=service.get_dashboard(session),
        message="Dashboard statistics retrieved successfully",
    )


@router.get("/net-revenue", response_model=ApiResponse[NetRevenue])
def get_net_revenue(session: Session = Depends(get_session)):
    """Revenue minus expenses, with the profit margin."""
    return ApiResponse(data=service.get_net_revenue(session))


@router.get("/monthly-trends", response_model=ApiResponse[list[MonthlyTrend]])
def get_monthly_trends(
    session: Session = Depends(get_session),
    months: int = Query(12, ge=1, le=24),
):
    return ApiResponse(data=service.get_monthly_trends(session, months=months))


@router.get("/top-products", response_model=ApiResponse[list[TopProduct]])
def get_top_products(
    session: Session = Depends(get_session),
    limit: int = Query(10, ge=1, le=50),
):
    """Best-selling products by revenue."""
    return ApiResponse(data=service.get_top_products(session, limit=limit))
