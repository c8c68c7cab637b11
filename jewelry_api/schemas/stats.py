# jewelry_api/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from sqlmodel import SQLModel

from jewelry_api.schemas.common import Money
from jewelry_api.schemas.order import OrderStatus


class RecentOrder(SQLModel):
    """
    Lightweight info for the latest orders on the dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    order_number: str
    order_code: str
    customer_name: str
    item_name: str
    total_amount: Money
    status: OrderStatus
    created_at: datetime


class DashboardStats(BaseModel):
    """
    Headline numbers for the admin dashboard.

    revenue_growth is the percentage change of the current calendar month
    (UTC) over the previous one; 0 when the previous month had no revenue.
    """

    total_revenue: Money
    total_products: int
    total_orders: int
    current_month_revenue: Money
    previous_month_revenue: Money
    revenue_growth: float
    recent_orders: list[RecentOrder]


class NetRevenue(BaseModel):
    total_revenue: Money
    total_expenses: Money
    net_revenue: Money
    profit_margin_percentage: float


class MonthlyTrend(BaseModel):
    month: str  # YYYY-MM
    revenue: Money
    expenses: Money
    net_profit: Money
    order_count: int


class TopProduct(BaseModel):
    """
    Sales of one product across non-cancelled orders.
    """

    product_id: uuid.UUID
    product_code: str | None
    name: str
    total_sold: int
    revenue: Money
    average_price: Money
    order_count: int
