# jewelry_api/services/stats_service.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import Session

from jewelry_api.repositories.stats_repo import StatsRepository
from jewelry_api.schemas.common import as_utc
from jewelry_api.schemas.stats import (
    DashboardStats,
    MonthlyTrend,
    NetRevenue,
    RecentOrder,
    TopProduct,
)

UNKNOWN_PRODUCT = "Unknown product"


def month_start(year: int, month: int, delta: int = 0) -> datetime:
    """
    First instant (UTC) of the month `delta` months away from year/month.
    """
    index = year * 12 + (month - 1) + delta
    return datetime(index // 12, index % 12 + 1, 1, tzinfo=timezone.utc)


def month_key(value: datetime) -> str:
    value = as_utc(value)
    return f"{value.year:04d}-{value.month:02d}"


def _percent(part: Decimal, whole: Decimal) -> float:
    if not whole:
        return 0.0
    return round(float(part / whole * 100), 2)


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics and analytics.

    `now` can be passed in for deterministic month boundaries.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_dashboard(
        self,
        session: Session,
        recent_limit: int = 5,
        now: datetime | None = None,
    ) -> DashboardStats:
        now = as_utc(now) if now else datetime.now(timezone.utc)
        current_start = month_start(now.year, now.month)
        previous_start = month_start(now.year, now.month, -1)

        current = self.repo.revenue(session, start=current_start)
        previous = self.repo.revenue(session, start=previous_start, end=current_start)

        orders = self.repo.latest_orders(session, limit=recent_limit)
        first_items = self.repo.first_item_snapshots(session, [o.id for o in orders])
        recent_orders = [
            RecentOrder(
                id=o.id,
                order_number=o.order_number,
                order_code=o.order_code,
                customer_name=o.customer_name,
                item_name=first_items.get(o.id, {}).get("name") or UNKNOWN_PRODUCT,
                total_amount=o.total_amount,
                status=o.status,
                created_at=o.created_at,
            )
            for o in orders
        ]

        return DashboardStats(
            total_revenue=self.repo.revenue(session),
            total_products=self.repo.count_active_products(session),
            total_orders=self.repo.count_orders(session),
            current_month_revenue=current,
            previous_month_revenue=previous,
            revenue_growth=_percent(current - previous, previous),
            recent_orders=recent_orders,
        )

    def get_net_revenue(self, session: Session) -> NetRevenue:
        revenue = self.repo.revenue(session)
        expenses = self.repo.total_expenses(session)
        net = revenue - expenses
        return NetRevenue(
            total_revenue=revenue,
            total_expenses=expenses,
            net_revenue=net,
            profit_margin_percentage=_percent(net, revenue),
        )

    def get_monthly_trends(
        self,
        session: Session,
        months: int = 12,
        now: datetime | None = None,
    ) -> list[MonthlyTrend]:
        """
        One entry per calendar month, oldest first, ending with the current
        month. Months without activity are reported as zeros.
        """
        now = as_utc(now) if now else datetime.now(timezone.utc)
        since = month_start(now.year, now.month, -(months - 1))

        buckets: dict[str, dict] = {}
        for i in range(months):
            start = month_start(since.year, since.month, i)
            buckets[month_key(start)] = {
                "revenue": Decimal("0"),
                "expenses": Decimal("0"),
                "order_count": 0,
            }

        for created_at, amount in self.repo.order_amounts_since(session, since):
            bucket = buckets.get(month_key(created_at))
            if bucket is not None:
                bucket["revenue"] += Decimal(str(amount))
                bucket["order_count"] += 1

        for expense_date, amount in self.repo.expense_amounts_since(session, since):
            bucket = buckets.get(month_key(expense_date))
            if bucket is not None:
                bucket["expenses"] += Decimal(str(amount))

        return [
            MonthlyTrend(
                month=month,
                revenue=data["revenue"],
                expenses=data["expenses"],
                net_profit=data["revenue"] - data["expenses"],
                order_count=data["order_count"],
            )
            for month, data in buckets.items()
        ]

    def get_top_products(self, session: Session, limit: int = 10) -> list[TopProduct]:
        rows = self.repo.top_products(session, limit=limit)
        snapshots = self.repo.latest_snapshots(session, [row[0] for row in rows])

        top: list[TopProduct] = []
        for product_id, total_sold, revenue, order_count in rows:
            snapshot = snapshots.get(product_id, {})
            revenue = Decimal(str(revenue or 0))
            total_sold = int(total_sold or 0)
            top.append(
                TopProduct(
                    product_id=product_id,
                    product_code=snapshot.get("product_code"),
                    name=snapshot.get("name") or UNKNOWN_PRODUCT,
                    total_sold=total_sold,
                    revenue=revenue,
                    average_price=(
                        (revenue / total_sold).quantize(Decimal("0.01"))
                        if total_sold
                        else Decimal("0")
                    ),
                    order_count=int(order_count or 0),
                )
            )
        return top
