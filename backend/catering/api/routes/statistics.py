from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, Query

from catering.api.deps import require_admin, get_stats_aggregator
from catering.schemas.statistics import MenuOrderStats, RevenueReport
from catering.services.stats import MenuStatsAggregator

router = APIRouter()


@router.get("/orders-by-menu", response_model=List[MenuOrderStats], dependencies=[Depends(require_admin)])
async def get_orders_by_menu(
    aggregator: MenuStatsAggregator = Depends(get_stats_aggregator)
):
    """Order count and revenue per menu across all days, for comparison charts."""
    return aggregator.orders_by_menu()


@router.get("/revenue", response_model=RevenueReport, dependencies=[Depends(require_admin)])
async def get_revenue(
    menu_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    aggregator: MenuStatsAggregator = Depends(get_stats_aggregator)
):
    """Revenue per menu, optionally restricted to a menu and a service-date window."""
    return aggregator.revenue(menu_id=menu_id, start_date=start_date, end_date=end_date)
