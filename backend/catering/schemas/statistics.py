from pydantic import BaseModel
from typing import Dict, List, Optional

from catering.schemas.order import StaffOrderResponse


class MenuOrderStats(BaseModel):
    menu_id: int
    menu_title: str
    total_orders: int
    total_revenue: float


class MenuRevenue(BaseModel):
    menu_id: int
    menu_title: str
    total_revenue: float
    order_count: int


class RevenueFilters(BaseModel):
    menu_id: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class RevenueReport(BaseModel):
    results: List[MenuRevenue]
    total: float
    filters: RevenueFilters


class RelayResult(BaseModel):
    dispatched: int


class PopularMenu(BaseModel):
    menu_id: int
    menu_title: str
    order_count: int
    revenue: float


class OrderSummary(BaseModel):
    period: str
    total_orders: int
    revenue: float
    average_basket: float
    completed: int
    cancelled: int
    by_status: Dict[str, int]
    popular_menus: List[PopularMenu]
    pending_orders: List[StaffOrderResponse]
