from catering.schemas.order import (
    OrderCreate,
    OrderUpdate,
    OrderStatusUpdate,
    StaffCancellation,
    OrderResponse,
    StaffOrderResponse,
    StatusChangeResponse,
)
from catering.schemas.history import StatusHistoryResponse
from catering.schemas.statistics import (
    MenuOrderStats, MenuRevenue, RevenueReport, RelayResult, PopularMenu, OrderSummary,
)

__all__ = [
    "OrderCreate", "OrderUpdate", "OrderStatusUpdate", "StaffCancellation",
    "OrderResponse", "StaffOrderResponse", "StatusChangeResponse",
    "StatusHistoryResponse",
    "MenuOrderStats", "MenuRevenue", "RevenueReport", "RelayResult", "PopularMenu", "OrderSummary",
]
