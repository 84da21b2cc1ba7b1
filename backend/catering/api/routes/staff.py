from typing import List, Optional
from datetime import date
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from catering.core.database import get_db
from catering.core.security import Principal
from catering.api.deps import require_staff, get_notifier, get_stats_aggregator
from catering.models.order import OrderStatus
from catering.schemas.order import (
    OrderStatusUpdate,
    StaffCancellation,
    StaffOrderResponse,
    StatusChangeResponse,
    OrderResponse,
)
from catering.schemas.history import StatusHistoryResponse
from catering.schemas.statistics import OrderSummary, RelayResult
from catering.services.events import relay_pending_events
from catering.services.lifecycle import OrderLifecycleController
from catering.services.order_repository import ReportPeriod
from catering.services.notifications import Notifier, order_summary, recipient_for, send_notification
from catering.services.stats import MenuStatsAggregator

router = APIRouter()


@router.get("/orders", response_model=List[StaffOrderResponse])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    user_id: Optional[int] = Query(None, description="Filter by customer"),
    start_date: Optional[date] = Query(None, description="First service date"),
    end_date: Optional[date] = Query(None, description="Last service date"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff)
):
    """List all orders, most recent first."""
    return OrderLifecycleController(db).list_all_orders(
        principal,
        status=status_filter,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )


@router.get("/orders/{order_id}/history", response_model=List[StatusHistoryResponse])
async def get_order_history(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff)
):
    """Full status history of any order."""
    return OrderLifecycleController(db).staff_history(principal, order_id)


@router.put("/orders/{order_id}/status", response_model=StatusChangeResponse)
async def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Move an order to its next status.

    Entering "awaiting_material_return" asks the customer to bring the
    loaned material back.
    """
    order, previous = OrderLifecycleController(db).transition(principal, order_id, status_data.status)

    if order.status == OrderStatus.AWAITING_MATERIAL_RETURN:
        background_tasks.add_task(
            send_notification, notifier, "material_return_requested",
            recipient_for(order.user), order_summary(order)
        )

    return StatusChangeResponse(
        order=OrderResponse.model_validate(order),
        previous_status=previous,
        new_status=order.status,
    )


@router.post("/orders/{order_id}/cancel", response_model=StaffOrderResponse)
async def cancel_order(
    order_id: int,
    cancellation: StaffCancellation,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff)
):
    """Cancel a pending order on the customer's behalf, recording the reason."""
    return OrderLifecycleController(db).staff_cancel(
        principal, order_id, cancellation.reason, cancellation.contact_mode
    )


@router.post("/events/relay", response_model=RelayResult)
async def relay_events(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff),
    aggregator: MenuStatsAggregator = Depends(get_stats_aggregator),
):
    """Push pending order events to the statistics store now."""
    return RelayResult(dispatched=relay_pending_events(db, aggregator))


@router.get("/statistics", response_model=OrderSummary)
async def get_order_summary(
    period: Optional[ReportPeriod] = Query(None, description="day, week (since Monday), month or year"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_staff)
):
    """
    Dashboard figures from the order records: counts by status, revenue,
    average basket and most-ordered menus over the period, plus the most
    recent orders still waiting for acceptance.
    """
    return OrderLifecycleController(db).staff_summary(principal, period)
