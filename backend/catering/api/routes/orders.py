from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from catering.core.database import get_db, get_session_factory
from catering.core.security import Principal
from catering.api.deps import get_current_user, get_notifier, get_stats_aggregator
from catering.schemas.order import OrderCreate, OrderUpdate, OrderResponse
from catering.schemas.history import StatusHistoryResponse
from catering.services.events import dispatch_order_events
from catering.services.lifecycle import OrderLifecycleController, OrderRequest
from catering.services.notifications import Notifier, order_summary, recipient_for, send_notification
from catering.services.stats import MenuStatsAggregator

router = APIRouter()


@router.get("/", response_model=List[OrderResponse])
async def list_my_orders(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user)
):
    """List the current user's orders, most recent first."""
    return OrderLifecycleController(db).list_orders(principal)


@router.get("/{order_id}/history", response_model=List[StatusHistoryResponse])
async def get_order_history(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user)
):
    """
    Status timeline of one of the current user's orders.

    Only available once staff have accepted the order.
    """
    return OrderLifecycleController(db).get_tracking(principal, order_id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user)
):
    """Get one of the current user's orders."""
    return OrderLifecycleController(db).get_order(principal, order_id)


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user),
    aggregator: MenuStatsAggregator = Depends(get_stats_aggregator),
    notifier: Notifier = Depends(get_notifier),
    session_factory=Depends(get_session_factory),
):
    """
    Place an order for a menu.

    The order is priced, stored as pending and recorded in the history.
    Statistics and the confirmation notice follow in the background.
    """
    order = OrderLifecycleController(db).create_order(
        principal, OrderRequest(**order_data.model_dump())
    )

    background_tasks.add_task(dispatch_order_events, session_factory, aggregator)
    background_tasks.add_task(
        send_notification, notifier, "order_confirmed", recipient_for(order.user), order_summary(order)
    )
    return order


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    order_data: OrderUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user)
):
    """Modify a pending order. Changing the headcount re-prices the menu."""
    return OrderLifecycleController(db).update_order(
        principal, order_id, order_data.field_changes(), new_status=order_data.status
    )


@router.delete("/{order_id}", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user)
):
    """Cancel a pending order. The order is kept with status "cancelled"."""
    return OrderLifecycleController(db).cancel_order(principal, order_id)
