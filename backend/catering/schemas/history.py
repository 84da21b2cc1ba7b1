from pydantic import AliasChoices, BaseModel, Field
from typing import Optional
from datetime import datetime

from catering.models.order import OrderStatus
from catering.models.order_status_history import ContactMode


class StatusHistoryResponse(BaseModel):
    id: int
    order_id: int
    previous_status: Optional[OrderStatus] = None  # None for the creation entry
    new_status: OrderStatus
    actor: int = Field(validation_alias=AliasChoices("actor_id", "actor"))
    timestamp: datetime = Field(validation_alias=AliasChoices("changed_at", "timestamp"))
    cancellation_reason: Optional[str] = None
    contact_mode: Optional[ContactMode] = None

    class Config:
        from_attributes = True
