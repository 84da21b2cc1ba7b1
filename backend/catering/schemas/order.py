from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime, time

from catering.models.order import OrderStatus
from catering.models.order_status_history import ContactMode


class OrderCreate(BaseModel):
    menu_id: int
    service_date: date = Field(alias="date_prestation")
    delivery_time: time = Field(alias="heure_livraison")  # "HH:MM"
    headcount: int = Field(alias="nombre_personne", ge=1)
    service_address: str = Field(alias="adresse_prestation", min_length=1, max_length=500)
    material_loan: bool = Field(default=False, alias="pret_materiel")
    material_returned: bool = Field(default=False, alias="restitution_materiel")

    class Config:
        populate_by_name = True

    @field_validator("service_address")
    @classmethod
    def address_not_blank(cls, v):
        if not v.strip():
            raise ValueError("adresse_prestation must not be blank")
        return v


class OrderUpdate(BaseModel):
    service_date: Optional[date] = Field(default=None, alias="date_prestation")
    delivery_time: Optional[time] = Field(default=None, alias="heure_livraison")
    headcount: Optional[int] = Field(default=None, alias="nombre_personne", ge=1)
    status: Optional[OrderStatus] = Field(default=None, alias="statut")
    material_loan: Optional[bool] = Field(default=None, alias="pret_materiel")
    material_returned: Optional[bool] = Field(default=None, alias="restitution_materiel")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for the update")
        return self

    def field_changes(self) -> dict:
        """Provided fields other than the status, keyed by model attribute."""
        return self.model_dump(exclude_unset=True, exclude_none=True, exclude={"status"})


class OrderStatusUpdate(BaseModel):
    status: OrderStatus = Field(alias="statut")

    class Config:
        populate_by_name = True


class StaffCancellation(BaseModel):
    reason: str = Field(alias="motif_annulation", min_length=1, max_length=500)
    contact_mode: ContactMode = Field(alias="mode_contact")

    class Config:
        populate_by_name = True


class OrderResponse(BaseModel):
    id: int
    order_number: str = Field(alias="numero_commande")
    order_date: date = Field(alias="date_commande")
    service_date: date = Field(alias="date_prestation")
    delivery_time: time = Field(alias="heure_livraison")
    headcount: int = Field(alias="nombre_personne")
    service_address: str = Field(alias="adresse_prestation")
    menu_price: float = Field(alias="prix_menu")
    delivery_fee: float = Field(alias="prix_livraison")
    total_price: float = Field(alias="prix_total")
    status: OrderStatus = Field(alias="statut")
    material_loan: bool = Field(alias="pret_materiel")
    material_returned: bool = Field(alias="restitution_materiel")
    user_id: int
    menu_id: Optional[int] = None
    menu_title: Optional[str] = Field(default=None, alias="menu_titre")
    price_per_person: Optional[float] = Field(default=None, alias="prix_par_personne")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class StaffOrderResponse(OrderResponse):
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class StatusChangeResponse(BaseModel):
    order: OrderResponse
    previous_status: OrderStatus
    new_status: OrderStatus
