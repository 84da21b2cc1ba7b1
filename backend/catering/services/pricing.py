"""
Pricing Engine

Computes the price of a catering order:
- Menu price = price per person x headcount
- 10% off the menu price once the headcount reaches the menu minimum + 5
- Flat delivery fee when delivering outside the customer's home address/city

Pure computation, no database access. Callers validate the headcount
against the menu minimum beforehand.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from catering.config import get_settings

settings = get_settings()


@dataclass(frozen=True)
class DeliveryContext:
    """Where the order is served versus where the customer lives."""
    service_address: str
    customer_address: Optional[str]
    customer_city: Optional[str]


@dataclass(frozen=True)
class PriceQuote:
    base_price: float       # Before discount
    menu_price: float       # After discount
    discount_applied: bool
    delivery_fee: float

    @property
    def discount_amount(self) -> float:
        return round(self.base_price - self.menu_price, 2)

    @property
    def total(self) -> float:
        return round(self.menu_price + self.delivery_fee, 2)


class DeliveryFeeStrategy(ABC):
    """Computes the delivery fee for an order."""

    @abstractmethod
    def fee(self, context: DeliveryContext) -> float:
        ...


class FlatDeliveryFee(DeliveryFeeStrategy):
    """
    Flat fee whenever delivery leaves the business's home turf.

    Stands in for distance-based pricing: the fee is charged if the service
    address differs from the customer's postal address, or the customer does
    not live in the home city.
    """

    def __init__(self, flat_fee: float = None, home_city: str = None):
        self.flat_fee = settings.delivery_flat_fee if flat_fee is None else flat_fee
        self.home_city = settings.home_city if home_city is None else home_city

    def fee(self, context: DeliveryContext) -> float:
        if (
            context.customer_city != self.home_city
            or context.service_address != context.customer_address
        ):
            return float(self.flat_fee)
        return 0.0


class PricingEngine:
    """Prices orders from menu data, headcount and delivery context."""

    def __init__(
        self,
        delivery_fee_strategy: Optional[DeliveryFeeStrategy] = None,
        discount_rate: float = None,
        discount_margin: int = None,
    ):
        self.delivery_fee_strategy = delivery_fee_strategy or FlatDeliveryFee()
        self.discount_rate = settings.discount_rate if discount_rate is None else discount_rate
        self.discount_margin = settings.discount_headcount_margin if discount_margin is None else discount_margin

    def qualifies_for_discount(self, min_headcount: int, headcount: int) -> bool:
        return headcount >= min_headcount + self.discount_margin

    def menu_price(self, unit_price: float, min_headcount: int, headcount: int) -> float:
        """Menu price after the group discount, rounded to cents."""
        price = unit_price * headcount
        if self.qualifies_for_discount(min_headcount, headcount):
            price = price * (1 - self.discount_rate)
        return round(price, 2)

    def quote(
        self,
        unit_price: float,
        min_headcount: int,
        headcount: int,
        delivery: DeliveryContext,
    ) -> PriceQuote:
        return PriceQuote(
            base_price=round(unit_price * headcount, 2),
            menu_price=self.menu_price(unit_price, min_headcount, headcount),
            discount_applied=self.qualifies_for_discount(min_headcount, headcount),
            delivery_fee=round(self.delivery_fee_strategy.fee(delivery), 2),
        )
