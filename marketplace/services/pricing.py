# marketplace/services/pricing.py
"""
Price rules shared by the bargain and order services.

Negotiation must converge strictly between the buyer's ask and the list
price: offer < list price, offer < counter < list price. Ties are rejected.
All money is handled as Decimal and rounded to cents only when a value is
persisted.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from fastapi import HTTPException

from marketplace.models.order_models import OrderStatus

CENT = Decimal("0.01")
DEFAULT_COMMISSION_RATE = Decimal("10")

ORDER_STATUS_TRANSITIONS = {
    OrderStatus.pending.value: {OrderStatus.confirmed.value, OrderStatus.cancelled.value},
    OrderStatus.confirmed.value: {OrderStatus.shipped.value, OrderStatus.cancelled.value},
    OrderStatus.shipped.value: {OrderStatus.delivered.value},
    OrderStatus.delivered.value: set(),
    OrderStatus.cancelled.value: set(),
}


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return f"${to_money(value)}"


# --------------------------
# Bargain offers
# --------------------------
def validate_offer_price(product, offer_price: Decimal) -> None:
    if offer_price <= 0:
        raise HTTPException(status_code=400, detail="Offer price must be greater than zero")
    if offer_price >= product.price:
        raise HTTPException(status_code=400, detail="Offer price must be less than product price")
    if product.min_bargain_price is not None and offer_price < product.min_bargain_price:
        raise HTTPException(
            status_code=400,
            detail=f"Offer price must be at least {format_money(product.min_bargain_price)}",
        )


def validate_counter_price(offer, product, counter_price: Decimal) -> None:
    if counter_price >= product.price:
        raise HTTPException(status_code=400, detail="Counter price must be less than product price")
    if counter_price <= offer.offer_price:
        raise HTTPException(status_code=400, detail="Counter price must be higher than offer price")


# --------------------------
# Orders
# --------------------------
def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return Decimal(unit_price) * quantity


def order_total(lines: Iterable[Tuple[Decimal, int]]) -> Decimal:
    return sum((line_total(price, qty) for price, qty in lines), Decimal("0"))


def compute_commission(total_amount: Decimal, rate: Decimal) -> Decimal:
    return to_money(Decimal(total_amount) * Decimal(rate) / Decimal(100))


def can_transition_order(current: str, new: str) -> bool:
    return new in ORDER_STATUS_TRANSITIONS.get(current, set())
