"""Static item catalog and cart seeding."""

from decimal import Decimal
from typing import Iterable, Optional

from .models import Cart, FlowDescriptor, FlowMode, Item

PRODUCTS: tuple[Item, ...] = (
    Item(
        id="shoe",
        name="Puma Shoes",
        description="Premium Shoes",
        image="https://source.unsplash.com/NUoPWImmjCU",
        price=Decimal("20"),
        quantity=1,
    ),
    Item(
        id="slippers",
        name="Nike Sliders",
        description="Comfortable everyday slippers",
        image="https://source.unsplash.com/K_gIPI791Jo",
        price=Decimal("10"),
        quantity=1,
    ),
)

# Subscription plans share the product list; the plan price comes from the flow.
SUBSCRIPTIONS: tuple[Item, ...] = PRODUCTS

CATALOGS: dict[str, tuple[Item, ...]] = {
    "products": PRODUCTS,
    "subscriptions": SUBSCRIPTIONS,
}


def load_cart(
    catalog: Iterable[Item], mode: FlowMode, total_override: Optional[Decimal] = None
) -> Cart:
    """
    Seed a cart from a catalog, keeping catalog order.

    Args:
        catalog: Items to place in the cart
        mode: Flow mode the cart is shown in
        total_override: Fixed plan price to show instead of the item sum

    Returns:
        Cart with every catalog item
    """
    return Cart(items=list(catalog), mode=mode, total_override=total_override)


def cart_for_flow(flow: FlowDescriptor) -> Cart:
    """Build the cart a flow starts with."""
    return load_cart(CATALOGS[flow.catalog], flow.mode, flow.display_total)
