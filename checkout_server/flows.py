"""Flow descriptor table and outcome pages, keyed by route."""

from decimal import Decimal

from .exceptions import UnknownFlowError
from .models import FlowDescriptor, FlowMode, ResponseKind

HOSTED_CHECKOUT_ORDER_ID = "1754041736853237761"

FLOWS: tuple[FlowDescriptor, ...] = (
    FlowDescriptor(
        name="hosted_checkout",
        route="/hosted-checkout",
        title="Hosted Checkout Example",
        endpoint_path="/checkout/hosted",
        mode=FlowMode.CHECKOUT,
        requires_order_id=True,
        order_id=HOSTED_CHECKOUT_ORDER_ID,
    ),
    FlowDescriptor(
        name="integrated_checkout",
        route="/integrated-checkout",
        title="Integrated Checkout Example",
        endpoint_path="/checkout/integrated",
        mode=FlowMode.CHECKOUT,
        response_kind=ResponseKind.CLIENT_SECRET,
    ),
    FlowDescriptor(
        name="new_subscription",
        route="/new-subscription",
        title="New Subscription Example",
        endpoint_path="/subscriptions/new",
        mode=FlowMode.SUBSCRIPTION,
        display_total=Decimal("4.99"),
        catalog="subscriptions",
    ),
    FlowDescriptor(
        name="subscription_with_trial",
        route="/subscription-with-trial",
        title="Subscription With Trial Example",
        endpoint_path="/subscriptions/trial",
        mode=FlowMode.TRIAL,
        display_total=Decimal("4.99"),
        catalog="subscriptions",
    ),
    FlowDescriptor(
        name="cancel_subscription",
        route="/cancel-subscription",
        title="Cancel Subscription Example",
        endpoint_path="/subscriptions/cancel",
        mode=FlowMode.SUBSCRIPTION,
        catalog="subscriptions",
        response_kind=ResponseKind.STATUS,
    ),
    FlowDescriptor(
        name="view_invoices",
        route="/view-invoices",
        title="View Invoices",
        endpoint_path="/invoices/list",
        mode=FlowMode.CHECKOUT,
        response_kind=ResponseKind.RECORDS,
    ),
)

FLOWS_BY_ROUTE: dict[str, FlowDescriptor] = {flow.route: flow for flow in FLOWS}
FLOWS_BY_NAME: dict[str, FlowDescriptor] = {flow.name: flow for flow in FLOWS}

# Flows whose submission goes through the orchestrator.
SUBMIT_FLOWS: tuple[FlowDescriptor, ...] = tuple(
    flow
    for flow in FLOWS
    if flow.response_kind in (ResponseKind.REDIRECT, ResponseKind.CLIENT_SECRET)
)

OUTCOME_PAGES: dict[str, dict[str, str]] = {
    "/success": {
        "outcome": "success",
        "heading": "Success",
        "message": "Your payment was completed successfully.",
    },
    "/failure": {
        "outcome": "failure",
        "heading": "Failure",
        "message": "Your payment was not completed.",
    },
}


def flow_for_route(route: str) -> FlowDescriptor:
    """Return the flow bound to a route path."""
    if not route.startswith("/"):
        route = f"/{route}"
    try:
        return FLOWS_BY_ROUTE[route]
    except KeyError:
        raise UnknownFlowError(f"Unknown flow route: {route}") from None


def flow_by_name(name: str) -> FlowDescriptor:
    """Return the flow with the given short name."""
    try:
        return FLOWS_BY_NAME[name]
    except KeyError:
        raise UnknownFlowError(f"Unknown flow: {name}") from None
