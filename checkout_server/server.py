"""MCP Server for the checkout flows."""

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, Tool, TextContent
from pydantic import AnyUrl

from .catalog import cart_for_flow
from .checkout_client import CheckoutClient
from .config import Settings
from .exceptions import CheckoutBackendError, UnknownFlowError
from .flows import FLOWS, OUTCOME_PAGES, SUBMIT_FLOWS, flow_by_name
from .intake import CustomerIntake
from .orchestrator import CheckoutOrchestrator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("checkout-mcp-server")

# Initialize server
app = Server("checkout-mcp-server")

# Global state
settings: Settings
checkout_client: CheckoutClient


def describe_flow(name: str) -> str:
    """Render a flow's cart as text."""
    flow = flow_by_name(name)
    cart = cart_for_flow(flow)
    result_lines = [f"{flow.title} ({flow.mode.value})\n"]
    for i, item in enumerate(cart.items, 1):
        result_lines.append(f"\n{i}. {item.name}")
        result_lines.append(f"   ID: {item.id}")
        result_lines.append(f"   {item.description}")
        result_lines.append(f"   Price: ${item.price}")
        result_lines.append(f"   Quantity: {item.quantity}")

    result_lines.append(f"\n{'='*50}")
    result_lines.append(f"Total: ${cart.total()}")
    return "\n".join(result_lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    resources = [
        Resource(
            uri=AnyUrl(f"checkout://flows/{flow.name}"),
            name=flow.title,
            mimeType="application/json",
            description=f"Cart and total for {flow.route}",
        )
        for flow in FLOWS
    ]
    resources.extend(
        Resource(
            uri=AnyUrl(f"checkout://outcome/{page['outcome']}"),
            name=page["heading"],
            mimeType="application/json",
            description=f"Static {page['outcome']} landing page",
        )
        for page in OUTCOME_PAGES.values()
    )
    return resources


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str.startswith("checkout://flows/"):
        flow = flow_by_name(uri_str.removeprefix("checkout://flows/"))
        cart = cart_for_flow(flow)
        data = {"flow": flow.model_dump(mode="json"), "cart": cart.model_dump(mode="json")}
        data["cart"]["total"] = str(cart.total())
        return json.dumps(data, indent=2)

    if uri_str.startswith("checkout://outcome/"):
        page = OUTCOME_PAGES.get(f"/{uri_str.removeprefix('checkout://outcome/')}")
        if page:
            return json.dumps(page, indent=2)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="checkout_list_flows",
            description="List the available checkout and subscription flows",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="checkout_get_flow",
            description="Show a flow's cart items, mode and total",
            inputSchema={
                "type": "object",
                "properties": {
                    "flow": {
                        "type": "string",
                        "description": "Flow name",
                        "enum": [flow.name for flow in FLOWS],
                    },
                },
                "required": ["flow"],
            },
        ),
        Tool(
            name="checkout_submit",
            description="Submit a checkout or subscription flow and return the payment page to open",
            inputSchema={
                "type": "object",
                "properties": {
                    "flow": {
                        "type": "string",
                        "description": "Flow name",
                        "enum": [flow.name for flow in SUBMIT_FLOWS],
                    },
                    "customer_name": {
                        "type": "string",
                        "description": "Customer name (sent as typed)",
                        "default": "",
                    },
                    "customer_email": {
                        "type": "string",
                        "description": "Customer email (sent as typed)",
                        "default": "",
                    },
                },
                "required": ["flow"],
            },
        ),
        Tool(
            name="checkout_list_subscriptions",
            description="List a customer's subscriptions",
            inputSchema={
                "type": "object",
                "properties": {
                    "customer_email": {"type": "string", "description": "Customer email"},
                },
                "required": ["customer_email"],
            },
        ),
        Tool(
            name="checkout_cancel_subscription",
            description="Cancel a subscription by ID",
            inputSchema={
                "type": "object",
                "properties": {
                    "subscription_id": {
                        "type": "string",
                        "description": "Subscription ID from checkout_list_subscriptions",
                    },
                },
                "required": ["subscription_id"],
            },
        ),
        Tool(
            name="checkout_list_invoices",
            description="List a customer's invoices with PDF links",
            inputSchema={
                "type": "object",
                "properties": {
                    "customer_email": {"type": "string", "description": "Customer email"},
                },
                "required": ["customer_email"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "checkout_list_flows":
            result_lines = [f"Found {len(FLOWS)} flow(s):\n"]
            for i, flow in enumerate(FLOWS, 1):
                result_lines.append(f"\n{i}. {flow.title}")
                result_lines.append(f"   Name: {flow.name}")
                result_lines.append(f"   Route: {flow.route}")
                result_lines.append(f"   Mode: {flow.mode.value}")
            return [TextContent(type="text", text="\n".join(result_lines))]

        elif name == "checkout_get_flow":
            return [TextContent(type="text", text=describe_flow(arguments["flow"]))]

        elif name == "checkout_submit":
            flow = flow_by_name(arguments["flow"])
            intake = CustomerIntake()
            intake.set_name(arguments.get("customer_name", ""))
            intake.set_email(arguments.get("customer_email", ""))

            destinations: list[str] = []
            orchestrator = CheckoutOrchestrator(
                checkout_client, flow, navigate=destinations.append, intake=intake
            )
            result = await orchestrator.submit()

            if result.error is not None:
                return [
                    TextContent(
                        type="text",
                        text=f"❌ Checkout failed ({result.error.kind}): {result.error.message}",
                    )
                ]
            if result.client_secret is not None:
                return [
                    TextContent(
                        type="text",
                        text=f"✅ Payment created. Client secret: {result.client_secret}",
                    )
                ]
            return [
                TextContent(
                    type="text",
                    text=f"✅ Open this page to complete payment:\n{destinations[0]}",
                )
            ]

        elif name == "checkout_list_subscriptions":
            records = await checkout_client.list_subscriptions(arguments["customer_email"])
            if not records:
                return [TextContent(type="text", text="No subscriptions found")]

            result_lines = [f"Found {len(records)} subscription(s):\n"]
            for i, record in enumerate(records, 1):
                result_lines.append(f"\n{i}. {record.subscription_id}")
                result_lines.append(f"   Product: {record.app_product_id}")
                result_lines.append(f"   Subscribed on: {record.subscribed_on}")
                result_lines.append(f"   Next payment: {record.next_payment_date}")
                if record.trial_ends_on:
                    result_lines.append(f"   Trial ends: {record.trial_ends_on}")
            return [TextContent(type="text", text="\n".join(result_lines))]

        elif name == "checkout_cancel_subscription":
            subscription_id = arguments["subscription_id"]
            status = await checkout_client.cancel_subscription(subscription_id)
            return [
                TextContent(
                    type="text",
                    text=f"✅ Subscription {subscription_id} is now {status}",
                )
            ]

        elif name == "checkout_list_invoices":
            records = await checkout_client.list_invoices(arguments["customer_email"])
            if not records:
                return [TextContent(type="text", text="No invoices found")]

            result_lines = [f"Found {len(records)} invoice(s):\n"]
            for i, record in enumerate(records, 1):
                result_lines.append(f"\n{i}. Invoice {record.number}")
                result_lines.append(f"   Amount: ${record.amount}")
                result_lines.append(f"   PDF: {record.url}")
            return [TextContent(type="text", text="\n".join(result_lines))]

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except (UnknownFlowError, CheckoutBackendError) as e:
        logger.warning(f"Tool {name} failed: {e}")
        return [TextContent(type="text", text=f"Error: {str(e)}")]
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return [
            TextContent(
                type="text",
                text=f"Error: {str(e)}",
            )
        ]


async def main(base_url: Optional[str] = None) -> None:
    """Main entry point for the MCP server."""
    global settings, checkout_client

    settings = Settings.from_env(base_url=base_url)
    checkout_client = CheckoutClient(settings)
    logger.info(f"Payment backend: {settings.base_url}")
    if settings.allowed_redirect_hosts:
        logger.info(f"Redirects limited to: {', '.join(settings.allowed_redirect_hosts)}")
    else:
        logger.warning(
            "CHECKOUT_ALLOWED_REDIRECT_HOSTS not set; any http(s) destination will be followed"
        )

    logger.info("Starting Checkout MCP Server...")

    # Import and run the server
    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await checkout_client.close()


if __name__ == "__main__":
    asyncio.run(main())
