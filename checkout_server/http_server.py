"""HTTP server exposing the checkout flows."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from . import __version__
from .catalog import cart_for_flow
from .checkout_client import CheckoutClient
from .config import Settings
from .exceptions import CheckoutBackendError, UnknownFlowError
from .flows import FLOWS, OUTCOME_PAGES, flow_for_route
from .intake import CustomerIntake
from .models import FlowDescriptor, ResponseKind
from .orchestrator import CheckoutOrchestrator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("checkout-http-server")

# Global state
settings: Optional[Settings] = None
checkout_client: Optional[CheckoutClient] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global settings, checkout_client

    # Startup
    logger.info("Starting Checkout HTTP Server...")
    if settings is None:
        settings = Settings.from_env()
    checkout_client = CheckoutClient(settings)
    logger.info(f"Payment backend: {settings.base_url}")

    yield

    # Shutdown
    logger.info("Shutting down Checkout HTTP Server...")
    await checkout_client.close()


app = FastAPI(
    title="Checkout Flows Server",
    description="HTTP API for hosted, integrated and subscription checkout flows",
    version=__version__,
    lifespan=lifespan,
)


# Request Models
class CheckoutRequest(BaseModel):
    customer_name: str = ""
    customer_email: str = ""


class CustomerLookupRequest(BaseModel):
    customer_email: str


class CancelSubscriptionRequest(BaseModel):
    subscription_id: str


def flow_page(flow: FlowDescriptor) -> dict:
    """Render a flow's page data."""
    cart = cart_for_flow(flow)
    return {
        "name": flow.name,
        "route": flow.route,
        "title": flow.title,
        "mode": flow.mode.value,
        "items": [item.model_dump(mode="json") for item in cart.items],
        "total": str(cart.total()),
        "requires_order_id": flow.requires_order_id,
        "checkout": f"{flow.route}/checkout"
        if flow.response_kind in (ResponseKind.REDIRECT, ResponseKind.CLIENT_SECRET)
        else None,
    }


def lookup_flow(route: str) -> FlowDescriptor:
    try:
        return flow_for_route(route)
    except UnknownFlowError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/")
async def root():
    """List the available flows."""
    return {
        "name": "Checkout Flows Server",
        "version": __version__,
        "flows": [
            {
                "route": flow.route,
                "title": flow.title,
                "mode": flow.mode.value,
                "total": str(cart_for_flow(flow).total()),
            }
            for flow in FLOWS
        ],
        "outcomes": list(OUTCOME_PAGES),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "backend": settings.base_url if settings else None}


# Outcome pages
@app.get("/success")
async def success_page():
    """Landing page after a completed payment."""
    return OUTCOME_PAGES["/success"]


@app.get("/failure")
async def failure_page():
    """Landing page after an aborted payment."""
    return OUTCOME_PAGES["/failure"]


# Account endpoints
@app.post("/cancel-subscription/lookup")
async def lookup_subscriptions(request: CustomerLookupRequest):
    """List a customer's subscriptions."""
    try:
        records = await checkout_client.list_subscriptions(request.customer_email)
        return {
            "count": len(records),
            "subscriptions": [record.model_dump(mode="json") for record in records],
        }
    except CheckoutBackendError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Subscription lookup error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/cancel-subscription/cancel")
async def cancel_subscription(request: CancelSubscriptionRequest):
    """Cancel a subscription."""
    try:
        status = await checkout_client.cancel_subscription(request.subscription_id)
        return {"subscription_id": request.subscription_id, "status": status}
    except CheckoutBackendError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Cancel subscription error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/view-invoices/lookup")
async def lookup_invoices(request: CustomerLookupRequest):
    """List a customer's invoices."""
    try:
        records = await checkout_client.list_invoices(request.customer_email)
        return {
            "count": len(records),
            "invoices": [record.model_dump(mode="json") for record in records],
        }
    except CheckoutBackendError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Invoice lookup error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


# Flow pages
@app.get("/{flow_route}")
async def get_flow(flow_route: str):
    """Show a flow's cart, mode and total."""
    return flow_page(lookup_flow(flow_route))


@app.post("/{flow_route}/checkout")
async def checkout(flow_route: str, request: CheckoutRequest):
    """Submit a flow and redirect to the destination the backend returns."""
    flow = lookup_flow(flow_route)
    if flow.response_kind not in (ResponseKind.REDIRECT, ResponseKind.CLIENT_SECRET):
        raise HTTPException(status_code=405, detail=f"{flow.route} has no checkout action")

    destinations: list[str] = []
    intake = CustomerIntake()
    intake.set_name(request.customer_name)
    intake.set_email(request.customer_email)
    orchestrator = CheckoutOrchestrator(
        checkout_client, flow, navigate=destinations.append, intake=intake
    )

    try:
        result = await orchestrator.submit()
    except Exception as e:
        logger.error(f"Checkout error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    if result.error is not None:
        return JSONResponse(
            status_code=502,
            content={"error": result.error.kind, "detail": result.error.message},
        )
    if result.client_secret is not None:
        return {"client_secret": result.client_secret}
    return RedirectResponse(destinations[0], status_code=303)


def run_http_server(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, base_url: Optional[str] = None
):
    """
    Run the HTTP server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable hot reloading (default: False)
        base_url: Payment backend origin, overriding CHECKOUT_SERVER_BASE_URL
    """
    global settings
    import uvicorn

    logger.info(f"Starting server on {host}:{port} (reload={'enabled' if reload else 'disabled'})")

    if reload:
        # The reloader re-imports the app, so settings come from the environment
        if base_url:
            import os

            os.environ["CHECKOUT_SERVER_BASE_URL"] = base_url
        uvicorn.run(
            "checkout_server.http_server:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["checkout_server"],
            log_level="info",
        )
    else:
        settings = Settings.from_env(base_url=base_url)
        uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server(reload=True)
