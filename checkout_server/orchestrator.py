"""Checkout orchestration: turns a cart and customer input into one submission."""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional

import httpx

from .catalog import cart_for_flow
from .checkout_client import CheckoutClient
from .exceptions import CheckoutBackendError, InvalidRedirectError
from .intake import CustomerIntake
from .models import (
    Cart,
    FlowDescriptor,
    RedirectTarget,
    ResponseKind,
    SubmissionError,
    SubmissionItem,
    SubmissionRequest,
    SubmissionResult,
)

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]


class CheckoutState(str, Enum):
    """Lifecycle of one flow instance's submission."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    REDIRECTING = "redirecting"
    COMPLETED = "completed"
    FAILED = "failed"


def validate_redirect(uri: str, allowed_hosts: Iterable[str] = ()) -> RedirectTarget:
    """
    Check a backend-provided destination before navigating to it.

    Args:
        uri: Destination as returned by the backend
        allowed_hosts: Hosts the destination may point at; empty allows any

    Returns:
        RedirectTarget for the destination

    Raises:
        InvalidRedirectError: If the destination is not an absolute http(s)
            URI, carries userinfo or backslashes, or its host is outside the
            allow-list
    """
    # Browsers read a backslash as a path separator, so the host they visit
    # would differ from the one parsed here.
    if "\\" in uri:
        raise InvalidRedirectError(f"Destination contains a backslash: {uri!r}")

    try:
        url = httpx.URL(uri)
    except httpx.InvalidURL as e:
        raise InvalidRedirectError(f"Destination is not a valid URI: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidRedirectError(f"Destination is not an absolute http(s) URI: {uri!r}")

    if url.userinfo:
        raise InvalidRedirectError(f"Destination carries userinfo: {uri!r}")

    host = url.host.lower()
    allowed = [h.lower() for h in allowed_hosts]
    if allowed and not any(host == h or host.endswith(f".{h}") for h in allowed):
        raise InvalidRedirectError(f"Destination host {host} is not allowed")

    return RedirectTarget(uri=str(url), host=host)


def build_submission(cart: Cart, intake: CustomerIntake, flow: FlowDescriptor) -> SubmissionRequest:
    """Build the request body from the cart and a single customer snapshot."""
    customer = intake.snapshot()
    return SubmissionRequest(
        items=[SubmissionItem(name=item.name, id=item.id) for item in cart.items],
        customer_name=customer.name,
        customer_email=customer.email,
        invoice_needed=True,
        order_id=flow.order_id if flow.requires_order_id else None,
    )


class CheckoutOrchestrator:
    """
    Coordinates the submission of one flow instance.

    The orchestrator is created per page visit. It reads the cart and one
    snapshot of the customer fields, posts the request to the flow's
    endpoint and, for redirect flows, hands the validated destination to
    the injected navigator. Failures come back as a SubmissionResult error
    and never raise.
    """

    def __init__(
        self,
        client: CheckoutClient,
        flow: FlowDescriptor,
        navigate: Navigator,
        cart: Optional[Cart] = None,
        intake: Optional[CustomerIntake] = None,
    ) -> None:
        if flow.response_kind not in (ResponseKind.REDIRECT, ResponseKind.CLIENT_SECRET):
            raise ValueError(f"Flow {flow.name} does not create a payment session")
        self.client = client
        self.flow = flow
        self.navigate = navigate
        self.cart = cart if cart is not None else cart_for_flow(flow)
        self.intake = intake if intake is not None else CustomerIntake()
        self.state = CheckoutState.IDLE

    async def submit(self) -> SubmissionResult:
        """Run one submission and return its outcome."""
        if self.state is CheckoutState.SUBMITTING:
            logger.warning(f"Submission for {self.flow.name} ignored: request already in flight")
            return SubmissionResult(
                error=SubmissionError(kind="in_flight", message="A submission is already in flight")
            )

        request = build_submission(self.cart, self.intake, self.flow)
        self.state = CheckoutState.SUBMITTING
        logger.info(
            f"Submitting {self.flow.name} to {self.client.base_url}{self.flow.endpoint_path} "
            f"({len(request.items)} item(s))"
        )

        try:
            body = await self.client.create_session(self.flow.endpoint_path, request)
        except CheckoutBackendError as e:
            return self._fail(
                SubmissionError(
                    kind="transport" if e.status_code is None else "http_status",
                    message=str(e),
                    status_code=e.status_code,
                )
            )
        except Exception as e:
            logger.error(f"Unexpected error submitting {self.flow.name}: {e}", exc_info=True)
            return self._fail(SubmissionError(kind="transport", message=str(e)))

        if self.flow.response_kind is ResponseKind.CLIENT_SECRET:
            self.state = CheckoutState.COMPLETED
            logger.info(f"{self.flow.name} returned a payment client secret")
            return SubmissionResult(client_secret=body)

        try:
            target = validate_redirect(body, self.client.settings.allowed_redirect_hosts)
        except InvalidRedirectError as e:
            return self._fail(SubmissionError(kind="invalid_redirect", message=str(e)))

        self.state = CheckoutState.REDIRECTING
        logger.info(f"{self.flow.name} redirecting to {target.host}")
        self.navigate(target.uri)
        return SubmissionResult(redirect=target)

    def _fail(self, error: SubmissionError) -> SubmissionResult:
        self.state = CheckoutState.FAILED
        logger.error(f"Submission for {self.flow.name} failed ({error.kind}): {error.message}")
        return SubmissionResult(error=error)
