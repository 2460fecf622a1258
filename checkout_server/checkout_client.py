"""Payment backend API client."""

import logging
from typing import Any, Optional

import httpx

from .config import Settings
from .exceptions import CheckoutBackendError
from .models import InvoiceRecord, SubmissionRequest, SubscriptionRecord

logger = logging.getLogger(__name__)


class CheckoutClient:
    """Client for the payment backend's session and account endpoints."""

    SUBSCRIPTIONS_LIST_PATH = "/subscriptions/list"
    SUBSCRIPTIONS_CANCEL_PATH = "/subscriptions/cancel"
    INVOICES_LIST_PATH = "/invoices/list"

    def __init__(
        self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize the checkout client.

        Args:
            settings: Settings carrying the backend origin and timeout
            transport: Optional httpx transport, used to stub the backend
        """
        self.settings = settings
        self.client = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout,
            transport=transport,
            headers={"Accept": "text/plain, application/json, */*"},
        )

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        """POST a JSON body and return the 2xx response, raising otherwise."""
        try:
            response = await self.client.post(
                path,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"POST {path} failed: {e}")
            raise CheckoutBackendError(f"Could not reach backend at {self.base_url}{path}: {e}") from e

        logger.info(f"POST {path}: status={response.status_code}")
        if not response.is_success:
            raise CheckoutBackendError(
                f"Backend answered {response.status_code} for {path}",
                status_code=response.status_code,
            )
        return response

    async def create_session(self, endpoint_path: str, request: SubmissionRequest) -> str:
        """
        Request a payment session.

        Args:
            endpoint_path: Flow endpoint, e.g. /checkout/hosted
            request: Submission body

        Returns:
            Raw response body text (a destination URI or a client secret)

        Raises:
            CheckoutBackendError: On transport failure or non-2xx status
        """
        response = await self._post(endpoint_path, request.to_wire())
        return response.text.strip()

    async def list_subscriptions(self, customer_email: str) -> list[SubscriptionRecord]:
        """
        List the subscriptions held by a customer.

        Args:
            customer_email: Customer email the backend looks the customer up by

        Returns:
            Subscription records, empty if the customer is unknown
        """
        response = await self._post(
            self.SUBSCRIPTIONS_LIST_PATH, {"customerEmail": customer_email}
        )
        return [SubscriptionRecord.model_validate(entry) for entry in self._json_list(response)]

    async def cancel_subscription(self, subscription_id: str) -> str:
        """
        Cancel a subscription.

        Args:
            subscription_id: Backend subscription ID

        Returns:
            Subscription status reported after cancellation
        """
        response = await self._post(
            self.SUBSCRIPTIONS_CANCEL_PATH, {"subscriptionId": subscription_id}
        )
        return response.text.strip()

    async def list_invoices(self, customer_email: str) -> list[InvoiceRecord]:
        """List a customer's invoices."""
        response = await self._post(self.INVOICES_LIST_PATH, {"customerEmail": customer_email})
        return [InvoiceRecord.model_validate(entry) for entry in self._json_list(response)]

    def _json_list(self, response: httpx.Response) -> list[dict[str, Any]]:
        try:
            data = response.json()
        except ValueError as e:
            raise CheckoutBackendError(f"Backend returned invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise CheckoutBackendError("Backend returned a non-list payload")
        return data
