"""Exceptions raised by the checkout server."""

from typing import Optional


class CheckoutError(Exception):
    """Base class for checkout server errors."""


class UnknownFlowError(CheckoutError):
    """No flow is bound to the requested route or name."""


class InvalidRedirectError(CheckoutError):
    """The backend returned a destination that may not be navigated to."""


class CheckoutBackendError(CheckoutError):
    """The backend could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
