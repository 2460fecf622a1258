"""Customer intake: two controlled text fields."""

import logging
from typing import Callable, Literal

from .models import CustomerInfo

logger = logging.getLogger(__name__)

FieldName = Literal["name", "email"]
FieldListener = Callable[[str, str], None]


class CustomerIntake:
    """
    Holds the customer name and email as typed.

    Values are stored verbatim, without validation or trimming. Each change
    is pushed to the registered listeners so a view always displays the
    held value rather than echoing raw input.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {"name": "", "email": ""}
        self._listeners: list[FieldListener] = []

    def subscribe(self, listener: FieldListener) -> None:
        """Register a callback receiving (field, held_value) on every change."""
        self._listeners.append(listener)

    def set_name(self, value: str) -> None:
        self._set("name", value)

    def set_email(self, value: str) -> None:
        self._set("email", value)

    def value_of(self, field: FieldName) -> str:
        """Return what the field currently displays."""
        return self._values[field]

    def snapshot(self) -> CustomerInfo:
        """Return the values held at the moment of the call."""
        return CustomerInfo(name=self._values["name"], email=self._values["email"])

    def _set(self, field: str, value: str) -> None:
        self._values[field] = value
        logger.debug(f"Customer field '{field}' updated")
        for listener in self._listeners:
            listener(field, self._values[field])
