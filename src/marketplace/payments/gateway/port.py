"""Payment gateway port (abstract interface).

Mobile-money operators call back with the outcome of a payment request.
Adapters only have to tell whether a callback is authentic, so swapping
the fake adapter for a signed one never touches the domain.
"""

from abc import ABC, abstractmethod


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    name: str = "abstract"

    @abstractmethod
    def verify_webhook_signature(
        self,
        payload: str,
        signature: str,
    ) -> bool:
        """Verify that a callback payload is authentically from the gateway."""
        ...
