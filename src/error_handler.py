"""Error handling helpers for the checkout API."""
from typing import Any, Dict
import logging

from src.checkout.errors import CheckoutError

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, CheckoutError):
            logger.warning("Checkout error: %s", exc.message)
            message = exc.message
        else:
            logger.error("Unhandled exception in checkout API: %s", exc, exc_info=True)
            message = "An internal error occurred while processing your payment. Please try again later."
        return {
            "message": message,
            "fallback": True,
            "metadata": {"error": str(exc), "type": type(exc).__name__, "context": context or {}},
        }
