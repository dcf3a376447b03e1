"""
Utility modules for the checkout service
"""
from .config_loader import CheckoutConfig, load_checkout_config

__all__ = [
    'CheckoutConfig',
    'load_checkout_config',
]
