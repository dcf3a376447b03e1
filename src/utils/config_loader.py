"""
Configuration loader for the checkout service
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "checkout_config.yml"

# Environment variable -> config field
ENV_OVERRIDES = {
    "CHECKOUT_API_BASE_URL": "api_base_url",
    "CHECKOUT_POLL_INTERVAL_SECONDS": "poll_interval_seconds",
    "INTEGRATIONS_MODE": "integrations_mode",
}


class CheckoutConfig(BaseModel):
    """Checkout lifecycle configuration"""

    api_base_url: str = ""
    poll_interval_seconds: float = Field(default=2.0, gt=0.0)
    request_timeout_seconds: float = Field(default=20.0, gt=0.0)
    integrations_mode: str = "auto"
    mock_pending_checks: int = Field(default=2, ge=0, le=100)
    session_idle_ttl_seconds: float = Field(default=900.0, gt=0.0)
    session_sweep_interval_seconds: float = Field(default=60.0, gt=0.0)

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("integrations_mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        mode = value.strip().lower()
        if mode not in {"auto", "real", "mock"}:
            raise ValueError("integrations_mode must be one of: auto, real, mock")
        return mode

    def use_real_gateway(self) -> bool:
        if self.integrations_mode == "real":
            return True
        if self.integrations_mode == "mock":
            return False
        return bool(self.api_base_url)


def load_checkout_config(config_path: Optional[Path] = None) -> CheckoutConfig:
    """
    Load and validate checkout configuration

    Values come from the YAML file first, then environment variables
    (CHECKOUT_API_BASE_URL, CHECKOUT_POLL_INTERVAL_SECONDS, INTEGRATIONS_MODE).

    Args:
        config_path: Path to config file. Defaults to config/checkout_config.yml;
            the default file is optional, an explicit one is not.

    Returns:
        Validated CheckoutConfig object

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    config_data: Dict[str, Any] = {}

    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config_data[field_name] = value

    try:
        config = CheckoutConfig(**config_data)
        logger.info(f"Loaded checkout config (mode={config.integrations_mode}, base_url={config.api_base_url or '-'})")
        return config
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise
