#!/usr/bin/env python3
"""
Run one STK push checkout from the terminal and print every state change.

Usage (from repo root):
  python scripts/run_checkout.py --phone 712345678 --amount 100 --mock
  python scripts/run_checkout.py --phone 712345678 --amount 100 --base-url http://127.0.0.1:8000

Exit code is 0 when the payment succeeds, 1 otherwise. Ctrl+C tears the
checkout down (polling stops immediately).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from src.checkout.controller import CheckoutController
from src.checkout.state import LifecycleState, state_message
from src.integrations.clients.mocks.payments import MockStkPushClient
from src.integrations.clients.real_http.payments import HttpStkPushClient
from src.utils.config_loader import load_checkout_config


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def print_state(controller: CheckoutController) -> None:
    state = controller.state
    message = state_message(state)
    line = f"[{state.kind.value}] loading={controller.loading}"
    if message:
        line += f" - {message}"
    print(line)


async def run(args: argparse.Namespace) -> int:
    config = load_checkout_config(Path(args.config) if args.config else None)
    base_url = args.base_url or config.api_base_url

    if args.mock or (not base_url and config.integrations_mode != "real"):
        gateway = MockStkPushClient(pending_checks=config.mock_pending_checks)
        print("Using mock gateway (no network calls).")
    elif not base_url:
        print("INTEGRATIONS_MODE=real needs --base-url or CHECKOUT_API_BASE_URL.")
        return 1
    else:
        gateway = HttpStkPushClient(base_url=base_url, timeout_seconds=config.request_timeout_seconds)
        print(f"Using backend at {base_url}")

    controller = CheckoutController(
        gateway,
        navigate=lambda: print("Payment confirmed; navigating to /success"),
        on_change=print_state,
        poll_interval_seconds=config.poll_interval_seconds,
    )
    controller.set_phone_number(args.phone)
    controller.set_amount(args.amount)

    if not controller.can_submit:
        print("Enter a 9-digit phone number (without 254 / leading 0) and an amount greater than 0.")
        return 1

    try:
        await controller.submit()
        state = await controller.wait_for_outcome()
    finally:
        controller.dispose()
    return 0 if state.kind is LifecycleState.SUCCESS else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Pay with M-Pesa STK push and wait for the result.")
    parser.add_argument("--phone", required=True, help="Local subscriber number, e.g. 712345678")
    parser.add_argument("--amount", required=True, help="Amount in KES")
    parser.add_argument("--base-url", default=None, help="Payment backend base URL (overrides config)")
    parser.add_argument("--config", default=None, help="Path to checkout_config.yml")
    parser.add_argument("--mock", action="store_true", help="Use the in-process mock gateway")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nCheckout abandoned.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
