#!/usr/bin/env python3
"""Verify the wallet record and Horizon connectivity before sending.

Tests:
1. Wallet record presence and integrity
2. Horizon reachability on the test network
3. Horizon reachability on the public network
4. Account activation on the record's network

Usage:
    python scripts/verify_connection.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from stellar_wallet.config import get_settings
from stellar_wallet.exceptions import (
    AccountNotFoundError,
    DeserializationError,
    NetworkUnreachableError,
)
from stellar_wallet.ledger import bind_client
from stellar_wallet.models import Network, WalletRecord
from stellar_wallet.persistence import WalletStore


async def check_record() -> tuple[bool, str, WalletRecord | None]:
    """Load the wallet record without creating one.

    Returns:
        Tuple of (success, message, record)
    """
    settings = get_settings()
    store = WalletStore(settings.wallet.record_path)

    try:
        record = await store.load()
    except DeserializationError as e:
        return False, str(e), None

    if record is None:
        return False, f"No wallet record at {store.path} (run main.py once)", None
    return True, f"Record OK | {record.address} on {record.network.value}", record


async def check_horizon(network: Network, address: str) -> tuple[bool, str]:
    """Look up an account to prove Horizon answers on a network.

    A missing account still proves reachability.

    Returns:
        Tuple of (success, message)
    """
    async with bind_client(network, get_settings()) as client:
        try:
            details = await client.account_details(address)
        except AccountNotFoundError:
            return True, f"{client.horizon_url} reachable (account not found)"
        except NetworkUnreachableError as e:
            return False, str(e)

    return True, f"{client.horizon_url} reachable | sequence={details.get('sequence')}"


async def check_activation(record: WalletRecord) -> tuple[bool, str]:
    """Check the wallet account exists on its own network.

    Returns:
        Tuple of (success, message)
    """
    async with bind_client(record.network, get_settings()) as client:
        try:
            await client.load_account(record.address)
        except AccountNotFoundError:
            return False, f"Account not activated on {record.network.value} (unfunded)"
        except NetworkUnreachableError as e:
            return False, str(e)

    return True, f"Account active on {record.network.value}"


def report(step: str, success: bool, msg: str) -> None:
    status = "PASS" if success else "FAIL"
    print(f"\n  {step}")
    print(f"        {status}: {msg}")


async def main() -> int:
    """Run all verification checks."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="WARNING",
    )

    print("\n" + "=" * 60)
    print("  STELLAR WALLET CONNECTION VERIFICATION")
    print("=" * 60)

    success, msg, record = await check_record()
    report("[1/4] Checking wallet record...", success, msg)
    if record is None:
        print("\n" + "=" * 60 + "\n")
        return 1
    all_passed = success

    success, msg = await check_horizon(Network.TEST, record.address)
    report("[2/4] Testing testnet Horizon...", success, msg)
    all_passed = all_passed and success

    success, msg = await check_horizon(Network.PRODUCTION, record.address)
    report("[3/4] Testing public Horizon...", success, msg)
    all_passed = all_passed and success

    success, msg = await check_activation(record)
    report("[4/4] Checking account activation...", success, msg)
    all_passed = all_passed and success

    print("\n" + "=" * 60)
    if all_passed:
        print("  ALL CHECKS PASSED - Ready to send!")
    else:
        print("  SOME CHECKS FAILED - Check connectivity or wait for funding")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
