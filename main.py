"""Main entry point for the stellar-wallet command line."""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from stellar_wallet.config import get_settings
from stellar_wallet.exceptions import DeserializationError, WalletError
from stellar_wallet.models import Network, PaymentRequest
from stellar_wallet.wallet import WalletEngine


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru logging."""
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "INFO",
    )
    logger.add(
        "logs/wallet_{time}.log",
        rotation="10 MB",
        retention="7 days",
        level="DEBUG",
    )


async def cmd_balance(engine: WalletEngine, args: argparse.Namespace) -> None:
    """Print the refreshed native balance."""
    summary = await engine.refresh_balance()
    print(f"Network: {engine.record.network.value}")
    print(summary.describe())


async def cmd_address(engine: WalletEngine, args: argparse.Namespace) -> None:
    """Print the receive address and the masked secret."""
    print(f"Address: {engine.address}")
    print(f"Secret:  {engine.record.key_pair.masked_secret}")
    if args.qr:
        print(engine.address_qr())


async def cmd_network(engine: WalletEngine, args: argparse.Namespace) -> None:
    """Switch the active network and show the balance there."""
    await engine.switch_network(Network(args.network))
    summary = await engine.refresh_balance()
    print(f"Network: {engine.record.network.value}")
    print(summary.describe())


async def cmd_send(engine: WalletEngine, args: argparse.Namespace) -> None:
    """Send a native payment."""
    request = PaymentRequest(destination=args.destination, amount=args.amount, memo=args.memo)
    result = await engine.send_payment(request)
    print(f"Transaction successful! Hash: {result.tx_hash}")

    if result.refresh.ok and result.refresh.summary is not None:
        print(result.refresh.summary.describe())
    else:
        print(f"Balance refresh failed: {result.refresh.error_message}")


async def cmd_history(engine: WalletEngine, args: argparse.Namespace) -> None:
    """Print recent transactions."""
    entries = await engine.list_history(args.limit)
    count = 0
    for entry in entries:
        count += 1
        print(f"Hash: {entry.tx_hash}")
        print(f"Created: {entry.created_at.isoformat()}")
        print(f"Fee: {entry.fee_charged} stroops")
        if entry.memo:
            print(f"Memo: {entry.memo}")
        print()
    if count == 0:
        print("No transactions")


COMMANDS = {
    "balance": cmd_balance,
    "address": cmd_address,
    "network": cmd_network,
    "send": cmd_send,
    "history": cmd_history,
}


async def main(args: argparse.Namespace) -> int:
    """Load the wallet and run one command.

    Returns:
        Process exit code.
    """
    settings = get_settings()

    try:
        engine = await WalletEngine.load_or_create(settings)
    except DeserializationError as e:
        logger.critical("Refusing to start with a corrupt wallet: {}", str(e))
        return 2
    except WalletError as e:
        logger.error("Failed to load wallet: {}", str(e))
        return 1

    funding = engine.last_funding
    if funding is not None and funding.error_message:
        print(f"Funding request failed: {funding.error_message}")

    async with engine:
        try:
            await COMMANDS[args.command](engine, args)
        except WalletError as e:
            logger.error("{} failed: {}", args.command, str(e))
            print(f"Error ({type(e).__name__}): {e}")
            return 1

    return 0


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Stellar Wallet - single-account XLM wallet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("balance", help="Refresh and show the XLM balance")

    address = subparsers.add_parser("address", help="Show the receive address")
    address.add_argument("--qr", action="store_true", help="Also print a QR code")

    network = subparsers.add_parser("network", help="Switch network")
    network.add_argument("network", choices=[n.value for n in Network])

    send = subparsers.add_parser("send", help="Send XLM")
    send.add_argument("destination", help="Recipient address")
    send.add_argument("amount", help="Amount (XLM)")
    send.add_argument("--memo", default=None, help="Memo (optional)")

    history = subparsers.add_parser("history", help="Show recent transactions")
    history.add_argument("--limit", type=int, default=None, help="Number of entries")

    return parser.parse_args()


if __name__ == "__main__":
    # Create logs directory if it doesn't exist
    Path("logs").mkdir(exist_ok=True)

    args = parse_args()
    setup_logging(args.verbose)
    sys.exit(asyncio.run(main(args)))
