"""Native balance synchronization for the wallet record."""

from typing import Any, Protocol

from loguru import logger

from stellar_wallet.exceptions import AccountNotFoundError
from stellar_wallet.models import BalanceStatus, BalanceSummary, WalletRecord, short_address
from stellar_wallet.persistence import WalletStore


class AccountReader(Protocol):
    """Protocol for account record lookups."""

    async def account_details(self, address: str) -> dict[str, Any]:
        """Fetch the full account record."""
        ...


class BalanceSync:
    """Keeps the record's cached balance in step with the ledger.

    An address with no ledger presence is a normal state for a fresh
    test-network wallet and is reported as UNFUNDED rather than raised.

    Example:
        sync = BalanceSync(store)
        summary = await sync.refresh(client, record)
        print(summary.describe())
    """

    def __init__(self, store: WalletStore) -> None:
        """Initialize the balance sync.

        Args:
            store: Store the record is persisted to after an update.
        """
        self._store = store

    async def refresh(self, client: AccountReader, record: WalletRecord) -> BalanceSummary:
        """Fetch the native balance and update the record.

        Args:
            client: Client bound to record.network.
            record: Wallet record to update.

        Returns:
            BalanceSummary (FUNDED, UNFUNDED, or NO_NATIVE_BALANCE).

        Raises:
            NetworkUnreachableError: If Horizon cannot be reached.
            RecordIOError: If the updated record cannot be persisted.
        """
        try:
            details = await client.account_details(record.address)
        except AccountNotFoundError:
            logger.info("Account {} is unfunded", short_address(record.address))
            return BalanceSummary(status=BalanceStatus.UNFUNDED)

        balance = self._native_balance(details)
        if balance is None:
            logger.warning("No native balance line for {}", short_address(record.address))
            return BalanceSummary(status=BalanceStatus.NO_NATIVE_BALANCE)

        record.cached_balance = balance
        await self._store.save(record)

        logger.info("Balance of {}: {} XLM", short_address(record.address), balance)
        return BalanceSummary(status=BalanceStatus.FUNDED, balance=balance)

    @staticmethod
    def _native_balance(details: dict[str, Any]) -> str | None:
        """Extract the native balance string, ignoring issued assets."""
        for line in details.get("balances", []):
            if line.get("asset_type") == "native":
                return str(line.get("balance"))
        return None
