"""Recent transaction history for display."""

from collections.abc import Iterator
from typing import Any, Protocol

from loguru import logger

from stellar_wallet.exceptions import InvalidInputError
from stellar_wallet.models import TxSummary, short_address

DEFAULT_HISTORY_LIMIT = 20
# Largest page Horizon serves
MAX_HISTORY_LIMIT = 200


class TransactionReader(Protocol):
    """Protocol for account transaction listing."""

    async def transactions(self, address: str, limit: int) -> list[dict[str, Any]]:
        """Fetch recent transaction records, newest first."""
        ...


class HistoryQuery:
    """Fetches a single page of recent transactions for an address."""

    async def list(
        self,
        client: TransactionReader,
        address: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Iterator[TxSummary]:
        """Fetch up to `limit` most recent transactions.

        The page is fetched eagerly; records are mapped lazily and the
        returned iterator can be consumed only once.

        Args:
            client: Client bound to the wallet's network.
            address: Account address.
            limit: Maximum number of entries.

        Returns:
            Iterator of TxSummary, most recent first.

        Raises:
            InvalidInputError: If limit is outside 1..MAX_HISTORY_LIMIT.
            AccountNotFoundError: If the account does not exist.
            NetworkUnreachableError: If Horizon cannot be reached.
        """
        if not 1 <= limit <= MAX_HISTORY_LIMIT:
            raise InvalidInputError(
                f"History limit must be between 1 and {MAX_HISTORY_LIMIT}, got {limit}"
            )

        records = await client.transactions(address, limit)
        logger.debug("Fetched {} transactions for {}", len(records), short_address(address))
        return (self._to_summary(record) for record in records[:limit])

    @staticmethod
    def _to_summary(record: dict[str, Any]) -> TxSummary:
        """Map a Horizon transaction record to a TxSummary."""
        memo = record.get("memo") if record.get("memo_type") == "text" else None
        return TxSummary(
            tx_hash=record["hash"],
            created_at=record["created_at"],
            fee_charged=int(record.get("fee_charged") or 0),
            successful=bool(record.get("successful", True)),
            memo=memo,
        )
