"""Wallet engine: the single entry point for wallet operations."""

import asyncio
from collections.abc import Iterator
from typing import Any

from loguru import logger

from stellar_wallet.config import Settings, get_settings
from stellar_wallet.executors import PaymentExecutor
from stellar_wallet.keys import KeyStore
from stellar_wallet.ledger import FriendbotClient, LedgerClient, bind_client
from stellar_wallet.managers import BalanceSync, HistoryQuery
from stellar_wallet.models import (
    BalanceSummary,
    FundingResult,
    Network,
    PaymentRequest,
    TxResult,
    TxSummary,
    WalletRecord,
    short_address,
)
from stellar_wallet.persistence import WalletStore


class WalletEngine:
    """Owns the wallet record and the ledger client bound to its network.

    Every operation runs under an exclusive lock, so read-modify-persist
    cycles on the single record never interleave. Concurrent sends would
    otherwise race on the account sequence number.

    Usage:
        async with await WalletEngine.load_or_create() as engine:
            print((await engine.refresh_balance()).describe())
            result = await engine.send_payment(
                PaymentRequest(destination="G...", amount="10.5")
            )
    """

    def __init__(
        self,
        record: WalletRecord,
        store: WalletStore,
        settings: Settings,
        friendbot: FriendbotClient | None = None,
    ) -> None:
        """Initialize the engine and bind the client to record.network.

        Args:
            record: Loaded or freshly created wallet record.
            store: Store the record is persisted to.
            settings: Application settings.
            friendbot: Faucet client; created from settings if not given.
        """
        self._record = record
        self._store = store
        self._settings = settings
        self._friendbot = friendbot or FriendbotClient(
            url=settings.horizon.friendbot_url,
            timeout=settings.wallet.request_timeout,
        )
        self._client: LedgerClient = bind_client(record.network, settings)
        self._lock = asyncio.Lock()

        self._balance_sync = BalanceSync(store)
        self._history = HistoryQuery()
        self._executor = PaymentExecutor(
            self._balance_sync,
            tx_timeout=settings.wallet.tx_timeout,
            base_fee=settings.wallet.base_fee,
        )
        self._last_funding: FundingResult | None = None

    async def __aenter__(self) -> "WalletEngine":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @classmethod
    async def load_or_create(
        cls,
        settings: Settings | None = None,
        store: WalletStore | None = None,
        friendbot: FriendbotClient | None = None,
    ) -> "WalletEngine":
        """Load the wallet record, creating and funding a new one if absent.

        Args:
            settings: Application settings (defaults to get_settings()).
            store: Record store (defaults to settings.wallet.record_path).
            friendbot: Faucet client override.

        Returns:
            A ready WalletEngine.

        Raises:
            DeserializationError: If the stored record is corrupt.
            RecordIOError: If a new record cannot be persisted.
        """
        settings = settings or get_settings()
        store = store or WalletStore(settings.wallet.record_path)

        record = await store.load()
        if record is not None:
            return cls(record, store, settings, friendbot)

        keys = KeyStore.generate()
        record = WalletRecord(
            key_pair=keys.key_pair,
            network=settings.wallet.default_network,
            cached_balance="0",
        )
        engine = cls(record, store, settings, friendbot)
        try:
            engine._last_funding = await engine._friendbot.fund(record.address, record.network)
            await store.save(record)
        except Exception:
            await engine.close()
            raise

        logger.info(
            "Created wallet {} on {}", short_address(record.address), record.network.value
        )
        return engine

    @property
    def record(self) -> WalletRecord:
        """Get the wallet record."""
        return self._record

    @property
    def client(self) -> LedgerClient:
        """Get the currently bound ledger client."""
        return self._client

    @property
    def address(self) -> str:
        """Get the wallet's public address."""
        return self._record.address

    @property
    def last_funding(self) -> FundingResult | None:
        """Outcome of the faucet request made at creation, if any."""
        return self._last_funding

    def address_qr(self) -> str:
        """Terminal QR code of the wallet address."""
        return KeyStore(self._record.key_pair).address_qr()

    async def switch_network(self, network: Network) -> None:
        """Select a network and rebind the client before any further query.

        Switching to the active network only rebinds the client.

        Raises:
            RecordIOError: If the record cannot be persisted.
        """
        async with self._lock:
            old_client = self._client
            self._client = bind_client(network, self._settings)
            await old_client.close()

            if network == self._record.network:
                logger.debug("Network already {}; client rebound", network.value)
                return

            self._record.network = network
            await self._store.save(self._record)
            logger.info("Switched network to {}", network.value)

    async def refresh_balance(self) -> BalanceSummary:
        """Refresh the cached native balance from the ledger.

        Raises:
            NetworkUnreachableError: If Horizon cannot be reached.
            RecordIOError: If the record cannot be persisted.
        """
        async with self._lock:
            return await self._balance_sync.refresh(self._client, self._record)

    async def send_payment(self, request: PaymentRequest) -> TxResult:
        """Send a native payment; see PaymentExecutor.send for failures."""
        async with self._lock:
            return await self._executor.send(self._record, self._client, request)

    async def list_history(self, limit: int | None = None) -> Iterator[TxSummary]:
        """Fetch the most recent transactions, newest first.

        Args:
            limit: Maximum entries (defaults to settings.wallet.history_limit).
        """
        async with self._lock:
            return await self._history.list(
                self._client,
                self._record.address,
                limit if limit is not None else self._settings.wallet.history_limit,
            )

    async def close(self) -> None:
        """Release HTTP sessions."""
        await self._client.close()
        await self._friendbot.close()
