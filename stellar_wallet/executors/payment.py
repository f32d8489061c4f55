"""Native-asset payment executor: validate, build, sign, submit."""

from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from loguru import logger
from stellar_sdk import Account, Asset, TransactionBuilder, TransactionEnvelope

from stellar_wallet.exceptions import (
    AccountNotFoundError,
    DestinationNotFoundError,
    InvalidAmountError,
    InvalidInputError,
    SourceNotFoundError,
    WalletError,
)
from stellar_wallet.keys import KeyStore
from stellar_wallet.managers.balance import BalanceSync
from stellar_wallet.models import (
    MEMO_TEXT_MAX_BYTES,
    BalanceRefresh,
    Network,
    PaymentRequest,
    TxResult,
    WalletRecord,
    short_address,
)


class PaymentLedger(Protocol):
    """Protocol for the ledger operations a payment needs."""

    @property
    def network(self) -> Network:
        """Network the client is bound to."""
        ...

    @property
    def network_passphrase(self) -> str:
        """Passphrase of the bound network."""
        ...

    async def load_account(self, address: str) -> Account:
        """Load an account with its live sequence number."""
        ...

    async def account_details(self, address: str) -> dict[str, Any]:
        """Fetch the full account record."""
        ...

    async def submit(self, envelope: TransactionEnvelope) -> dict[str, Any]:
        """Submit a signed envelope."""
        ...


class PaymentExecutor:
    """Builds, signs, and submits a single native-asset payment.

    Preconditions are checked in a fixed order and each violation raises a
    distinct exception:
    1. InvalidInputError - blank destination/amount, or oversized memo
    2. DestinationNotFoundError - destination account does not exist
    3. SourceNotFoundError - wallet account cannot be loaded
    4. InvalidAmountError - amount is not a positive decimal

    The source account lookup is the only source of the sequence number.
    The transaction is signed with the passphrase of the client it is
    submitted to, so it can never be replayed on the other network.
    """

    # Stroops per XLM: amounts carry at most 7 fractional digits
    AMOUNT_DECIMALS = 7
    # Default transaction validity window in seconds
    DEFAULT_TX_TIMEOUT = 300
    # Minimum base fee in stroops
    MIN_BASE_FEE = 100
    # Largest amount an int64 stroop count can hold
    MAX_AMOUNT = Decimal("922337203685.4775807")

    def __init__(
        self,
        balance_sync: BalanceSync,
        tx_timeout: int = DEFAULT_TX_TIMEOUT,
        base_fee: int = MIN_BASE_FEE,
    ) -> None:
        """Initialize the executor.

        Args:
            balance_sync: Used for the best-effort refresh after a send.
            tx_timeout: Validity window of built transactions in seconds.
            base_fee: Fee per operation in stroops.
        """
        self._balance_sync = balance_sync
        self._tx_timeout = tx_timeout
        self._base_fee = max(base_fee, self.MIN_BASE_FEE)

    async def send(
        self,
        record: WalletRecord,
        client: PaymentLedger,
        request: PaymentRequest,
    ) -> TxResult:
        """Send a payment from the wallet account.

        Args:
            record: Wallet record; client must be bound to record.network.
            client: Ledger client the transaction is submitted to.
            request: Destination, amount, and optional memo.

        Returns:
            TxResult with the transaction hash and the refresh outcome.

        Raises:
            InvalidInputError: If destination or amount is blank, memo too long,
                or client is bound to a different network than the record.
            DestinationNotFoundError: If the destination does not exist.
            SourceNotFoundError: If the wallet account cannot be loaded.
            InvalidAmountError: If amount is not a valid positive decimal.
            SubmissionError: If the network rejects the transaction.
            NetworkUnreachableError: If Horizon cannot be reached.
        """
        if client.network != record.network:
            raise InvalidInputError(
                f"Client is bound to {client.network.value} but the wallet is on "
                f"{record.network.value}"
            )

        destination, amount, memo = self._validate_input(request)

        try:
            await client.load_account(destination)
        except AccountNotFoundError as e:
            raise DestinationNotFoundError(
                f"Destination account does not exist: {e}", address=destination
            ) from e

        try:
            source = await client.load_account(record.address)
        except AccountNotFoundError as e:
            raise SourceNotFoundError(
                f"Source account does not exist: {e}", address=record.address
            ) from e

        amount = self._validate_amount(amount)

        keys = KeyStore(record.key_pair)
        envelope = self.build_transaction(
            source, destination, amount, memo, client.network_passphrase
        )
        keys.sign(envelope)

        logger.info(
            "Submitting payment | to={} amount={} sequence={}",
            short_address(destination),
            amount,
            envelope.transaction.sequence,
        )
        response = await client.submit(envelope)

        tx_hash = str(response.get("hash") or envelope.hash_hex())
        ledger = response.get("ledger")
        logger.info("Payment submitted | hash={} ledger={}", tx_hash, ledger)

        refresh = await self._refresh_after_send(client, record)
        return TxResult(tx_hash=tx_hash, ledger=ledger, refresh=refresh)

    def build_transaction(
        self,
        source: Account,
        destination: str,
        amount: str,
        memo: str | None,
        network_passphrase: str,
    ) -> TransactionEnvelope:
        """Build an unsigned single-payment transaction.

        Consumes exactly one sequence number of `source`.

        Args:
            source: Loaded source account (live sequence number).
            destination: Destination address.
            amount: Validated amount string.
            memo: Optional text memo.
            network_passphrase: Passphrase of the network it will be submitted to.

        Returns:
            Unsigned TransactionEnvelope.
        """
        builder = (
            TransactionBuilder(
                source_account=source,
                network_passphrase=network_passphrase,
                base_fee=self._base_fee,
            )
            .append_payment_op(destination=destination, asset=Asset.native(), amount=amount)
            .set_timeout(self._tx_timeout)
        )
        if memo:
            builder.add_text_memo(memo)
        return builder.build()

    @staticmethod
    def _validate_input(request: PaymentRequest) -> tuple[str, str, str | None]:
        """Check required fields and memo size. No network calls.

        Raises:
            InvalidInputError: If a required field is blank or memo is too long.
        """
        destination = request.destination.strip()
        amount = request.amount.strip()
        if not destination or not amount:
            raise InvalidInputError("Recipient and amount are required")

        memo = request.memo or None
        if memo is not None and len(memo.encode("utf-8")) > MEMO_TEXT_MAX_BYTES:
            raise InvalidInputError(
                f"Memo is {len(memo.encode('utf-8'))} bytes (max {MEMO_TEXT_MAX_BYTES})"
            )

        return destination, amount, memo

    def _validate_amount(self, amount: str) -> str:
        """Validate amount is a positive decimal representable in stroops.

        Returns:
            The amount string unchanged.

        Raises:
            InvalidAmountError: If the amount is invalid.
        """
        try:
            value = Decimal(amount)
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid amount: {amount!r} is not a number") from None

        if not value.is_finite() or value <= 0:
            raise InvalidAmountError(f"Invalid amount: {amount} (must be positive)")

        if value > self.MAX_AMOUNT:
            raise InvalidAmountError(f"Invalid amount: {amount} (max {self.MAX_AMOUNT})")

        exponent = value.as_tuple().exponent
        if isinstance(exponent, int) and -exponent > self.AMOUNT_DECIMALS:
            raise InvalidAmountError(
                f"Invalid amount: {amount} (max {self.AMOUNT_DECIMALS} decimal places)"
            )

        return amount

    async def _refresh_after_send(
        self, client: PaymentLedger, record: WalletRecord
    ) -> BalanceRefresh:
        """Refresh the balance; failures are reported, never raised."""
        try:
            summary = await self._balance_sync.refresh(client, record)
        except WalletError as e:
            logger.warning("Balance refresh after send failed: {}", str(e))
            return BalanceRefresh(error_message=str(e))
        return BalanceRefresh(summary=summary)
