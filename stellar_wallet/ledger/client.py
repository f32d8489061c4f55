"""Horizon client bound to a single Stellar network."""

import asyncio
from typing import Any

from loguru import logger
from stellar_sdk import Account, Network as SdkNetwork, ServerAsync, StrKey, TransactionEnvelope
from stellar_sdk.client.aiohttp_client import AiohttpClient
from stellar_sdk.exceptions import (
    BadRequestError,
    BaseHorizonError,
    ConnectionError as SdkConnectionError,
    NotFoundError,
)
from stellar_sdk.sep.exceptions import AccountRequiresMemoError

from stellar_wallet.config import Settings
from stellar_wallet.exceptions import (
    AccountNotFoundError,
    InvalidInputError,
    NetworkUnreachableError,
    SubmissionError,
)
from stellar_wallet.models import Network, short_address

PASSPHRASES: dict[Network, str] = {
    Network.TEST: SdkNetwork.TESTNET_NETWORK_PASSPHRASE,
    Network.PRODUCTION: SdkNetwork.PUBLIC_NETWORK_PASSPHRASE,
}


class LedgerClient:
    """Async Horizon client for one network.

    Wraps stellar_sdk's ServerAsync with:
    - A fixed network passphrase matching the endpoint
    - Per-request timeouts on every GET and POST
    - Translation of SDK errors into wallet exceptions

    Usage:
        async with bind_client(Network.TEST, settings) as client:
            account = await client.load_account(address)
    """

    DEFAULT_TIMEOUT: float = 30.0

    def __init__(
        self,
        network: Network,
        horizon_url: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client. No I/O happens until the first request.

        Args:
            network: Network served by horizon_url.
            horizon_url: Horizon base URL.
            timeout: Request timeout in seconds.
        """
        self._network = network
        self._horizon_url = horizon_url
        self._server = ServerAsync(
            horizon_url,
            client=AiohttpClient(request_timeout=timeout, post_timeout=timeout),
        )

    async def __aenter__(self) -> "LedgerClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def network(self) -> Network:
        """Get the bound network."""
        return self._network

    @property
    def horizon_url(self) -> str:
        """Get the bound Horizon URL."""
        return self._horizon_url

    @property
    def network_passphrase(self) -> str:
        """Get the passphrase transactions must be signed with."""
        return PASSPHRASES[self._network]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self._server.close()

    async def load_account(self, address: str) -> Account:
        """Load an account with its live sequence number.

        Args:
            address: Account address (G...).

        Returns:
            stellar_sdk Account; raw_data holds the full Horizon record.

        Raises:
            AccountNotFoundError: If the address is malformed or has no account.
            InvalidInputError: If Horizon rejects the request as malformed.
            NetworkUnreachableError: If Horizon cannot be reached.
        """
        if not StrKey.is_valid_ed25519_public_key(address):
            raise AccountNotFoundError(
                f"{address!r} is not a valid account address", address=address
            )

        try:
            account = await self._server.load_account(address)
        except NotFoundError as e:
            raise AccountNotFoundError(
                f"Account {address} not found on {self._network.value}", address=address
            ) from e
        except (SdkConnectionError, asyncio.TimeoutError) as e:
            raise NetworkUnreachableError(
                f"Horizon unreachable while loading account: {e}",
                operation="load_account",
            ) from e
        except BadRequestError as e:
            raise InvalidInputError(
                f"Horizon rejected account lookup for {address!r}: {e.title}"
            ) from e
        except BaseHorizonError as e:
            raise NetworkUnreachableError(
                f"Horizon error {e.status} while loading account: {e.title}",
                operation="load_account",
            ) from e

        logger.debug(
            "Loaded account {} sequence={}", short_address(address), account.sequence
        )
        return account

    async def account_details(self, address: str) -> dict[str, Any]:
        """Fetch the full Horizon account record (balances, sequence, ...).

        Raises:
            AccountNotFoundError: If the account does not exist.
            NetworkUnreachableError: If Horizon cannot be reached.
        """
        account = await self.load_account(address)
        return dict(account.raw_data or {})

    async def transactions(self, address: str, limit: int) -> list[dict[str, Any]]:
        """Fetch the most recent transactions of an account, newest first.

        Args:
            address: Account address.
            limit: Maximum number of records (single page).

        Returns:
            Raw Horizon transaction records.

        Raises:
            AccountNotFoundError: If the account does not exist.
            InvalidInputError: If Horizon rejects the query as malformed.
            NetworkUnreachableError: If Horizon cannot be reached.
        """
        builder = self._server.transactions().for_account(address).limit(limit).order(desc=True)

        try:
            response = await builder.call()
        except NotFoundError as e:
            raise AccountNotFoundError(
                f"Account {address} not found on {self._network.value}", address=address
            ) from e
        except (SdkConnectionError, asyncio.TimeoutError) as e:
            raise NetworkUnreachableError(
                f"Horizon unreachable while listing transactions: {e}",
                operation="transactions",
            ) from e
        except BadRequestError as e:
            raise InvalidInputError(
                f"Horizon rejected transaction query (limit={limit}): {e.detail or e.title}"
            ) from e
        except BaseHorizonError as e:
            raise NetworkUnreachableError(
                f"Horizon error {e.status} while listing transactions: {e.title}",
                operation="transactions",
            ) from e

        records: list[dict[str, Any]] = response.get("_embedded", {}).get("records", [])
        return records[:limit]

    async def submit(self, envelope: TransactionEnvelope) -> dict[str, Any]:
        """Submit a signed transaction envelope.

        Not retried: a rejected transaction is surfaced with the network's
        reason preserved.

        Returns:
            Horizon submission response (includes "hash" and "ledger").

        Raises:
            SubmissionError: If the network rejects the transaction.
            NetworkUnreachableError: If Horizon cannot be reached.
        """
        try:
            response: dict[str, Any] = await self._server.submit_transaction(envelope)
        except (SdkConnectionError, asyncio.TimeoutError) as e:
            raise NetworkUnreachableError(
                f"Horizon unreachable while submitting transaction: {e}",
                operation="submit",
            ) from e
        except AccountRequiresMemoError as e:
            raise SubmissionError(
                f"Transaction rejected: {e}", reason="destination requires a memo"
            ) from e
        except (BadRequestError, NotFoundError) as e:
            result_codes = (e.extras or {}).get("result_codes", {})
            reason = self._format_reason(e.title, result_codes)
            logger.warning("Transaction rejected by {}: {}", self._network.value, reason)
            raise SubmissionError(
                f"Transaction rejected: {reason}",
                reason=reason,
                result_codes=result_codes,
            ) from e
        except BaseHorizonError as e:
            raise SubmissionError(
                f"Transaction submission failed ({e.status}): {e.title}",
                reason=e.title or e.message,
            ) from e

        return response

    @staticmethod
    def _format_reason(title: str | None, result_codes: dict[str, Any]) -> str:
        """Render Horizon result codes verbatim, falling back to the title."""
        parts: list[str] = []
        if result_codes.get("transaction"):
            parts.append(str(result_codes["transaction"]))
        if result_codes.get("operations"):
            parts.append(",".join(str(code) for code in result_codes["operations"]))
        if parts:
            return " / ".join(parts)
        return title or "unknown error"


def bind_client(network: Network, settings: Settings) -> LedgerClient:
    """Select the Horizon endpoint and passphrase for a network.

    Pure selection: builds a client but performs no network I/O.
    """
    client = LedgerClient(
        network=network,
        horizon_url=settings.horizon.url_for(network),
        timeout=settings.wallet.request_timeout,
    )
    logger.debug("Bound ledger client to {} ({})", network.value, client.horizon_url)
    return client
