"""Friendbot client for funding fresh test-network accounts."""

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from stellar_wallet.models import FundingResult, Network, short_address


class FriendbotClient:
    """Async HTTP client for the test-network faucet.

    Issues a single funding request per call: no retry, no backoff. Any 2xx
    response counts as success and the body is ignored. Failures are
    reported in the returned FundingResult and never raised, since funding
    may simply take time to land.

    Usage:
        async with FriendbotClient(url) as friendbot:
            result = await friendbot.fund(address, Network.TEST)
    """

    DEFAULT_URL = "https://friendbot.stellar.org"
    DEFAULT_TIMEOUT: float = 30.0

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the Friendbot client.

        Args:
            url: Friendbot base URL.
            timeout: Request timeout in seconds.
        """
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "FriendbotClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session exists, creating if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fund(self, address: str, network: Network) -> FundingResult:
        """Request starter funds for a fresh address.

        Args:
            address: Address to fund.
            network: Network the address belongs to. Production addresses
                are never sent to the faucet.

        Returns:
            FundingResult describing the outcome.
        """
        if network != Network.TEST:
            logger.info(
                "Skipping faucet funding for {}: network is {}",
                short_address(address),
                network.value,
            )
            return FundingResult(address=address, skipped=True)

        session = await self._ensure_session()
        logger.info("Requesting Friendbot funding for {}", short_address(address))

        try:
            async with session.get(self._url, params={"addr": address}) as response:
                if 200 <= response.status < 300:
                    logger.info("Friendbot funded {}", short_address(address))
                    return FundingResult(address=address, funded=True)

                text = await response.text()
                error = f"Friendbot returned {response.status}: {text[:200]}"

        except aiohttp.ClientError as e:
            error = f"Friendbot unreachable: {e}"

        except asyncio.TimeoutError:
            error = "Friendbot request timeout"

        logger.warning("Funding failed for {}: {}", short_address(address), error)
        return FundingResult(address=address, error_message=error)
