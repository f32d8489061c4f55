"""Tests for the Horizon ledger client and network binding."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from stellar_sdk import Account, Keypair
from stellar_sdk import Network as SdkNetwork
from stellar_sdk.client.response import Response
from stellar_sdk.exceptions import (
    BadRequestError,
    BadResponseError,
    ConnectionError as SdkConnectionError,
    NotFoundError,
)

from stellar_wallet.config import Settings
from stellar_wallet.exceptions import (
    AccountNotFoundError,
    InvalidInputError,
    NetworkUnreachableError,
    SubmissionError,
)
from stellar_wallet.ledger import PASSPHRASES, LedgerClient, bind_client
from stellar_wallet.models import Network

HORIZON = "https://horizon-testnet.stellar.org"


def horizon_error(cls: type, status: int, body: dict) -> Exception:
    """Build an SDK Horizon error the way the SDK raises it."""
    return cls(Response(status, json.dumps(body), {}, f"{HORIZON}/accounts"))


@pytest.fixture
def address() -> str:
    return Keypair.random().public_key


@pytest.fixture
def client() -> LedgerClient:
    """Client bound to the test network."""
    return LedgerClient(Network.TEST, HORIZON, timeout=5.0)


class TestBindClient:
    """Tests for bind_client network selection."""

    def test_passphrases(self) -> None:
        """Test each network maps to its own passphrase."""
        assert PASSPHRASES[Network.TEST] == SdkNetwork.TESTNET_NETWORK_PASSPHRASE
        assert PASSPHRASES[Network.PRODUCTION] == SdkNetwork.PUBLIC_NETWORK_PASSPHRASE

    def test_bind_test_network(self) -> None:
        """Test binding selects the testnet endpoint and passphrase."""
        settings = Settings()
        client = bind_client(Network.TEST, settings)
        assert client.network == Network.TEST
        assert client.horizon_url == settings.horizon.testnet_url
        assert client.network_passphrase == SdkNetwork.TESTNET_NETWORK_PASSPHRASE

    def test_bind_production_network(self) -> None:
        """Test binding selects the public endpoint and passphrase."""
        settings = Settings()
        client = bind_client(Network.PRODUCTION, settings)
        assert client.network == Network.PRODUCTION
        assert client.horizon_url == settings.horizon.public_url
        assert client.network_passphrase == SdkNetwork.PUBLIC_NETWORK_PASSPHRASE


class TestLoadAccount:
    """Tests for LedgerClient.load_account() error mapping."""

    @pytest.mark.asyncio
    async def test_success(self, client: LedgerClient, address: str) -> None:
        """Test the SDK account is returned with its sequence."""
        account = Account(address, 1234, raw_data={"sequence": "1234", "balances": []})
        with patch.object(client._server, "load_account", new=AsyncMock(return_value=account)):
            loaded = await client.load_account(address)
        assert loaded.sequence == 1234

    @pytest.mark.asyncio
    async def test_invalid_address_skips_request(self, client: LedgerClient) -> None:
        """Test a malformed address is reported as not found without I/O."""
        with patch.object(client._server, "load_account", new=AsyncMock()) as load:
            with pytest.raises(AccountNotFoundError):
                await client.load_account("GNOTANADDRESS")
        load.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_found(self, client: LedgerClient, address: str) -> None:
        """Test a 404 maps to AccountNotFoundError."""
        error = horizon_error(NotFoundError, 404, {"title": "Resource Missing"})
        with patch.object(client._server, "load_account", new=AsyncMock(side_effect=error)):
            with pytest.raises(AccountNotFoundError) as exc_info:
                await client.load_account(address)
        assert exc_info.value.address == address

    @pytest.mark.asyncio
    async def test_connection_error(self, client: LedgerClient, address: str) -> None:
        """Test transport failures map to NetworkUnreachableError."""
        error = SdkConnectionError("connection refused")
        with patch.object(client._server, "load_account", new=AsyncMock(side_effect=error)):
            with pytest.raises(NetworkUnreachableError) as exc_info:
                await client.load_account(address)
        assert exc_info.value.operation == "load_account"

    @pytest.mark.asyncio
    async def test_timeout(self, client: LedgerClient, address: str) -> None:
        error = asyncio.TimeoutError()
        with patch.object(client._server, "load_account", new=AsyncMock(side_effect=error)):
            with pytest.raises(NetworkUnreachableError):
                await client.load_account(address)

    @pytest.mark.asyncio
    async def test_server_error(self, client: LedgerClient, address: str) -> None:
        """Test a 5xx maps to NetworkUnreachableError."""
        error = horizon_error(BadResponseError, 503, {"title": "Service Unavailable"})
        with patch.object(client._server, "load_account", new=AsyncMock(side_effect=error)):
            with pytest.raises(NetworkUnreachableError, match="503"):
                await client.load_account(address)

    @pytest.mark.asyncio
    async def test_bad_request_is_invalid_input(self, client: LedgerClient, address: str) -> None:
        """Test a 400 is reported as bad input, not as a connectivity problem."""
        error = horizon_error(BadRequestError, 400, {"title": "Bad Request"})
        with patch.object(client._server, "load_account", new=AsyncMock(side_effect=error)):
            with pytest.raises(InvalidInputError):
                await client.load_account(address)

    @pytest.mark.asyncio
    async def test_account_details(self, client: LedgerClient, address: str) -> None:
        """Test details expose the raw Horizon record."""
        raw = {"sequence": "7", "balances": [{"asset_type": "native", "balance": "5.0"}]}
        account = Account(address, 7, raw_data=raw)
        with patch.object(client._server, "load_account", new=AsyncMock(return_value=account)):
            details = await client.account_details(address)
        assert details["balances"][0]["balance"] == "5.0"


class TestTransactions:
    """Tests for LedgerClient.transactions()."""

    @staticmethod
    def _builder(records: list[dict]) -> MagicMock:
        builder = MagicMock()
        builder.for_account.return_value = builder
        builder.limit.return_value = builder
        builder.order.return_value = builder
        builder.call = AsyncMock(return_value={"_embedded": {"records": records}})
        return builder

    @pytest.mark.asyncio
    async def test_newest_first_single_page(self, client: LedgerClient, address: str) -> None:
        """Test the query requests one descending page of `limit` records."""
        builder = self._builder([{"hash": "b"}, {"hash": "a"}])
        with patch.object(client._server, "transactions", return_value=builder):
            records = await client.transactions(address, 2)

        builder.for_account.assert_called_once_with(address)
        builder.limit.assert_called_once_with(2)
        builder.order.assert_called_once_with(desc=True)
        assert [r["hash"] for r in records] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_truncates_to_limit(self, client: LedgerClient, address: str) -> None:
        builder = self._builder([{"hash": "c"}, {"hash": "b"}, {"hash": "a"}])
        with patch.object(client._server, "transactions", return_value=builder):
            records = await client.transactions(address, 1)
        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_not_found(self, client: LedgerClient, address: str) -> None:
        builder = self._builder([])
        builder.call = AsyncMock(side_effect=horizon_error(NotFoundError, 404, {}))
        with patch.object(client._server, "transactions", return_value=builder):
            with pytest.raises(AccountNotFoundError):
                await client.transactions(address, 5)


    @pytest.mark.asyncio
    async def test_limit_rejected_is_invalid_input(
        self, client: LedgerClient, address: str
    ) -> None:
        """Test Horizon refusing the page size surfaces as bad input."""
        builder = self._builder([])
        builder.call = AsyncMock(
            side_effect=horizon_error(
                BadRequestError,
                400,
                {"title": "Bad Request", "detail": "limit must be <= 200"},
            )
        )
        with patch.object(client._server, "transactions", return_value=builder):
            with pytest.raises(InvalidInputError, match="limit must be <= 200"):
                await client.transactions(address, 500)


class TestSubmit:
    """Tests for LedgerClient.submit() error mapping."""

    @pytest.mark.asyncio
    async def test_success(self, client: LedgerClient) -> None:
        response = {"hash": "abc123", "ledger": 42}
        with patch.object(
            client._server, "submit_transaction", new=AsyncMock(return_value=response)
        ):
            result = await client.submit(MagicMock())
        assert result["hash"] == "abc123"

    @pytest.mark.asyncio
    async def test_rejection_preserves_result_codes(self, client: LedgerClient) -> None:
        """Test Horizon result codes are carried verbatim."""
        error = horizon_error(
            BadRequestError,
            400,
            {
                "title": "Transaction Failed",
                "extras": {
                    "result_codes": {
                        "transaction": "tx_failed",
                        "operations": ["op_underfunded"],
                    }
                },
            },
        )
        with patch.object(
            client._server, "submit_transaction", new=AsyncMock(side_effect=error)
        ):
            with pytest.raises(SubmissionError) as exc_info:
                await client.submit(MagicMock())

        assert exc_info.value.reason == "tx_failed / op_underfunded"
        assert exc_info.value.result_codes["operations"] == ["op_underfunded"]

    @pytest.mark.asyncio
    async def test_rejection_without_codes_uses_title(self, client: LedgerClient) -> None:
        error = horizon_error(BadRequestError, 400, {"title": "Transaction Malformed"})
        with patch.object(
            client._server, "submit_transaction", new=AsyncMock(side_effect=error)
        ):
            with pytest.raises(SubmissionError) as exc_info:
                await client.submit(MagicMock())
        assert exc_info.value.reason == "Transaction Malformed"

    @pytest.mark.asyncio
    async def test_connection_error(self, client: LedgerClient) -> None:
        """Test an unreachable endpoint is not a rejection."""
        with patch.object(
            client._server,
            "submit_transaction",
            new=AsyncMock(side_effect=SdkConnectionError("reset")),
        ):
            with pytest.raises(NetworkUnreachableError) as exc_info:
                await client.submit(MagicMock())
        assert exc_info.value.operation == "submit"
