"""Tests for native balance synchronization."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr
from stellar_sdk import Keypair

from stellar_wallet.exceptions import AccountNotFoundError, NetworkUnreachableError
from stellar_wallet.managers import BalanceSync
from stellar_wallet.models import BalanceStatus, KeyPair, WalletRecord
from stellar_wallet.persistence import WalletStore


@pytest.fixture
def record() -> WalletRecord:
    keypair = Keypair.random()
    return WalletRecord(
        key_pair=KeyPair(public_key=keypair.public_key, secret_key=SecretStr(keypair.secret)),
        cached_balance="1.0000000",
    )


@pytest.fixture
def store(tmp_path: Path) -> WalletStore:
    return WalletStore(tmp_path / "stellar_wallet.json")


def make_client(details: dict | None = None, error: Exception | None = None) -> MagicMock:
    """Mock ledger client returning fixed account details."""
    client = MagicMock()
    client.account_details = AsyncMock(return_value=details, side_effect=error)
    return client


class TestBalanceSync:
    """Tests for BalanceSync.refresh()."""

    @pytest.mark.asyncio
    async def test_native_balance_extracted(
        self, store: WalletStore, record: WalletRecord
    ) -> None:
        """Test the native line is picked among issued assets and persisted."""
        client = make_client(
            {
                "balances": [
                    {"asset_type": "credit_alphanum4", "asset_code": "USDC", "balance": "50.0"},
                    {"asset_type": "native", "balance": "9999.9999900"},
                ]
            }
        )

        summary = await BalanceSync(store).refresh(client, record)

        assert summary.status == BalanceStatus.FUNDED
        assert summary.balance == "9999.9999900"
        assert record.cached_balance == "9999.9999900"

        saved = await store.load()
        assert saved is not None
        assert saved.cached_balance == "9999.9999900"

    @pytest.mark.asyncio
    async def test_unfunded_account(self, record: WalletRecord) -> None:
        """Test a missing account is reported, not raised, and nothing is saved."""
        store = MagicMock()
        store.save = AsyncMock()
        client = make_client(error=AccountNotFoundError("missing", address=record.address))

        summary = await BalanceSync(store).refresh(client, record)

        assert summary.status == BalanceStatus.UNFUNDED
        assert summary.describe() == "Account not found (unfunded)"
        assert record.cached_balance == "1.0000000"
        store.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_native_line_leaves_record(self, record: WalletRecord) -> None:
        """Test an account without a native line does not touch the record."""
        store = MagicMock()
        store.save = AsyncMock()
        client = make_client({"balances": [{"asset_type": "credit_alphanum12", "balance": "3"}]})

        summary = await BalanceSync(store).refresh(client, record)

        assert summary.status == BalanceStatus.NO_NATIVE_BALANCE
        assert record.cached_balance == "1.0000000"
        store.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_network_error_propagates(self, record: WalletRecord) -> None:
        store = MagicMock()
        store.save = AsyncMock()
        client = make_client(error=NetworkUnreachableError("down"))

        with pytest.raises(NetworkUnreachableError):
            await BalanceSync(store).refresh(client, record)
        store.save.assert_not_awaited()
