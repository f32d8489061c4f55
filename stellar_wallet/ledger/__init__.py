"""Ledger access layer: Horizon client binding and test-network funding."""

from stellar_wallet.ledger.client import PASSPHRASES, LedgerClient, bind_client
from stellar_wallet.ledger.funding import FriendbotClient

__all__ = ["PASSPHRASES", "FriendbotClient", "LedgerClient", "bind_client"]
