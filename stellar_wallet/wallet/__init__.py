"""Wallet engine module.

Provides the single-account wallet engine and its key custody.
"""

from stellar_wallet.keys import KeyStore
from stellar_wallet.wallet.engine import WalletEngine

__all__ = ["KeyStore", "WalletEngine"]
