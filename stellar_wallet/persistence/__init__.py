"""Persistence layer for the stellar-wallet engine.

Provides:
- WalletStore: Atomic JSON storage of the single wallet record
"""

from stellar_wallet.persistence.record_store import WalletStore

__all__ = ["WalletStore"]
