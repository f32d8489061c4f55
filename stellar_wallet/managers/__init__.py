"""Manager layer for balance synchronization and history queries."""

from stellar_wallet.managers.balance import BalanceSync
from stellar_wallet.managers.history import HistoryQuery

__all__ = ["BalanceSync", "HistoryQuery"]
