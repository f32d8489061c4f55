"""Transaction executors."""

from stellar_wallet.executors.payment import PaymentExecutor

__all__ = ["PaymentExecutor"]
