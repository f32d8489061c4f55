"""Custom exceptions for the stellar-wallet engine."""


class WalletError(Exception):
    """Base exception for all wallet engine errors."""

    pass


# =============================================================================
# Persistence Layer Exceptions
# =============================================================================


class RecordIOError(WalletError):
    """Raised when the wallet record cannot be written or read."""

    pass


class DeserializationError(WalletError):
    """Raised when the wallet record exists but is malformed.

    Fatal at startup: a partially trusted wallet must never be used.
    """

    pass


# =============================================================================
# Ledger Layer Exceptions
# =============================================================================


class NetworkUnreachableError(WalletError):
    """Raised when Horizon or Friendbot cannot be reached."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class AccountNotFoundError(WalletError):
    """Raised when an account does not exist on the bound ledger."""

    def __init__(self, message: str, address: str | None = None) -> None:
        super().__init__(message)
        self.address = address


class DestinationNotFoundError(AccountNotFoundError):
    """Raised when a payment destination has never been activated."""

    pass


class SourceNotFoundError(AccountNotFoundError):
    """Raised when the wallet's own account cannot be loaded."""

    pass


# =============================================================================
# Payment Layer Exceptions
# =============================================================================


class InvalidInputError(WalletError):
    """Raised when required payment fields are missing or malformed."""

    pass


class InvalidAmountError(WalletError):
    """Raised when the payment amount is not a positive decimal."""

    pass


class SubmissionError(WalletError):
    """Raised when the network rejects a submitted transaction.

    Attributes:
        reason: The network-reported reason, preserved verbatim.
        result_codes: Horizon result codes, if provided.
    """

    def __init__(
        self,
        message: str,
        reason: str = "",
        result_codes: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.result_codes = result_codes or {}
