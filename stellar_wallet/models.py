"""Domain models for the stellar-wallet engine."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from time import time

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from stellar_sdk import Keypair
from stellar_sdk.exceptions import Ed25519SecretSeedInvalidError

# Stellar text memos are limited to 28 bytes
MEMO_TEXT_MAX_BYTES = 28


class Network(str, Enum):
    """Ledger network the wallet is bound to.

    Values are the identifiers written to the record file.
    """

    TEST = "testnet"
    PRODUCTION = "public"


class BalanceStatus(str, Enum):
    """Outcome of a balance lookup."""

    FUNDED = "FUNDED"
    UNFUNDED = "UNFUNDED"
    NO_NATIVE_BALANCE = "NO_NATIVE_BALANCE"


def short_address(address: str) -> str:
    """Return shortened address for display (GABC...WXYZ)."""
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"


# =============================================================================
# Wallet State
# =============================================================================


class KeyPair(BaseModel):
    """Public address and secret seed of the wallet's single account.

    Immutable. The public key is always the address derived from the
    secret seed; a mismatched pair fails validation.
    """

    model_config = {"frozen": True}

    public_key: str = Field(..., min_length=1, description="Account address (G...)")
    secret_key: SecretStr = Field(..., description="Secret seed (S...)")

    @model_validator(mode="after")
    def _check_derivation(self) -> "KeyPair":
        try:
            derived = Keypair.from_secret(self.secret_key.get_secret_value()).public_key
        except Ed25519SecretSeedInvalidError as e:
            raise ValueError("secret_key is not a valid secret seed") from e
        if derived != self.public_key:
            raise ValueError("public_key is not derived from secret_key")
        return self

    @property
    def masked_secret(self) -> str:
        """Secret seed with all but the first and last characters hidden."""
        secret = self.secret_key.get_secret_value()
        return f"{secret[0]}{'*' * (len(secret) - 2)}{secret[-1]}"


class WalletRecord(BaseModel):
    """The persisted wallet: key pair, selected network, last-known balance.

    Mutated in place by network switch, balance refresh, and send; the
    cached balance is advisory and never used to build transactions.
    """

    model_config = {"validate_assignment": True}

    key_pair: KeyPair
    network: Network = Network.TEST
    cached_balance: str = Field(default="0", description="Last observed native balance")

    @field_validator("cached_balance")
    @classmethod
    def _check_decimal(cls, value: str) -> str:
        try:
            Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"cached_balance is not a decimal string: {value!r}") from e
        return value

    @property
    def address(self) -> str:
        """The wallet's public address."""
        return self.key_pair.public_key

    def to_document(self) -> dict[str, str]:
        """Serialize to the flat record-file document."""
        return RecordDocument(
            public_key=self.key_pair.public_key,
            secret_key=self.key_pair.secret_key.get_secret_value(),
            balance=self.cached_balance,
            network=self.network,
        ).model_dump(mode="json")

    @classmethod
    def from_document(cls, data: object) -> "WalletRecord":
        """Build a record from a parsed record-file document.

        Raises:
            pydantic.ValidationError: If the document does not have the
                exact record shape.
        """
        document = RecordDocument.model_validate(data)
        return cls(
            key_pair=KeyPair(
                public_key=document.public_key,
                secret_key=SecretStr(document.secret_key),
            ),
            network=document.network,
            cached_balance=document.balance,
        )


class RecordDocument(BaseModel):
    """On-disk shape of the wallet record. Unknown fields are rejected."""

    model_config = {"extra": "forbid", "frozen": True}

    public_key: str
    secret_key: str
    balance: str
    network: Network


# =============================================================================
# Payment Models
# =============================================================================


class PaymentRequest(BaseModel):
    """A single native-asset payment as entered by the user.

    Transient: fields hold raw input and are validated by the executor so
    that failures surface in a fixed order.
    """

    model_config = {"frozen": True}

    destination: str = Field(..., description="Destination address")
    amount: str = Field(..., description="Amount in XLM as a decimal string")
    memo: str | None = Field(default=None, description="Optional text memo")


class BalanceSummary(BaseModel):
    """Result of a balance refresh."""

    model_config = {"frozen": True}

    status: BalanceStatus
    balance: str | None = Field(default=None, description="Native balance, if funded")
    checked_at: float = Field(default_factory=time)

    def describe(self) -> str:
        """Human-readable one-line summary."""
        if self.status == BalanceStatus.FUNDED:
            return f"Balance: {self.balance} XLM"
        if self.status == BalanceStatus.UNFUNDED:
            return "Account not found (unfunded)"
        return "No XLM balance found"


class BalanceRefresh(BaseModel):
    """Best-effort balance refresh outcome attached to a send."""

    model_config = {"frozen": True}

    summary: BalanceSummary | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the refresh completed."""
        return self.error_message is None


class TxResult(BaseModel):
    """Result of a successful payment submission."""

    model_config = {"frozen": True}

    tx_hash: str = Field(..., min_length=1, description="Ledger-assigned transaction hash")
    ledger: int | None = Field(default=None, description="Ledger the transaction closed in")
    refresh: BalanceRefresh = Field(default_factory=BalanceRefresh)


class FundingResult(BaseModel):
    """Best-effort faucet funding outcome."""

    model_config = {"frozen": True}

    address: str
    funded: bool = False
    skipped: bool = False
    error_message: str | None = None


class TxSummary(BaseModel):
    """One entry of the wallet's transaction history."""

    model_config = {"frozen": True}

    tx_hash: str = Field(..., min_length=1)
    created_at: datetime = Field(..., description="Ledger close time")
    fee_charged: int = Field(default=0, ge=0, description="Fee charged in stroops")
    successful: bool = True
    memo: str | None = None
