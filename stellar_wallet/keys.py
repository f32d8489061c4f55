"""Key custody for the wallet's single Stellar account.

The secret seed is treated as a capability: it lives inside the KeyPair's
SecretStr and is only unwrapped at the moment a transaction is signed.
"""

import io

from loguru import logger
from pydantic import SecretStr
from stellar_sdk import Keypair, TransactionEnvelope

from stellar_wallet.models import KeyPair, short_address


class KeyStore:
    """Owns the wallet key pair and performs signing.

    Usage:
        store = KeyStore.generate()
        print(f"Deposit address: {store.address}")

        # Sign a built transaction for the bound network
        store.sign(envelope)
    """

    def __init__(self, key_pair: KeyPair) -> None:
        """Initialize key store.

        Args:
            key_pair: Validated key pair of the wallet account.
        """
        self._key_pair = key_pair

    @classmethod
    def generate(cls) -> "KeyStore":
        """Create a key store holding a fresh random key pair."""
        keypair = Keypair.random()
        key_pair = KeyPair(
            public_key=keypair.public_key,
            secret_key=SecretStr(keypair.secret),
        )
        logger.info("Generated new key pair: {}", short_address(key_pair.public_key))
        return cls(key_pair)

    @property
    def key_pair(self) -> KeyPair:
        """Get the key pair."""
        return self._key_pair

    @property
    def address(self) -> str:
        """Get the public address."""
        return self._key_pair.public_key

    def sign(self, envelope: TransactionEnvelope) -> None:
        """Add this account's signature to a transaction envelope.

        The envelope carries its own network passphrase, so the signature
        is only valid on the network the transaction was built for.

        Args:
            envelope: Built, unsigned transaction envelope.
        """
        signer = Keypair.from_secret(self._key_pair.secret_key.get_secret_value())
        envelope.sign(signer)

    def address_qr(self) -> str:
        """Generate terminal QR code for the public address.

        Returns:
            ASCII/Unicode string representation of QR code.
        """
        import segno

        qr = segno.make(self.address)

        # Capture terminal output to string
        buffer = io.StringIO()
        qr.terminal(out=buffer, compact=True)
        return buffer.getvalue()
