"""Durable storage for the wallet record."""

import json
import os
from pathlib import Path

import aiofiles
import aiofiles.os
from loguru import logger
from pydantic import ValidationError

from stellar_wallet.exceptions import DeserializationError, RecordIOError
from stellar_wallet.models import WalletRecord, short_address

# Owner read/write only: the record holds the secret seed
RECORD_FILE_MODE = 0o600


def _owner_only_opener(path: str, flags: int) -> int:
    return os.open(path, flags, RECORD_FILE_MODE)


class WalletStore:
    """Loads and saves the single wallet record as a JSON document.

    Saves are whole-file overwrites done write-temp-then-rename, so a crash
    mid-write leaves the previous valid record in place.

    Example record (stellar_wallet.json):
        {
          "public_key": "GABC...",
          "secret_key": "SXYZ...",
          "balance": "10000.0000000",
          "network": "testnet"
        }
    """

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the record file. Parent directory is created
                on first save.
        """
        self._path = path

    @property
    def path(self) -> Path:
        """Get the record file path."""
        return self._path

    async def load(self) -> WalletRecord | None:
        """Read the record from disk.

        Returns:
            The stored WalletRecord, or None if no wallet exists yet (file
            absent or unreadable).

        Raises:
            DeserializationError: If the file exists but is not a valid record.
        """
        try:
            async with aiofiles.open(self._path, "rb") as f:
                raw = await f.read()
        except OSError as e:
            logger.info("No wallet record at {} ({})", self._path, e.__class__.__name__)
            return None

        try:
            record = WalletRecord.from_document(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            # Never echo the document itself: it contains the secret seed
            raise DeserializationError(
                f"Wallet record {self._path} is corrupt: {e.__class__.__name__}"
            ) from None

        logger.info(
            "Loaded wallet {} on {}", short_address(record.address), record.network.value
        )
        return record

    async def save(self, record: WalletRecord) -> None:
        """Write the full record, replacing any previous one atomically.

        Args:
            record: The record to persist.

        Raises:
            RecordIOError: If the record cannot be written.
        """
        tmp_path = self._path.with_name(f".{self._path.name}.tmp")
        payload = json.dumps(record.to_document(), indent=2)

        try:
            await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
            async with aiofiles.open(
                tmp_path, "w", encoding="utf-8", opener=_owner_only_opener
            ) as f:
                await f.write(payload)
                await f.flush()
                os.fsync(f.fileno())
            # The temp file may predate this call with wider permissions
            os.chmod(tmp_path, RECORD_FILE_MODE)
            await aiofiles.os.replace(tmp_path, self._path)
        except OSError as e:
            logger.error("Failed to persist wallet record to {}: {}", self._path, e)
            raise RecordIOError(f"Failed to save wallet record to {self._path}: {e}") from e

        logger.debug("Saved wallet record to {}", self._path)
