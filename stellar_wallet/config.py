"""Configuration architecture using pydantic-settings for typed environment loading."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from stellar_wallet.models import Network


class WalletConfig(BaseSettings):
    """Wallet runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = Path("data")
    record_file: str = "stellar_wallet.json"
    default_network: Network = Network.TEST

    # Per-request HTTP timeout in seconds
    request_timeout: float = 30.0
    # Transaction validity window in seconds
    tx_timeout: int = 300
    # Minimum network fee in stroops
    base_fee: int = 100
    history_limit: int = 20

    @property
    def record_path(self) -> Path:
        """Full path of the durable wallet record."""
        return self.data_dir / self.record_file


class HorizonConfig(BaseSettings):
    """Horizon endpoint configuration.

    Passphrases are not configurable: they are fixed per network and
    supplied by stellar_sdk.
    """

    model_config = SettingsConfigDict(
        env_prefix="HORIZON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    testnet_url: str = "https://horizon-testnet.stellar.org"
    public_url: str = "https://horizon.stellar.org"
    friendbot_url: str = "https://friendbot.stellar.org"

    def url_for(self, network: Network) -> str:
        """Return the Horizon URL serving the given network."""
        if network == Network.TEST:
            return self.testnet_url
        return self.public_url


class Settings:
    """Root settings aggregating all configuration sections."""

    def __init__(self) -> None:
        self.wallet = WalletConfig()
        self.horizon = HorizonConfig()


# Global settings instance - lazily loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
