"""Single-account Stellar wallet engine."""

__version__ = "0.1.0"
