"""USDC transfer indexer for Solana wallets."""

__version__ = "0.1.0"
