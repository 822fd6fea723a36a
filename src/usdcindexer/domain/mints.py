"""USDC mint addresses on Solana."""

USDC_MAINNET = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDC_DEVNET = "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"

USDC_MINTS: frozenset[str] = frozenset({USDC_MAINNET, USDC_DEVNET})

USDC_DECIMALS = 6
USDC_SYMBOL = "USDC"