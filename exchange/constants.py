"""Protocol constants for the exchange.

Centralizes the fee, well-known addresses and share-token metadata.
"""

# Protocol fee retained in the pool on every swap, in percent of the input
FEE_PCT = 1
FEE_DENOMINATOR = 100
# Input multiplier used in the pricing formula (99 for a 1% fee)
FEE_MULTIPLIER = FEE_DENOMINATOR - FEE_PCT

# Null identity; never a valid token, pool or recipient
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Smallest-unit scale for 18-decimal assets (base asset, tokens, shares)
DECIMALS = 18
WEI = 10**DECIMALS

# Liquidity share token metadata
SHARE_TOKEN_NAME = "Lp-Token"
SHARE_TOKEN_SYMBOL = "LP"
