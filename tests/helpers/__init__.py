"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Addresses and reference amounts
- factories: Account, token and pool setup functions
"""

from tests.helpers.constants import (
    ACCOUNT_FUNDING,
    NOT_A_CONTRACT,
    SEED_BASE,
    SEED_TOKEN,
    TOKEN_SUPPLY,
    ZERO_ADDRESS,
)
from tests.helpers.factories import funded_account, make_token, seed_pool

__all__ = [
    # Constants
    "ZERO_ADDRESS",
    "NOT_A_CONTRACT",
    "TOKEN_SUPPLY",
    "ACCOUNT_FUNDING",
    "SEED_BASE",
    "SEED_TOKEN",
    # Factories
    "funded_account",
    "make_token",
    "seed_pool",
]
