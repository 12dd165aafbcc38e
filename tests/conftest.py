"""Pytest configuration and fixtures."""

import pytest

from exchange.ledger import Ledger
from exchange.pool import Pool
from exchange.registry import PoolRegistry
from exchange.service import ExchangeService
from exchange.token import FixedSupplyToken
from tests.helpers import SEED_BASE, SEED_TOKEN, funded_account, make_token, seed_pool


@pytest.fixture
def ledger() -> Ledger:
    """A fresh, empty ledger."""
    return Ledger()


@pytest.fixture
def owner(ledger: Ledger) -> str:
    """Funded account that deploys tokens and pools."""
    return funded_account(ledger, "owner")


@pytest.fixture
def user(ledger: Ledger) -> str:
    """Second funded account."""
    return funded_account(ledger, "user")


@pytest.fixture
def token(ledger: Ledger, owner: str) -> FixedSupplyToken:
    """10000-unit token held entirely by the owner."""
    return make_token(ledger, owner, "Doge")


@pytest.fixture
def pool(ledger: Ledger, owner: str, token: FixedSupplyToken) -> Pool:
    """Empty pool deployed directly by the owner (no registry)."""
    return Pool(ledger, owner, token.address)


@pytest.fixture
def seeded_pool(pool: Pool, owner: str) -> Pool:
    """Pool holding 1000 base / 2000 tokens, all shares owned by the owner."""
    seed_pool(pool, owner, SEED_BASE, SEED_TOKEN)
    return pool


@pytest.fixture
def registry(ledger: Ledger, owner: str) -> PoolRegistry:
    """Registry deployed by the owner."""
    return PoolRegistry(ledger, owner)


@pytest.fixture
def service() -> ExchangeService:
    """Exchange service on its own ledger."""
    return ExchangeService()
