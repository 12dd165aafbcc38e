"""Integration tests for the exchange API: a full session over HTTP."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from exchange.api.endpoints import get_service
from exchange.api.main import app
from exchange.service import ExchangeService
from exchange.units import to_wei

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20


def wei(value: int | str) -> str:
    """Whole units as a smallest-unit decimal string."""
    return str(to_wei(value))


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client bound to a fresh exchange."""
    service = ExchangeService()
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def deploy_listed_token(
    client: TestClient, provider: str, symbol: str, base: int, tokens: int
) -> tuple[str, str]:
    """Deploy a token, register its pool and seed it. Returns (token, pool)."""
    response = client.post(
        "/tokens",
        json={"deployer": provider, "name": symbol, "symbol": symbol, "initial_supply": "10000"},
    )
    assert response.status_code == 201
    token = response.json()["address"]

    response = client.post("/pools", json={"token": token})
    assert response.status_code == 201
    pool = response.json()["address"]

    response = client.post(
        f"/tokens/{token}/approve",
        json={"owner": provider, "spender": pool, "amount": wei(tokens)},
    )
    assert response.status_code == 200

    response = client.post(
        f"/pools/{token}/liquidity",
        json={"sender": provider, "base_amount": wei(base), "max_token_amount": wei(tokens)},
    )
    assert response.status_code == 200
    return token, pool


@pytest.fixture
def funded(client: TestClient) -> TestClient:
    for account in (ALICE, BOB):
        response = client.post(f"/accounts/{account}/credit", json={"amount": wei(10_000)})
        assert response.status_code == 200
    return client


class TestAccountsAndTokens:
    def test_credit_and_read_balance(self, client):
        client.post(f"/accounts/{ALICE}/credit", json={"amount": wei(5)})
        response = client.get(f"/accounts/{ALICE}")
        assert response.json() == {"address": ALICE, "balance": wei(5)}

    def test_deploy_token(self, client):
        response = client.post(
            "/tokens",
            json={"deployer": ALICE, "name": "Doge", "symbol": "Doge", "initial_supply": "10000"},
        )
        assert response.status_code == 201
        token = response.json()
        assert token["total_supply"] == wei(10_000)
        assert token["decimals"] == 18

        response = client.get(f"/tokens/{token['address']}/balances/{ALICE}")
        assert response.json()["balance"] == wei(10_000)
        assert client.get(f"/tokens/{token['address']}").json() == token


class TestLiquidity:
    def test_seed_top_up_and_withdraw(self, funded):
        token, pool = deploy_listed_token(funded, ALICE, "Doge", base=100, tokens=300)

        response = funded.get(f"/pools/{token}")
        assert response.json()["base_reserve"] == wei(100)
        assert response.json()["token_reserve"] == wei(300)
        assert response.json()["share_supply"] == wei(100)

        funded.post(
            f"/tokens/{token}/approve",
            json={"owner": ALICE, "spender": pool, "amount": wei(150)},
        )
        response = funded.post(
            f"/pools/{token}/liquidity",
            json={"sender": ALICE, "base_amount": wei(50), "max_token_amount": wei(150)},
        )
        assert response.status_code == 200
        assert response.json()["shares_minted"] == wei(50)

        response = funded.post(
            f"/pools/{token}/liquidity/remove",
            json={"sender": ALICE, "share_amount": wei(75)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["base_out"] == wei(75)
        assert body["token_out"] == wei(225)

        response = funded.get(f"/pools/{token}/shares/{ALICE}")
        assert response.json()["shares"] == wei(75)

    def test_ratio_violation_is_rejected(self, funded):
        token, pool = deploy_listed_token(funded, ALICE, "Doge", base=100, tokens=200)
        funded.post(
            f"/tokens/{token}/approve",
            json={"owner": ALICE, "spender": pool, "amount": wei(50)},
        )

        response = funded.post(
            f"/pools/{token}/liquidity",
            json={"sender": ALICE, "base_amount": wei(50), "max_token_amount": wei(50)},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidAmount"
        assert funded.get(f"/pools/{token}").json()["base_reserve"] == wei(100)


class TestSwaps:
    def test_quote_then_swap_base_for_token(self, funded):
        token, _ = deploy_listed_token(funded, ALICE, "Doge", base=1000, tokens=2000)

        quote = funded.get(f"/pools/{token}/quote", params={"amount": wei(1), "side": "base"})
        assert quote.json()["amount_out"] == wei("1.978041738678708079")

        response = funded.post(
            f"/pools/{token}/swap/base-for-token",
            json={"sender": BOB, "base_amount": wei(1), "min_tokens": wei("1.97")},
        )
        assert response.status_code == 200
        assert response.json()["amount_out"] == wei("1.978041738678708079")
        assert response.json()["pool"]["base_reserve"] == wei(1001)

        balance = funded.get(f"/tokens/{token}/balances/{BOB}").json()["balance"]
        assert balance == wei("1.978041738678708079")

    def test_swap_token_for_base(self, funded):
        token, pool = deploy_listed_token(funded, ALICE, "Doge", base=1000, tokens=2000)
        funded.post(
            f"/tokens/{token}/approve",
            json={"owner": ALICE, "spender": pool, "amount": wei(2)},
        )

        quote = funded.get(f"/pools/{token}/quote", params={"amount": wei(2), "side": "token"})
        response = funded.post(
            f"/pools/{token}/swap/token-for-base",
            json={"sender": ALICE, "tokens_sold": wei(2), "min_base": wei("0.9")},
        )

        assert response.status_code == 200
        assert response.json()["amount_out"] == wei("0.989020869339354039")
        assert response.json()["amount_out"] == quote.json()["amount_out"]

    def test_token_to_token(self, funded):
        token_a, pool_a = deploy_listed_token(funded, ALICE, "TKA", base=1000, tokens=2000)
        token_b, _ = deploy_listed_token(funded, BOB, "TKB", base=1000, tokens=1000)

        quote = funded.get(
            "/quote/token-to-token",
            params={"token_in": token_a, "token_out": token_b, "amount": wei(10)},
        )
        assert quote.status_code == 200
        assert quote.json()["amount_out"] == wei("4.852698493489877956")

        funded.post(
            f"/tokens/{token_a}/approve",
            json={"owner": ALICE, "spender": pool_a, "amount": wei(10)},
        )
        response = funded.post(
            f"/pools/{token_a}/swap/token-for-token",
            json={
                "sender": ALICE,
                "tokens_sold": wei(10),
                "min_tokens_bought": wei("4.8"),
                "target_token": token_b,
            },
        )
        assert response.status_code == 200
        assert response.json()["amount_out"] == wei("4.852698493489877956")

        balance = funded.get(f"/tokens/{token_b}/balances/{ALICE}").json()["balance"]
        assert balance == wei("4.852698493489877956")

    def test_list_pools(self, funded):
        token_a, _ = deploy_listed_token(funded, ALICE, "TKA", base=10, tokens=20)
        token_b, _ = deploy_listed_token(funded, BOB, "TKB", base=10, tokens=10)

        pools = funded.get("/pools").json()["pools"]

        assert [pool["token"] for pool in pools] == [token_a, token_b]
