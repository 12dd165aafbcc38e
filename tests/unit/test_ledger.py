"""Tests for the ledger: addresses, base balances and atomic scopes."""

import threading

import pytest

from exchange.errors import ArithmeticOverflow, InvalidAddress, TransferFailed, Underflow
from exchange.ledger import Contract, Ledger
from exchange.safe_int import UINT256_MAX
from exchange.token import FungibleToken
from exchange.units import to_wei
from tests.helpers import NOT_A_CONTRACT, ZERO_ADDRESS, funded_account


class TestAddresses:
    """Tests for account and contract address derivation."""

    def test_labelled_accounts_are_deterministic(self):
        """The same label yields the same address on any ledger."""
        assert Ledger().create_account("alice") == Ledger().create_account("alice")

    def test_unlabelled_accounts_are_distinct(self, ledger):
        assert ledger.create_account() != ledger.create_account()

    def test_addresses_are_well_formed(self, ledger):
        address = ledger.create_account("alice")
        assert address.startswith("0x")
        assert len(address) == 42
        assert address == address.lower()

    def test_contract_addresses_follow_deployer_nonce(self, ledger, owner):
        first = ledger.next_contract_address(owner)
        second = ledger.next_contract_address(owner)
        assert first != second

    def test_zero_deployer_rejected(self, ledger):
        with pytest.raises(InvalidAddress):
            ledger.next_contract_address(ZERO_ADDRESS)


class TestDirectory:
    """Tests for the contract directory."""

    def test_registered_contract_is_found(self, ledger, token):
        assert ledger.contract(token.address) is token
        assert ledger.find_contract(token.address.upper().replace("0X", "0x")) is token

    def test_missing_contract(self, ledger):
        assert ledger.find_contract(NOT_A_CONTRACT) is None
        with pytest.raises(InvalidAddress):
            ledger.contract(NOT_A_CONTRACT)

    def test_address_reuse_rejected(self, ledger, token):
        with pytest.raises(InvalidAddress):
            ledger.register(token)

    def test_tokens_satisfy_contract_protocol(self, token):
        assert isinstance(token, Contract)


class TestBaseAsset:
    """Tests for base-asset credit and transfer."""

    def test_credit(self, ledger):
        account = ledger.create_account("alice")
        ledger.credit(account, to_wei(5))
        ledger.credit(account, to_wei(1))
        assert ledger.balance_of(account) == to_wei(6)

    def test_credit_zero_address_rejected(self, ledger):
        with pytest.raises(InvalidAddress):
            ledger.credit(ZERO_ADDRESS, 1)

    def test_credit_negative_rejected(self, ledger):
        with pytest.raises(Underflow):
            ledger.credit(ledger.create_account("alice"), -1)

    def test_credit_overflow_rejected(self, ledger):
        account = funded_account(ledger, "alice", base_amount=UINT256_MAX)
        with pytest.raises(ArithmeticOverflow):
            ledger.credit(account, 1)
        assert ledger.balance_of(account) == UINT256_MAX

    def test_transfer(self, ledger, owner, user):
        ledger.transfer(owner, user, to_wei(1))
        assert ledger.balance_of(owner) == to_wei(9_999)
        assert ledger.balance_of(user) == to_wei(10_001)

    def test_transfer_insufficient_balance(self, ledger, owner, user):
        with pytest.raises(TransferFailed):
            ledger.transfer(owner, user, to_wei(10_001))
        assert ledger.balance_of(owner) == to_wei(10_000)
        assert ledger.balance_of(user) == to_wei(10_000)

    def test_transfer_negative_rejected(self, ledger, owner, user):
        with pytest.raises(TransferFailed):
            ledger.transfer(owner, user, -1)

    def test_balance_lookup_is_case_insensitive(self, ledger, owner):
        assert ledger.balance_of(owner.upper().replace("0X", "0x")) == to_wei(10_000)


class TestAtomic:
    """Tests for snapshot/restore atomic scopes."""

    def test_failure_restores_balances(self, ledger, owner, user):
        """Everything done inside a failed scope is undone."""
        with pytest.raises(RuntimeError), ledger.atomic("test"):
            ledger.transfer(owner, user, to_wei(1))
            raise RuntimeError("boom")
        assert ledger.balance_of(owner) == to_wei(10_000)
        assert ledger.balance_of(user) == to_wei(10_000)

    def test_failure_restores_contract_state(self, ledger, owner, user, token):
        with pytest.raises(RuntimeError), ledger.atomic("test"):
            token.transfer(owner, user, to_wei(10))
            token.approve(owner, user, to_wei(5))
            raise RuntimeError("boom")
        assert token.balance_of(user) == 0
        assert token.allowance(owner, user) == 0

    def test_contracts_deployed_in_failed_scope_disappear(self, ledger, owner):
        with pytest.raises(RuntimeError), ledger.atomic("test"):
            token = FungibleToken(ledger, owner, "Temp", "TMP")
            raise RuntimeError("boom")
        assert ledger.find_contract(token.address) is None
        # The nonce is restored too, so the address is handed out again
        assert ledger.next_contract_address(owner) == token.address

    def test_caught_inner_failure_keeps_outer_work(self, ledger, owner, user):
        """A failed nested call is undone; work done before it in the outer scope stays."""
        with ledger.atomic("outer"):
            ledger.transfer(owner, user, to_wei(1))
            with pytest.raises(TransferFailed):
                ledger.transfer(owner, user, to_wei(1_000_000))
            assert ledger.in_transaction
        assert not ledger.in_transaction
        assert ledger.balance_of(user) == to_wei(10_001)

    def test_caught_inner_failure_rolls_back_its_partial_effects(self, ledger, owner, user):
        """A nested scope that fails after mutating restores its own savepoint."""
        with ledger.atomic("outer"):
            ledger.transfer(owner, user, to_wei(1))
            with pytest.raises(RuntimeError), ledger.atomic("inner"):
                ledger.transfer(owner, user, to_wei(2))
                raise RuntimeError("boom")
            assert ledger.balance_of(user) == to_wei(10_001)
        assert ledger.balance_of(user) == to_wei(10_001)
        assert ledger.balance_of(owner) == to_wei(9_999)

    def test_caught_pool_failure_keeps_reserves_in_sync(self, ledger, seeded_pool, owner):
        """A caught add_liquidity failure also undoes the base it moved before the token pull."""
        with ledger.atomic("outer"):
            with pytest.raises(TransferFailed):
                seeded_pool.add_liquidity(owner, 10, 10**30)
            assert seeded_pool.reserves_in_sync()

        assert seeded_pool.reserves_in_sync()
        assert ledger.balance_of(seeded_pool.address) == to_wei(1000)
        assert ledger.balance_of(owner) == to_wei(9_000)

    def test_outer_failure_undoes_inner_success(self, ledger, owner, user):
        with pytest.raises(RuntimeError), ledger.atomic("outer"):
            with ledger.atomic("inner"):
                ledger.transfer(owner, user, to_wei(1))
            raise RuntimeError("boom")
        assert ledger.balance_of(user) == to_wei(10_000)

    def test_scopes_serialize_across_threads(self, ledger, owner, user):
        """Concurrent transfers produce one consistent total."""

        def send() -> None:
            for _ in range(50):
                ledger.transfer(owner, user, 1)

        threads = [threading.Thread(target=send) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert ledger.balance_of(user) == to_wei(10_000) + 200
        assert ledger.balance_of(owner) + ledger.balance_of(user) == to_wei(20_000)
