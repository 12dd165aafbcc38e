"""Serialized execution substrate for tokens, pools and the registry.

The ledger plays the part a chain plays for on-chain contracts:
- hands out account and contract addresses
- holds base-asset balances
- keeps a directory of deployed contracts, so contracts refer to each
  other by address instead of holding references
- runs every public operation as one atomic, totally ordered step

Atomicity is a snapshot/restore transaction: each `atomic()` scope captures
the base balances, nonces and every contract's state, and restores all of
it if the scope exits with an exception. Nested scopes (a pool calling into
another pool) take their own savepoint, so a caught inner failure leaves no
trace, and an outer failure still undoes everything. A re-entrant lock
serializes scopes across threads.

Snapshots copy the whole ledger, so a call costs time proportional to the
number of accounts and contracts.
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import structlog

from exchange.errors import InvalidAddress, TransferFailed
from exchange.models.types import require_address
from exchange.safe_int import S

logger = structlog.get_logger()


@runtime_checkable
class Contract(Protocol):
    """State holder that can be deployed on a ledger.

    `snapshot_state` must return a value that later mutations of the
    contract cannot alter, and `restore_state` must accept that value back.
    """

    address: str

    def snapshot_state(self) -> Any: ...

    def restore_state(self, state: Any) -> None: ...


@dataclass(frozen=True)
class _Snapshot:
    balances: dict[str, int]
    nonces: dict[str, int]
    contracts: dict[str, Any]


class Ledger:
    """Base-asset balances plus a directory of contracts, with atomic scopes."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self._balances: dict[str, int] = {}
        self._nonces: dict[str, int] = {}
        self._contracts: dict[str, Contract] = {}
        self._account_counter = 0

    # --- Atomic execution ---

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing every operation; hold it for consistent multi-field reads."""
        return self._lock

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def atomic(self, operation: str, **context: Any) -> Iterator[None]:
        """Run the enclosed block as one all-or-nothing step.

        Every scope takes its own savepoint. A nested scope that fails
        restores its savepoint before the error leaves it, so an outer scope
        that catches the error continues from the state before the nested
        call, never from a half-applied one.

        Args:
            operation: Operation name for logging
            **context: Extra key/values logged if the operation reverts
        """
        with self._lock:
            snapshot = self._snapshot()
            self._depth += 1
            try:
                yield
            except BaseException as exc:
                self._restore(snapshot)
                log = logger.info if self._depth == 1 else logger.debug
                log(
                    "operation_reverted",
                    operation=operation,
                    error=type(exc).__name__,
                    detail=str(exc),
                    nested=self._depth > 1,
                    **context,
                )
                raise
            finally:
                self._depth -= 1

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            balances=dict(self._balances),
            nonces=dict(self._nonces),
            contracts={addr: c.snapshot_state() for addr, c in self._contracts.items()},
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._balances = dict(snapshot.balances)
        self._nonces = dict(snapshot.nonces)
        # Contracts deployed inside the reverted scope disappear with it
        for address in list(self._contracts):
            if address not in snapshot.contracts:
                del self._contracts[address]
        for address, state in snapshot.contracts.items():
            self._contracts[address].restore_state(state)

    # --- Addresses and contracts ---

    def create_account(self, label: str | None = None) -> str:
        """Derive a fresh externally-owned account address.

        The same label always yields the same address on any ledger.
        """
        with self._lock:
            if label is None:
                self._account_counter += 1
                label = f"account-{self._account_counter}"
            return _derive_address("account", label)

    def next_contract_address(self, deployer: str) -> str:
        """Reserve the next contract address for a deployer (nonce-derived)."""
        deployer = require_address(deployer, "deployer")
        with self._lock:
            nonce = self._nonces.get(deployer, 0)
            self._nonces[deployer] = nonce + 1
            return _derive_address(deployer, str(nonce))

    def register(self, contract: Contract) -> None:
        """Add a freshly constructed contract to the directory."""
        with self._lock:
            if contract.address in self._contracts:
                raise InvalidAddress(f"Address already in use: {contract.address}")
            self._contracts[contract.address] = contract
            logger.debug(
                "contract_registered",
                address=contract.address,
                kind=type(contract).__name__,
            )

    def find_contract(self, address: str) -> Contract | None:
        """Look up a contract by address, or None if nothing is deployed there."""
        if not address:
            return None
        return self._contracts.get(address.lower())

    def contract(self, address: str) -> Contract:
        """Look up a contract by address.

        Raises:
            InvalidAddress: If no contract is deployed at the address
        """
        found = self.find_contract(address)
        if found is None:
            raise InvalidAddress(f"No contract at {address}")
        return found

    # --- Base asset ---

    def balance_of(self, account: str) -> int:
        """Base-asset balance of an account or contract."""
        return self._balances.get(account.lower(), 0)

    def credit(self, account: str, amount: int) -> None:
        """Create base asset out of thin air (genesis allocation / faucet)."""
        account = require_address(account, "account")
        with self.atomic("credit", account=account):
            self._balances[account] = (S(self.balance_of(account)) + S(amount)).value
            logger.info("base_credited", account=account, amount=amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move base asset between accounts.

        Raises:
            InvalidAddress: If either party is the zero address
            TransferFailed: If the sender's balance is too low or amount is negative
        """
        sender = require_address(sender, "sender")
        recipient = require_address(recipient, "recipient")
        if amount < 0:
            raise TransferFailed(f"Negative transfer amount: {amount}")
        with self.atomic("base_transfer", sender=sender, recipient=recipient):
            balance = self.balance_of(sender)
            if balance < amount:
                raise TransferFailed(
                    f"Insufficient base balance: {sender} has {balance}, needs {amount}"
                )
            self._balances[sender] = balance - amount
            self._balances[recipient] = (S(self.balance_of(recipient)) + S(amount)).value


def _derive_address(namespace: str, seed: str) -> str:
    digest = hashlib.sha256(f"{namespace}:{seed}".encode()).hexdigest()
    return "0x" + digest[-40:]


__all__ = [
    "Contract",
    "Ledger",
]
