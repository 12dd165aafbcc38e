"""Fungible token ledger (ERC-20 style).

FungibleToken keeps balances, allowances and total supply for one asset.
It is the collaborator pools pull tokens from and push tokens to, and it is
also the base of Pool itself, whose liquidity shares are a fungible token.

Every mutating call runs inside the owning ledger's atomic scope, so a
failed transfer leaves no trace and a transfer made inside a larger
operation is rolled back with it.
"""

from __future__ import annotations

from typing import Any

import structlog

from exchange.constants import DECIMALS, WEI
from exchange.errors import TransferFailed
from exchange.ledger import Ledger
from exchange.models.types import require_address
from exchange.safe_int import S

logger = structlog.get_logger()


class FungibleToken:
    """Balances and allowances for one fungible asset deployed on a ledger."""

    def __init__(self, ledger: Ledger, deployer: str, name: str, symbol: str) -> None:
        self._ledger = ledger
        self.deployer = require_address(deployer, "deployer")
        self.address = ledger.next_contract_address(self.deployer)
        self.name = name
        self.symbol = symbol
        self.decimals = DECIMALS
        self._total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        ledger.register(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}@{self.address})"

    # --- Snapshot support for atomic scopes ---

    def snapshot_state(self) -> dict[str, Any]:
        return {
            "total_supply": self._total_supply,
            "balances": dict(self._balances),
            "allowances": dict(self._allowances),
        }

    def restore_state(self, state: dict[str, Any]) -> None:
        self._total_supply = state["total_supply"]
        self._balances = dict(state["balances"])
        self._allowances = dict(state["allowances"])

    # --- Views ---

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account.lower(), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner.lower(), spender.lower()), 0)

    # --- Mutations ---

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move `amount` from sender to recipient.

        Raises:
            InvalidAddress: If either party is the zero address
            TransferFailed: If the sender's balance is too low
        """
        sender = require_address(sender, "sender")
        recipient = require_address(recipient, "recipient")
        with self._ledger.atomic("token_transfer", token=self.address, sender=sender):
            self._move(sender, recipient, amount)
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Allow `spender` to move up to `amount` of the owner's balance."""
        owner = require_address(owner, "owner")
        spender = require_address(spender, "spender")
        if amount < 0:
            raise TransferFailed(f"Negative allowance: {amount}")
        with self._ledger.atomic("token_approve", token=self.address, owner=owner):
            self._allowances[(owner, spender)] = S(amount).value
            logger.debug(
                "allowance_set",
                token=self.symbol,
                owner=owner,
                spender=spender,
                amount=amount,
            )
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """Move `amount` from owner to recipient using the spender's allowance.

        Raises:
            InvalidAddress: If any party is the zero address
            TransferFailed: If the allowance or the owner's balance is too low
        """
        spender = require_address(spender, "spender")
        owner = require_address(owner, "owner")
        recipient = require_address(recipient, "recipient")
        with self._ledger.atomic("token_transfer_from", token=self.address, owner=owner):
            allowed = self.allowance(owner, spender)
            if allowed < amount:
                raise TransferFailed(
                    f"Insufficient allowance: {spender} may move {allowed} of {owner}'s "
                    f"{self.symbol}, needs {amount}"
                )
            self._allowances[(owner, spender)] = allowed - amount
            self._move(owner, recipient, amount)
        return True

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise TransferFailed(f"Negative transfer amount: {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            raise TransferFailed(
                f"Insufficient {self.symbol} balance: {sender} has {balance}, needs {amount}"
            )
        self._balances[sender] = balance - amount
        self._balances[recipient] = (S(self.balance_of(recipient)) + S(amount)).value

    def _mint(self, account: str, amount: int) -> None:
        self._total_supply = (S(self._total_supply) + S(amount)).value
        self._balances[account] = self.balance_of(account) + amount

    def _burn(self, account: str, amount: int) -> None:
        self._balances[account] = (S(self.balance_of(account)) - S(amount)).value
        self._total_supply = (S(self._total_supply) - S(amount)).value


class FixedSupplyToken(FungibleToken):
    """Token whose whole supply is minted to the deployer at creation.

    `initial_supply` is given in whole units and scaled by 10^18.
    """

    def __init__(
        self,
        ledger: Ledger,
        deployer: str,
        name: str,
        symbol: str,
        initial_supply: int,
    ) -> None:
        with ledger.atomic("deploy_token", symbol=symbol):
            super().__init__(ledger, deployer, name, symbol)
            self._mint(self.deployer, (S(initial_supply) * S(WEI)).value)
        logger.info(
            "token_deployed",
            token=self.address,
            symbol=symbol,
            supply=self._total_supply,
            deployer=self.deployer,
        )


__all__ = [
    "FungibleToken",
    "FixedSupplyToken",
]
