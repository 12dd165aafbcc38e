"""Liquidity pool pairing the base asset with one token.

A Pool owns a base reserve, a token reserve and a share ledger. Shares are
themselves a fungible token ("Lp-Token" / "LP"): minted on deposit, burned on
withdrawal, freely transferable in between.

Every public operation runs in one ledger atomic scope: preconditions and
new values are computed first, and any failure (including a failed token
pull or an arithmetic overflow) rolls back everything the call did.

State machine:
- Empty: share supply 0, both reserves 0
- Seeded: share supply > 0, both reserves > 0
add_liquidity is the only Empty -> Seeded transition; removing the full share
supply returns the pool to Empty.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import structlog

from exchange.amm import constant_product
from exchange.constants import SHARE_TOKEN_NAME, SHARE_TOKEN_SYMBOL
from exchange.errors import InsufficientOutput, InvalidAddress, InvalidAmount
from exchange.ledger import Ledger
from exchange.models.types import require_address
from exchange.routing import resolve_target_pool
from exchange.safe_int import S
from exchange.token import FungibleToken

logger = structlog.get_logger()


class Reserves(NamedTuple):
    """Pool reserves in smallest units."""

    base: int
    token: int


class Pool(FungibleToken):
    """Constant-product pool for one token against the base asset.

    Args:
        ledger: Ledger the pool is deployed on
        deployer: Account or contract deploying the pool
        token_address: Address of the paired token contract (immutable)
        registry_address: Registry used to resolve routed swaps (immutable).
            Defaults to the deployer, which is the registry when the pool is
            created through one.
    """

    def __init__(
        self,
        ledger: Ledger,
        deployer: str,
        token_address: str,
        registry_address: str | None = None,
    ) -> None:
        token_address = require_address(token_address, "token address")
        with ledger.atomic("deploy_pool", token=token_address):
            super().__init__(ledger, deployer, SHARE_TOKEN_NAME, SHARE_TOKEN_SYMBOL)
            self.token_address = token_address
            self.registry_address = require_address(
                registry_address or self.deployer, "registry address"
            )
            self._base_reserve = 0
            self._token_reserve = 0

    # --- Snapshot support for atomic scopes ---

    def snapshot_state(self) -> dict[str, Any]:
        state = super().snapshot_state()
        state["base_reserve"] = self._base_reserve
        state["token_reserve"] = self._token_reserve
        return state

    def restore_state(self, state: dict[str, Any]) -> None:
        super().restore_state(state)
        self._base_reserve = state["base_reserve"]
        self._token_reserve = state["token_reserve"]

    # --- Views ---

    @property
    def token(self) -> FungibleToken:
        """The paired token contract."""
        contract = self._ledger.contract(self.token_address)
        if not isinstance(contract, FungibleToken):
            raise InvalidAddress(f"{self.token_address} is not a token contract")
        return contract

    def reserve(self) -> Reserves:
        with self._ledger.lock:
            return Reserves(base=self._base_reserve, token=self._token_reserve)

    def share_supply(self) -> int:
        return self.total_supply()

    def share_balance_of(self, account: str) -> int:
        return self.balance_of(account)

    def is_seeded(self) -> bool:
        return self._total_supply > 0

    def reserves_in_sync(self) -> bool:
        """True if tracked reserves equal the pool account's real balances."""
        with self._ledger.lock:
            return (
                self._base_reserve == self._ledger.balance_of(self.address)
                and self._token_reserve == self.token.balance_of(self.address)
            )

    def get_token_amount(self, base_in: int) -> int:
        """Tokens paid out for selling `base_in` of the base asset.

        Raises:
            DivisionByZero: If the pool is empty
        """
        with self._ledger.lock:
            return constant_product.get_amount_out(base_in, self._base_reserve, self._token_reserve)

    def get_base_amount(self, token_in: int) -> int:
        """Base asset paid out for selling `token_in` tokens.

        Raises:
            DivisionByZero: If the pool is empty
        """
        with self._ledger.lock:
            return constant_product.get_amount_out(
                token_in, self._token_reserve, self._base_reserve
            )

    # --- Liquidity ---

    def add_liquidity(self, sender: str, base_amount: int, max_token_amount: int) -> int:
        """Deposit base asset and tokens, minting shares to the sender.

        The first deposit sets the price: it pulls the full `max_token_amount`
        and mints one share per unit of base. Later deposits pull exactly the
        ratio-matching token amount, floor(base * token_reserve / base_reserve),
        and mint floor(supply * base / base_reserve) shares, both computed on
        the reserves before the deposit.

        Args:
            sender: Depositor (pays base and tokens, receives shares)
            base_amount: Base asset attached to the call
            max_token_amount: Most tokens the sender authorizes the pool to pull

        Returns:
            Number of shares minted

        Raises:
            InvalidAmount: If amounts are zero/negative on a first deposit, or
                `max_token_amount` is below the ratio-required amount
            TransferFailed: If the base balance, token balance or allowance is short
        """
        sender = require_address(sender, "sender")
        if base_amount <= 0 or max_token_amount < 0:
            raise InvalidAmount(
                f"Deposit amounts must be positive: base={base_amount} max_token={max_token_amount}"
            )

        with self._ledger.atomic("add_liquidity", pool=self.address, sender=sender):
            supply = self._total_supply
            if supply == 0:
                if max_token_amount == 0:
                    raise InvalidAmount("First deposit must include tokens")
                token_amount = max_token_amount
                minted = base_amount
            else:
                token_amount = (
                    S(base_amount) * S(self._token_reserve) // S(self._base_reserve)
                ).value
                if max_token_amount < token_amount:
                    raise InvalidAmount(
                        f"Insufficient token amount: need {token_amount}, "
                        f"allowed {max_token_amount}"
                    )
                minted = (S(supply) * S(base_amount) // S(self._base_reserve)).value

            new_base = (S(self._base_reserve) + S(base_amount)).value
            new_token = (S(self._token_reserve) + S(token_amount)).value

            self._ledger.transfer(sender, self.address, base_amount)
            self.token.transfer_from(self.address, sender, self.address, token_amount)
            self._base_reserve = new_base
            self._token_reserve = new_token
            self._mint(sender, minted)

        logger.info(
            "liquidity_added",
            pool=self.address,
            provider=sender,
            base_amount=base_amount,
            token_amount=token_amount,
            shares_minted=minted,
            first_deposit=supply == 0,
        )
        return minted

    def remove_liquidity(self, sender: str, share_amount: int) -> tuple[int, int]:
        """Burn shares and pay out the proportional slice of both reserves.

        Returns:
            (base_out, token_out), each floor(reserve * shares / supply)

        Raises:
            InvalidAmount: If `share_amount` is zero, exceeds the sender's
                balance, or the pool is empty
        """
        sender = require_address(sender, "sender")

        with self._ledger.atomic("remove_liquidity", pool=self.address, sender=sender):
            supply = self._total_supply
            if supply == 0:
                raise InvalidAmount("Pool has no liquidity")
            if share_amount <= 0 or share_amount > self.balance_of(sender):
                raise InvalidAmount(
                    f"Invalid share amount {share_amount}: balance is {self.balance_of(sender)}"
                )

            base_out = (S(self._base_reserve) * S(share_amount) // S(supply)).value
            token_out = (S(self._token_reserve) * S(share_amount) // S(supply)).value

            self._burn(sender, share_amount)
            self._base_reserve = (S(self._base_reserve) - S(base_out)).value
            self._token_reserve = (S(self._token_reserve) - S(token_out)).value
            self._ledger.transfer(self.address, sender, base_out)
            self.token.transfer(self.address, sender, token_out)

        logger.info(
            "liquidity_removed",
            pool=self.address,
            provider=sender,
            shares_burned=share_amount,
            base_out=base_out,
            token_out=token_out,
            emptied=self._total_supply == 0,
        )
        return base_out, token_out

    # --- Swaps ---

    def swap_base_for_token(
        self,
        sender: str,
        base_amount: int,
        min_tokens: int,
        recipient: str | None = None,
    ) -> int:
        """Sell base asset for tokens.

        Args:
            sender: Account paying the base asset
            base_amount: Base asset attached to the call
            min_tokens: Slippage bound; 0 accepts any output
            recipient: Receiver of the tokens (defaults to the sender)

        Returns:
            Tokens paid out

        Raises:
            InsufficientOutput: If the output is below `min_tokens`
        """
        sender = require_address(sender, "sender")
        recipient = require_address(recipient or sender, "recipient")

        with self._ledger.atomic("swap_base_for_token", pool=self.address, sender=sender):
            tokens_out = constant_product.get_amount_out(
                base_amount, self._base_reserve, self._token_reserve
            )
            if tokens_out < min_tokens:
                raise InsufficientOutput(f"Output {tokens_out} below minimum {min_tokens}")

            new_base = (S(self._base_reserve) + S(base_amount)).value
            new_token = (S(self._token_reserve) - S(tokens_out)).value

            self._ledger.transfer(sender, self.address, base_amount)
            self._base_reserve = new_base
            self._token_reserve = new_token
            self.token.transfer(self.address, recipient, tokens_out)

        logger.info(
            "swap_executed",
            pool=self.address,
            direction="base_for_token",
            sender=sender,
            recipient=recipient,
            amount_in=base_amount,
            amount_out=tokens_out,
        )
        return tokens_out

    def swap_token_for_base(self, sender: str, tokens_sold: int, min_base: int) -> int:
        """Sell tokens for base asset, paid to the sender.

        The sender must have approved the pool for `tokens_sold`.

        Returns:
            Base asset paid out

        Raises:
            InsufficientOutput: If the output is below `min_base`
            TransferFailed: If the allowance or token balance is short
        """
        sender = require_address(sender, "sender")

        with self._ledger.atomic("swap_token_for_base", pool=self.address, sender=sender):
            base_out = self._sell_tokens(sender, tokens_sold, min_base)
            self._ledger.transfer(self.address, sender, base_out)

        logger.info(
            "swap_executed",
            pool=self.address,
            direction="token_for_base",
            sender=sender,
            recipient=sender,
            amount_in=tokens_sold,
            amount_out=base_out,
        )
        return base_out

    def token_to_token_swap(
        self,
        sender: str,
        tokens_sold: int,
        min_tokens_bought: int,
        target_token: str,
    ) -> int:
        """Sell this pool's token for another registered token via the base asset.

        The base asset produced by this pool is forwarded to the target
        token's pool, which pays the target token to the sender. Only the
        final output is bounded by `min_tokens_bought`; the intermediate
        base leg runs with a zero minimum.

        Returns:
            Target tokens paid to the sender

        Raises:
            InvalidAddress: If no pool is registered for `target_token`, or it
                resolves to this pool
            InsufficientOutput: If the final output is below `min_tokens_bought`
        """
        sender = require_address(sender, "sender")

        with self._ledger.atomic(
            "token_to_token_swap",
            pool=self.address,
            sender=sender,
            target_token=target_token,
        ):
            target_pool = resolve_target_pool(self._ledger, self.registry_address, target_token)
            if target_pool.address == self.address:
                raise InvalidAddress(f"Target token {target_token} is served by this pool")

            base_out = self._sell_tokens(sender, tokens_sold, 0)
            tokens_bought = target_pool.swap_base_for_token(
                self.address,
                base_out,
                min_tokens_bought,
                recipient=sender,
            )

        logger.info(
            "token_to_token_swap_executed",
            pool_in=self.address,
            pool_out=target_pool.address,
            sender=sender,
            amount_in=tokens_sold,
            base_amount=base_out,
            amount_out=tokens_bought,
        )
        return tokens_bought

    def _sell_tokens(self, sender: str, tokens_sold: int, min_base: int) -> int:
        """Pull tokens from the sender and book the trade; the caller pays out the base."""
        base_out = constant_product.get_amount_out(
            tokens_sold, self._token_reserve, self._base_reserve
        )
        if base_out < min_base:
            raise InsufficientOutput(f"Output {base_out} below minimum {min_base}")

        new_token = (S(self._token_reserve) + S(tokens_sold)).value
        new_base = (S(self._base_reserve) - S(base_out)).value

        self.token.transfer_from(self.address, sender, self.address, tokens_sold)
        self._token_reserve = new_token
        self._base_reserve = new_base
        return base_out


__all__ = [
    "Pool",
    "Reserves",
]
