"""Spending-allowance checks against an ERC20-style token."""

from __future__ import annotations

from typing import Protocol

import structlog

from offerfill.constants import ALLOWANCE_BUFFER
from offerfill.errors import AllowanceRequestFailed
from offerfill.safe_int import U

logger = structlog.get_logger()


class TokenClient(Protocol):
    """Protocol for ERC20 balance/allowance access.

    This allows swapping between an RPC-backed client and an in-memory fake
    for testing.
    """

    def decimals(self, token: str) -> int:
        """Decimal precision of `token`."""
        ...

    def balance_of(self, token: str, owner: str) -> int:
        """Balance of `owner` in base units."""
        ...

    def allowance(self, token: str, owner: str, spender: str) -> int:
        """Amount `spender` may currently pull from `owner`."""
        ...

    def approve(self, token: str, owner: str, spender: str, amount: int) -> str:
        """Set `spender`'s allowance over `owner`'s tokens to `amount`.

        Blocks until the approval is acknowledged (mined).

        Returns:
            Transaction hash of the approval
        """
        ...


class AllowanceGate:
    """Makes sure a settlement contract may pull a party's tokens.

    When the current allowance is short, one approval for
    `required + buffer` is issued. The buffer absorbs a one-unit difference
    between amounts computed here and the settlement layer's own
    truncating recomputation. An already sufficient allowance is left
    untouched, so repeated calls do not send repeated approvals.

    Attributes:
        token_client: Token access
        token: Address of the token being spent
        buffer: Base units approved on top of the required amount
    """

    def __init__(self, token_client: TokenClient, token: str, buffer: int = ALLOWANCE_BUFFER):
        if buffer < 0:
            raise ValueError(f"buffer must be non-negative, got {buffer}")
        self.token_client = token_client
        self.token = token
        self.buffer = buffer

    def ensure_allowance(self, owner: str, spender: str, required: int) -> int:
        """Raise `owner`'s allowance for `spender` to at least `required`.

        Args:
            owner: Account whose tokens will be spent
            spender: Settlement contract address
            required: Minimum allowance needed for the fill

        Returns:
            The allowance after the call

        Raises:
            AllowanceRequestFailed: If the approval fails, or the re-read
                allowance is still below `required`
            Overflow: If required + buffer exceeds uint256
        """
        current = self.token_client.allowance(self.token, owner, spender)
        if current >= required:
            return current

        amount = (U(required) + self.buffer).value
        logger.info(
            "allowance_increase_requested",
            token=self.token,
            owner=owner,
            spender=spender,
            current=current,
            amount=amount,
        )
        try:
            tx_hash = self.token_client.approve(self.token, owner, spender, amount)
        except Exception as e:
            logger.warning(
                "allowance_increase_failed",
                token=self.token,
                owner=owner,
                spender=spender,
                error=str(e),
            )
            raise AllowanceRequestFailed(f"Approval of {amount} for {owner} failed: {e}") from e

        updated = self.token_client.allowance(self.token, owner, spender)
        if updated < required:
            raise AllowanceRequestFailed(
                f"Allowance of {owner} is {updated} after approval, {required} required"
            )
        logger.info(
            "allowance_increased",
            token=self.token,
            owner=owner,
            spender=spender,
            allowance=updated,
            tx_hash=tx_hash,
        )
        return updated


__all__ = ["AllowanceGate", "TokenClient"]
