"""Settlement-layer collaborator interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from offerfill.models.offer import Offer, Signature
from offerfill.models.pool import PoolParameters
from offerfill.models.state import OfferState


@dataclass(frozen=True)
class FillReceipt:
    """Record of an accepted fill.

    Attributes:
        tx_hash: Hash of the fill transaction
        typed_offer_hash: EIP-712 hash of the filled offer
        pool_id: Pool created (create offers) or touched (liquidity offers)
        taker_fill_amount: Taker-side amount filled
        maker_fill_amount: Maker-side amount filled, when known
    """

    tx_hash: str
    typed_offer_hash: str | None
    pool_id: str | None
    taker_fill_amount: int
    maker_fill_amount: int | None = None


class SettlementClient(Protocol):
    """Protocol for the settlement contract.

    This allows swapping between the RPC-backed client and an in-memory
    fake for testing. The settlement layer is authoritative: it re-checks
    everything on fill and owns all offer state.
    """

    @property
    def address(self) -> str:
        """Settlement contract address (the allowance spender)."""
        ...

    def get_offer_state(self, offer: Offer, signature: Signature) -> OfferState:
        """Current status and fill progress of `offer`."""
        ...

    def fill_offer(
        self,
        offer: Offer,
        signature: Signature,
        taker_fill_amount: int,
        taker: str,
    ) -> FillReceipt:
        """Submit a fill as `taker` and block until it is mined.

        Raises:
            SettlementRejected: If the settlement layer reverts the fill
        """
        ...

    def get_taker_filled_amount(self, typed_offer_hash: str) -> int:
        """Cumulative taker amount filled for the offer with this hash."""
        ...

    def get_pool_parameters(self, pool_id: str) -> PoolParameters:
        """Parameters of pool `pool_id`.

        An unknown pool comes back zeroed; check `PoolParameters.exists`.
        """
        ...

    def add_liquidity(
        self,
        pool_id: str,
        amount: int,
        long_recipient: str,
        short_recipient: str,
        provider: str,
    ) -> str:
        """Add `amount` collateral to a pool as `provider` and block until mined.

        Returns:
            Transaction hash

        Raises:
            SettlementRejected: If the settlement layer reverts the addition
        """
        ...
