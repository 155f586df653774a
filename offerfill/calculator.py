"""Proportional fill amounts for offers.

A fill of `taker_fill_amount` obliges the maker to commit

    maker_fill_amount = maker_amount * taker_fill_amount // taker_amount

IMPORTANT: All amounts use exact integer arithmetic via SafeUint, and the
division truncates exactly like the settlement layer's integer division.
No floats.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from offerfill.errors import FillError, FillErrorReason
from offerfill.models.offer import Offer
from offerfill.models.state import OfferState
from offerfill.safe_int import U

logger = structlog.get_logger()


@dataclass(frozen=True)
class FillAmounts:
    """Amounts committed by each side of one fill.

    Attributes:
        taker_fill_amount: Amount the taker commits (the requested size)
        maker_fill_amount: Proportional amount the maker commits
        self_fill: True if maker and taker are the same account on an offer
            whose legs share one token
        combined_fill_amount: Single transfer covering both legs when
            self_fill is True, else None
    """

    taker_fill_amount: int
    maker_fill_amount: int
    self_fill: bool = False
    combined_fill_amount: int | None = None


class FillCalculator:
    """Computes and bounds-checks fill amounts for an offer.

    Cumulative fill data always comes from the settlement layer's
    OfferState; nothing is recomputed or remembered locally.
    """

    def maker_fill_amount(self, offer: Offer, taker_fill_amount: int) -> int:
        """floor(offer.maker_amount * taker_fill_amount / offer.taker_amount).

        Raises:
            Overflow: If the intermediate product exceeds uint256
            FillError: STATUS_INVALID if the offer's taker amount is zero
        """
        self._require_taker_amount(offer)
        return U(offer.maker_amount).mul_div(taker_fill_amount, offer.taker_amount).value

    def self_fill_amount(self, offer: Offer, taker_fill_amount: int) -> int:
        """Single transfer covering both legs when the maker fills its own offer.

        (maker_amount + taker_amount) * taker_fill_amount // taker_amount

        Raises:
            Overflow: If the sum or the intermediate product exceeds uint256
            FillError: STATUS_INVALID if the offer's taker amount is zero
        """
        self._require_taker_amount(offer)
        total = U(offer.maker_amount) + offer.taker_amount
        return total.mul_div(taker_fill_amount, offer.taker_amount).value

    def check_fillable(self, state: OfferState, taker_fill_amount: int) -> None:
        """Reject fills larger than what the settlement layer reports as remaining.

        Raises:
            FillError: EXCEEDS_FILLABLE
        """
        if taker_fill_amount > state.actual_taker_fillable_amount:
            raise FillError(
                FillErrorReason.EXCEEDS_FILLABLE,
                f"Fill amount {taker_fill_amount} exceeds fillable amount "
                f"{state.actual_taker_fillable_amount}",
            )

    def check_minimum(self, offer: Offer, state: OfferState, taker_fill_amount: int) -> None:
        """Enforce the minimum taker fill amount on the first fill only.

        Raises:
            FillError: BELOW_MINIMUM
        """
        if state.is_first_fill and taker_fill_amount < offer.minimum_taker_fill_amount:
            raise FillError(
                FillErrorReason.BELOW_MINIMUM,
                f"Fill amount {taker_fill_amount} is below the first-fill minimum "
                f"{offer.minimum_taker_fill_amount}",
            )

    def compute(
        self,
        offer: Offer,
        state: OfferState,
        taker_fill_amount: int,
        taker: str | None = None,
    ) -> FillAmounts:
        """Bounds-check a fill and return both legs.

        Args:
            offer: The offer being filled
            state: Fresh state snapshot from the settlement layer
            taker_fill_amount: Requested taker-side amount
            taker: Filling account; enables self-fill detection

        Raises:
            FillError: EXCEEDS_FILLABLE or BELOW_MINIMUM
            Overflow: If an amount exceeds uint256
        """
        self.check_fillable(state, taker_fill_amount)
        self.check_minimum(offer, state, taker_fill_amount)
        maker_fill_amount = self.maker_fill_amount(offer, taker_fill_amount)

        self_fill = taker is not None and offer.kind.legs_share_token and offer.is_self_fill(taker)
        combined = self.self_fill_amount(offer, taker_fill_amount) if self_fill else None

        logger.debug(
            "fill_amounts_computed",
            kind=offer.kind.value,
            taker_fill_amount=taker_fill_amount,
            maker_fill_amount=maker_fill_amount,
            self_fill=self_fill,
        )
        return FillAmounts(
            taker_fill_amount=taker_fill_amount,
            maker_fill_amount=maker_fill_amount,
            self_fill=self_fill,
            combined_fill_amount=combined,
        )

    @staticmethod
    def _require_taker_amount(offer: Offer) -> None:
        if offer.taker_amount == 0:
            raise FillError(FillErrorReason.STATUS_INVALID, "Offer taker amount is zero")


# Singleton instance for convenience
fill_calculator = FillCalculator()

__all__ = ["FillAmounts", "FillCalculator", "fill_calculator"]
