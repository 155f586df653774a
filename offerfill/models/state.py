"""Offer state as reported by the settlement layer.

The settlement layer owns this state; the engine only ever reads a fresh
snapshot of it right before validating a fill.
"""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field

from offerfill.models.types import Bytes32, Uint256


class OfferStatus(IntEnum):
    """Lifecycle status of an offer (codes match the settlement contract).

    Every status except FILLABLE is terminal.
    """

    INVALID = 0
    CANCELLED = 1
    FILLED = 2
    EXPIRED = 3
    FILLABLE = 4

    @property
    def is_terminal(self) -> bool:
        return self is not OfferStatus.FILLABLE


class OfferState(BaseModel):
    """Snapshot of an offer's state at the settlement layer.

    Attributes:
        status: Current lifecycle status
        typed_offer_hash: EIP-712 hash identifying the offer
        taker_filled_amount: Cumulative taker amount filled so far
        actual_taker_fillable_amount: Remaining taker amount the settlement
            layer would accept right now
        is_valid_input_params: Settlement layer's structural validity flag
            for the offer's parameters
    """

    status: OfferStatus
    typed_offer_hash: Bytes32 | None = Field(default=None, alias="typedOfferHash")
    taker_filled_amount: Uint256 = Field(default=0, alias="takerFilledAmount")
    actual_taker_fillable_amount: Uint256 = Field(default=0, alias="actualTakerFillableAmount")
    is_valid_input_params: bool = Field(default=True, alias="isValidInputParams")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def is_first_fill(self) -> bool:
        """True until any taker amount has been filled.

        The settlement layer never decreases the cumulative filled amount,
        so once this turns False it stays False.
        """
        return self.taker_filled_amount == 0
