"""Pydantic models for offers, offer state and pools."""

from offerfill.models.offer import (
    OFFER_MODELS,
    EIP712Domain,
    Offer,
    OfferAddLiquidity,
    OfferCreateContingentPool,
    OfferKind,
    OfferRemoveLiquidity,
    Signature,
    parse_offer,
)
from offerfill.models.pool import PoolParameters
from offerfill.models.state import OfferState, OfferStatus
from offerfill.models.types import Address, Bytes32, Uint256

__all__ = [
    # Types
    "Address",
    "Bytes32",
    "Uint256",
    # Offers
    "Offer",
    "OfferKind",
    "OfferCreateContingentPool",
    "OfferAddLiquidity",
    "OfferRemoveLiquidity",
    "OFFER_MODELS",
    "parse_offer",
    "Signature",
    "EIP712Domain",
    # State
    "OfferState",
    "OfferStatus",
    "PoolParameters",
]
