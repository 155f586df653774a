"""Pydantic models for signed offers.

An offer is an off-chain, maker-signed intent to transact on fixed
proportional terms. Three kinds exist, each with its own EIP-712 struct;
the kind is a tag on the model class so that hashing, state queries and
fills dispatch on it instead of on three copies of the same procedure.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from offerfill.constants import ZERO_ADDRESS
from offerfill.models.types import Address, Bytes32, Uint256, is_zero_address, same_address


class OfferKind(str, Enum):
    """Which settlement action filling the offer performs."""

    CREATE_POOL = "create_pool"
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"

    @property
    def legs_share_token(self) -> bool:
        """True when maker and taker both pay in the collateral token."""
        return self in (OfferKind.CREATE_POOL, OfferKind.ADD_LIQUIDITY)


class Signature(BaseModel):
    """Maker's ECDSA signature over the typed offer, split into v/r/s."""

    v: int = Field(ge=0, le=255)
    r: Bytes32
    s: Bytes32

    model_config = ConfigDict(frozen=True)

    def to_vrs(self) -> tuple[int, int, int]:
        """Signature as (v, r, s) integers."""
        return self.v, int(self.r, 16), int(self.s, 16)

    def to_bytes(self) -> bytes:
        """65-byte r || s || v encoding."""
        return bytes.fromhex(self.r[2:]) + bytes.fromhex(self.s[2:]) + bytes([self.v])

    @classmethod
    def from_bytes(cls, raw: bytes | str) -> Signature:
        """Parse a 65-byte r || s || v signature (bytes or 0x-hex)."""
        if isinstance(raw, str):
            raw = bytes.fromhex(raw[2:] if raw.startswith("0x") else raw)
        if len(raw) != 65:
            raise ValueError(f"Signature must be 65 bytes, got {len(raw)}")
        return cls(v=raw[64], r="0x" + raw[:32].hex(), s="0x" + raw[32:64].hex())


class EIP712Domain(BaseModel):
    """Signing context binding an offer to one contract on one chain."""

    name: str
    version: str
    chain_id: int = Field(alias="chainId", ge=0)
    verifying_contract: Address = Field(alias="verifyingContract")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_message(self) -> dict[str, Any]:
        """Domain fields keyed by their EIP-712 names."""
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


class Offer(BaseModel):
    """Fields common to every offer kind.

    Subclasses set `kind`, `primary_type` and `eip712_fields` (the ordered
    (name, solidity type) pairs of the signed struct) and say which of
    their amounts is the taker side of the exchange ratio.
    """

    kind: ClassVar[OfferKind]
    primary_type: ClassVar[str]
    eip712_fields: ClassVar[tuple[tuple[str, str], ...]]

    maker: Address
    taker: Address = ZERO_ADDRESS
    maker_collateral_amount: Uint256 = Field(alias="makerCollateralAmount")
    maker_is_long: bool = Field(alias="makerIsLong")
    offer_expiry: Uint256 = Field(alias="offerExpiry")
    minimum_taker_fill_amount: Uint256 = Field(alias="minimumTakerFillAmount")
    salt: Uint256

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def maker_amount(self) -> int:
        """Maker side of the exchange ratio."""
        return self.maker_collateral_amount

    @property
    def taker_amount(self) -> int:
        """Taker side of the exchange ratio."""
        raise NotImplementedError

    @property
    def is_public(self) -> bool:
        """True if anyone may fill (taker is the zero address)."""
        return is_zero_address(self.taker)

    def is_fillable_by(self, address: str) -> bool:
        """Whether `address` is allowed to take this offer."""
        return self.is_public or same_address(self.taker, address)

    def maker_payment(self, taker_fill_amount: int, maker_fill_amount: int) -> int:
        """Amount the maker hands over in a fill of `taker_fill_amount`.

        For pool-creating and liquidity-adding offers the maker posts its
        proportional collateral.
        """
        return maker_fill_amount

    def is_self_fill(self, taker: str) -> bool:
        """Whether `taker` is the maker filling its own offer."""
        return same_address(self.maker, taker)

    def to_message(self) -> dict[str, Any]:
        """Offer fields keyed by EIP-712 name, in struct order."""
        data = self.model_dump(by_alias=True)
        return {name: data[name] for name, _ in self.eip712_fields}


class OfferCreateContingentPool(Offer):
    """Offer to create a new pool, each side posting collateral."""

    kind: ClassVar[OfferKind] = OfferKind.CREATE_POOL
    primary_type: ClassVar[str] = "OfferCreateContingentPool"
    eip712_fields: ClassVar[tuple[tuple[str, str], ...]] = (
        ("maker", "address"),
        ("taker", "address"),
        ("makerCollateralAmount", "uint256"),
        ("takerCollateralAmount", "uint256"),
        ("makerIsLong", "bool"),
        ("offerExpiry", "uint256"),
        ("minimumTakerFillAmount", "uint256"),
        ("referenceAsset", "string"),
        ("expiryTime", "uint96"),
        ("floor", "uint256"),
        ("inflection", "uint256"),
        ("cap", "uint256"),
        ("gradient", "uint256"),
        ("collateralToken", "address"),
        ("dataProvider", "address"),
        ("capacity", "uint256"),
        ("permissionedERC721Token", "address"),
        ("salt", "uint256"),
    )

    taker_collateral_amount: Uint256 = Field(alias="takerCollateralAmount")
    reference_asset: str = Field(alias="referenceAsset")
    expiry_time: Uint256 = Field(alias="expiryTime")
    floor: Uint256
    inflection: Uint256
    cap: Uint256
    gradient: Uint256
    collateral_token: Address = Field(alias="collateralToken")
    data_provider: Address = Field(alias="dataProvider")
    capacity: Uint256
    permissioned_erc721_token: Address = Field(
        default=ZERO_ADDRESS, alias="permissionedERC721Token"
    )

    @property
    def taker_amount(self) -> int:
        return self.taker_collateral_amount


class OfferAddLiquidity(Offer):
    """Offer to add collateral to an existing pool together with a taker."""

    kind: ClassVar[OfferKind] = OfferKind.ADD_LIQUIDITY
    primary_type: ClassVar[str] = "OfferAddLiquidity"
    eip712_fields: ClassVar[tuple[tuple[str, str], ...]] = (
        ("maker", "address"),
        ("taker", "address"),
        ("makerCollateralAmount", "uint256"),
        ("takerCollateralAmount", "uint256"),
        ("makerIsLong", "bool"),
        ("offerExpiry", "uint256"),
        ("minimumTakerFillAmount", "uint256"),
        ("poolId", "bytes32"),
        ("salt", "uint256"),
    )

    taker_collateral_amount: Uint256 = Field(alias="takerCollateralAmount")
    pool_id: Bytes32 = Field(alias="poolId")

    @property
    def taker_amount(self) -> int:
        return self.taker_collateral_amount


class OfferRemoveLiquidity(Offer):
    """Offer to remove liquidity by returning long and short tokens together.

    The taker side is denominated in position tokens.
    """

    kind: ClassVar[OfferKind] = OfferKind.REMOVE_LIQUIDITY
    primary_type: ClassVar[str] = "OfferRemoveLiquidity"
    eip712_fields: ClassVar[tuple[tuple[str, str], ...]] = (
        ("maker", "address"),
        ("taker", "address"),
        ("makerCollateralAmount", "uint256"),
        ("positionTokenAmount", "uint256"),
        ("makerIsLong", "bool"),
        ("offerExpiry", "uint256"),
        ("minimumTakerFillAmount", "uint256"),
        ("poolId", "bytes32"),
        ("salt", "uint256"),
    )

    position_token_amount: Uint256 = Field(alias="positionTokenAmount")
    pool_id: Bytes32 = Field(alias="poolId")

    @property
    def taker_amount(self) -> int:
        return self.position_token_amount

    def maker_payment(self, taker_fill_amount: int, maker_fill_amount: int) -> int:
        """Both sides return `taker_fill_amount` position tokens.

        The maker returns its own side (long if `maker_is_long`) and receives
        `maker_fill_amount` collateral; it pays no collateral.
        """
        return taker_fill_amount


OFFER_MODELS: dict[OfferKind, type[Offer]] = {
    OfferKind.CREATE_POOL: OfferCreateContingentPool,
    OfferKind.ADD_LIQUIDITY: OfferAddLiquidity,
    OfferKind.REMOVE_LIQUIDITY: OfferRemoveLiquidity,
}


def parse_offer(kind: OfferKind | str, data: dict[str, Any]) -> Offer:
    """Build the offer model for `kind` from camelCase or snake_case data.

    Unknown keys (relay metadata such as chainId or signature) are ignored.
    """
    model = OFFER_MODELS[OfferKind(kind)]
    return model.model_validate(data)
