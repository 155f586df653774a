"""Tests for offer, signature, domain and state models."""

import pytest
from pydantic import ValidationError

from offerfill.constants import ZERO_ADDRESS
from offerfill.models import (
    OfferAddLiquidity,
    OfferCreateContingentPool,
    OfferKind,
    OfferRemoveLiquidity,
    OfferState,
    OfferStatus,
    PoolParameters,
    Signature,
    parse_offer,
)
from offerfill.models.types import is_valid_address, normalize_address, same_address
from tests.helpers import (
    COLLATERAL,
    LONG_TOKEN,
    MAKER,
    OTHER,
    POOL_ID,
    SHORT_TOKEN,
    TAKER,
    make_add_offer,
    make_create_offer,
    make_domain,
    make_pool,
    make_remove_offer,
)


class TestOfferAmounts:
    """Tests for the exchange-ratio sides of each offer kind."""

    def test_create_offer_sides(self):
        offer = make_create_offer(maker_amount=100, taker_amount=50)
        assert offer.maker_amount == 100
        assert offer.taker_amount == 50

    def test_add_offer_sides(self):
        offer = make_add_offer(maker_amount=30, taker_amount=70)
        assert offer.maker_amount == 30
        assert offer.taker_amount == 70

    def test_remove_offer_taker_side_is_position_tokens(self):
        offer = make_remove_offer(maker_amount=100, position_amount=40)
        assert offer.taker_amount == 40

    def test_maker_payment(self):
        """Collateral offers pay the maker amount; remove offers return position tokens."""
        assert make_create_offer().maker_payment(10, 20) == 20
        assert make_add_offer().maker_payment(10, 20) == 20
        assert make_remove_offer().maker_payment(10, 20) == 10

    def test_kinds(self):
        assert make_create_offer().kind is OfferKind.CREATE_POOL
        assert make_add_offer().kind is OfferKind.ADD_LIQUIDITY
        assert make_remove_offer().kind is OfferKind.REMOVE_LIQUIDITY

    def test_legs_share_token(self):
        """Only remove offers are paid in two different tokens."""
        assert OfferKind.CREATE_POOL.legs_share_token
        assert OfferKind.ADD_LIQUIDITY.legs_share_token
        assert not OfferKind.REMOVE_LIQUIDITY.legs_share_token


class TestOfferTaker:
    """Tests for who may fill an offer."""

    def test_public_offer_fillable_by_anyone(self):
        offer = make_create_offer(taker=ZERO_ADDRESS)
        assert offer.is_public
        assert offer.is_fillable_by(TAKER)
        assert offer.is_fillable_by(OTHER)

    def test_reserved_offer(self):
        offer = make_create_offer(taker=TAKER)
        assert not offer.is_public
        assert offer.is_fillable_by(TAKER)
        assert offer.is_fillable_by(TAKER.lower())
        assert not offer.is_fillable_by(OTHER)

    def test_self_fill_detection_ignores_case(self):
        offer = make_create_offer()
        assert offer.is_self_fill(MAKER.lower())
        assert not offer.is_self_fill(TAKER)


class TestOfferParsing:
    """Tests for parsing offers from relay-style data."""

    def test_parse_camel_case_with_string_amounts(self):
        """Relay payloads carry amounts as decimal strings."""
        data = {
            "maker": MAKER,
            "taker": ZERO_ADDRESS,
            "makerCollateralAmount": "100000000",
            "takerCollateralAmount": "50000000",
            "makerIsLong": False,
            "offerExpiry": "1900000000",
            "minimumTakerFillAmount": "1",
            "poolId": POOL_ID,
            "salt": "42",
            "chainId": 80001,
        }
        offer = parse_offer("add_liquidity", data)
        assert isinstance(offer, OfferAddLiquidity)
        assert offer.maker_collateral_amount == 100_000_000
        assert offer.salt == 42

    def test_parse_dispatches_on_kind(self):
        offer = make_remove_offer()
        parsed = parse_offer(OfferKind.REMOVE_LIQUIDITY, offer.model_dump(by_alias=True))
        assert isinstance(parsed, OfferRemoveLiquidity)
        assert parsed == offer

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            parse_offer("swap", {})

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            make_create_offer(maker_amount=-1)

    def test_bad_address_rejected(self):
        with pytest.raises(ValidationError):
            make_create_offer(maker="0x1234")

    def test_json_dump_uses_strings_for_amounts(self):
        offer = make_create_offer()
        data = offer.model_dump(mode="json", by_alias=True)
        assert data["makerCollateralAmount"] == "100"
        assert data["collateralToken"] == COLLATERAL
        # Python-mode dumps keep ints for hashing
        assert offer.model_dump(by_alias=True)["makerCollateralAmount"] == 100

    def test_offers_are_frozen(self):
        offer = make_create_offer()
        with pytest.raises(ValidationError):
            offer.salt = 2  # type: ignore[misc]


class TestOfferMessage:
    """Tests for the EIP-712 message view of offers."""

    def test_create_message_follows_struct_order(self):
        offer = make_create_offer()
        message = offer.to_message()
        assert list(message) == [name for name, _ in OfferCreateContingentPool.eip712_fields]
        assert message["permissionedERC721Token"] == ZERO_ADDRESS

    def test_remove_message_fields(self):
        message = make_remove_offer(position_amount=40).to_message()
        assert message["positionTokenAmount"] == 40
        assert "takerCollateralAmount" not in message
        assert message["poolId"] == POOL_ID

    def test_domain_message(self):
        domain = make_domain()
        assert domain.to_message() == {
            "name": "DIVA Protocol",
            "version": "1",
            "chainId": 80001,
            "verifyingContract": domain.verifying_contract,
        }


class TestSignature:
    """Tests for the v/r/s signature model."""

    def test_bytes_round_trip(self):
        sig = Signature(v=28, r="0x" + "01" * 32, s="0x" + "02" * 32)
        raw = sig.to_bytes()
        assert len(raw) == 65
        assert raw[-1] == 28
        assert Signature.from_bytes(raw) == sig
        assert Signature.from_bytes("0x" + raw.hex()) == sig

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError, match="65 bytes"):
            Signature.from_bytes(b"\x00" * 64)

    def test_to_vrs(self):
        sig = Signature(v=27, r="0x" + "00" * 31 + "05", s="0x" + "00" * 31 + "07")
        assert sig.to_vrs() == (27, 5, 7)


class TestOfferState:
    """Tests for the settlement-layer state snapshot."""

    def test_from_camel_case(self):
        state = OfferState.model_validate(
            {
                "status": 4,
                "takerFilledAmount": "10",
                "actualTakerFillableAmount": "40",
                "isValidInputParams": True,
            }
        )
        assert state.status is OfferStatus.FILLABLE
        assert state.taker_filled_amount == 10
        assert not state.is_first_fill

    def test_first_fill(self):
        assert OfferState(status=OfferStatus.FILLABLE).is_first_fill

    def test_terminal_statuses(self):
        assert OfferStatus.FILLABLE.is_terminal is False
        for status in (
            OfferStatus.INVALID,
            OfferStatus.CANCELLED,
            OfferStatus.FILLED,
            OfferStatus.EXPIRED,
        ):
            assert status.is_terminal

    def test_status_codes(self):
        assert [s.value for s in OfferStatus] == [0, 1, 2, 3, 4]


class TestPoolParameters:
    def test_remaining_capacity(self):
        pool = PoolParameters(
            poolId=POOL_ID,
            collateralToken=COLLATERAL,
            collateralBalance=70,
            capacity=100,
            expiryTime=1_950_000_000,
        )
        assert pool.remaining_capacity == 30

    def test_position_tokens(self):
        pool = make_pool()
        assert pool.exists
        assert pool.position_token(is_long=True) == LONG_TOKEN
        assert pool.position_token(is_long=False) == SHORT_TOKEN

    def test_zeroed_pool_does_not_exist(self):
        pool = PoolParameters(
            poolId=POOL_ID,
            collateralToken=ZERO_ADDRESS,
            collateralBalance=0,
            capacity=0,
            expiryTime=0,
        )
        assert not pool.exists
        assert pool.remaining_capacity == 0


class TestAddressHelpers:
    def test_normalize(self):
        assert normalize_address(MAKER) == MAKER.lower()

    def test_validity(self):
        assert is_valid_address(MAKER)
        assert is_valid_address(MAKER.lower())
        assert not is_valid_address("0x1234")
        assert not is_valid_address(None)

    def test_same_address_ignores_checksum(self):
        assert same_address(MAKER, MAKER.lower())
        assert not same_address(MAKER, TAKER)
