"""Tests for settlement call encoding."""

from offerfill.models.offer import OfferKind
from offerfill.models.pool import PoolParameters
from offerfill.settlement.abi import (
    OFFER_FUNCTIONS,
    POOL_COMPONENTS,
    SETTLEMENT_ABI,
    offer_args,
    offer_components,
    signature_args,
)
from tests.helpers import POOL_ID, make_add_offer, make_create_offer, make_signature


class TestOfferComponents:
    def test_remove_offer_components(self):
        names = [c["name"] for c in offer_components(OfferKind.REMOVE_LIQUIDITY)]
        assert names[3] == "positionTokenAmount"
        assert names[-2:] == ["poolId", "salt"]

    def test_every_kind_has_state_and_fill_functions(self):
        abi_names = {entry["name"] for entry in SETTLEMENT_ABI}
        for state_fn, fill_fn, _ in OFFER_FUNCTIONS.values():
            assert state_fn in abi_names
            assert fill_fn in abi_names
        assert "OfferFilled" in abi_names


class TestOfferArgs:
    def test_add_offer_args(self):
        offer = make_add_offer(maker_amount=100, taker_amount=50)
        args = offer_args(offer)
        assert len(args) == 9
        assert args[2] == 100
        assert args[3] == 50
        assert args[7] == bytes.fromhex(POOL_ID[2:])

    def test_create_offer_addresses_checksummed(self):
        offer = make_create_offer()
        args = offer_args(offer)
        collateral = args[13]
        assert collateral != collateral.lower()
        assert collateral.lower() == offer.collateral_token.lower()

    def test_signature_args(self):
        v, r, s = signature_args(make_signature())
        assert v == 27
        assert r == bytes.fromhex("ab" * 32)
        assert s == bytes.fromhex("cd" * 32)


class TestPoolAbi:
    def test_pool_model_fields_present_in_struct(self):
        """Every pool field other than the id is decoded from the struct by name."""
        component_names = {c["name"] for c in POOL_COMPONENTS}
        model_names = {
            field.alias or name
            for name, field in PoolParameters.model_fields.items()
            if name != "pool_id"
        }
        assert model_names <= component_names

    def test_liquidity_functions(self):
        entries = {entry["name"]: entry for entry in SETTLEMENT_ABI}
        assert [i["type"] for i in entries["addLiquidity"]["inputs"]] == [
            "bytes32",
            "uint256",
            "address",
            "address",
        ]
        assert entries["getPoolParameters"]["outputs"][0]["components"] is POOL_COMPONENTS
