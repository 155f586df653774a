"""Tests for EIP-712 hashing and signer recovery."""

import pytest
from eth_account.messages import encode_typed_data
from eth_utils import keccak

from offerfill.errors import FillErrorReason, InvalidSignature
from offerfill.models.offer import OfferKind
from offerfill.signing import (
    EIP712_DOMAIN_FIELDS,
    OFFER_TYPES,
    SignatureVerifier,
    domain_separator,
    encode_type,
    offer_struct_hash,
    sign_offer,
    signable_offer,
    typed_data,
    typed_offer_hash,
)
from tests.helpers import (
    MAKER,
    MAKER_KEY,
    OTHER,
    TAKER_KEY,
    make_add_offer,
    make_create_offer,
    make_domain,
    make_remove_offer,
)


def _with_bytes(document: dict) -> dict:
    """Typed-data document with bytes32 members as raw bytes, as eth_abi encodes them."""
    message = dict(document["message"])
    for entry in document["types"][document["primaryType"]]:
        if entry["type"] == "bytes32":
            message[entry["name"]] = bytes.fromhex(message[entry["name"]][2:])
    return {**document, "message": message}


class TestHashing:
    """Tests for struct and digest hashing."""

    def test_encode_type(self):
        assert (
            encode_type("EIP712Domain", EIP712_DOMAIN_FIELDS)
            == "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
        )

    def test_add_liquidity_type_string(self):
        offer = make_add_offer()
        assert encode_type(offer.primary_type, offer.eip712_fields) == (
            "OfferAddLiquidity(address maker,address taker,uint256 makerCollateralAmount,"
            "uint256 takerCollateralAmount,bool makerIsLong,uint256 offerExpiry,"
            "uint256 minimumTakerFillAmount,bytes32 poolId,uint256 salt)"
        )

    @pytest.mark.parametrize("factory", [make_create_offer, make_add_offer, make_remove_offer])
    def test_matches_eth_account_typed_data(self, factory):
        """Domain separator and struct hash agree with eth_account's encoder."""
        offer = factory()
        domain = make_domain()
        expected = encode_typed_data(full_message=_with_bytes(typed_data(offer, domain)))
        assert domain_separator(domain) == expected.header
        assert offer_struct_hash(offer) == expected.body

    def test_offer_types_per_kind(self):
        assert set(OFFER_TYPES) == set(OfferKind)
        types = OFFER_TYPES[OfferKind.REMOVE_LIQUIDITY]
        assert set(types) == {"EIP712Domain", "OfferRemoveLiquidity"}
        assert [entry["name"] for entry in types["OfferRemoveLiquidity"]][3] == (
            "positionTokenAmount"
        )

    def test_typed_data_document(self):
        offer = make_add_offer()
        document = typed_data(offer, make_domain())
        assert document["primaryType"] == "OfferAddLiquidity"
        assert document["types"] == OFFER_TYPES[OfferKind.ADD_LIQUIDITY]
        assert document["message"]["poolId"] == offer.pool_id
        document["types"]["OfferAddLiquidity"].append({"name": "extra", "type": "uint256"})
        assert len(OFFER_TYPES[OfferKind.ADD_LIQUIDITY]["OfferAddLiquidity"]) == 9

    def test_typed_offer_hash_is_eip191_digest(self):
        offer = make_create_offer()
        domain = make_domain()
        signable = signable_offer(offer, domain)
        digest = keccak(b"\x19\x01" + signable.header + signable.body)
        assert typed_offer_hash(offer, domain) == "0x" + digest.hex()

    def test_hash_depends_on_every_binding(self):
        """Changing the offer, the chain or the contract changes the hash."""
        domain = make_domain()
        base = typed_offer_hash(make_create_offer(), domain)
        assert typed_offer_hash(make_create_offer(salt=2), domain) != base
        assert typed_offer_hash(make_create_offer(), make_domain(chain_id=1)) != base
        assert typed_offer_hash(make_create_offer(), make_domain(verifying_contract=OTHER)) != base

    def test_hash_ignores_address_case(self):
        domain = make_domain()
        assert typed_offer_hash(make_create_offer(maker=MAKER.lower()), domain) == (
            typed_offer_hash(make_create_offer(maker=MAKER), domain)
        )


class TestSignatureVerifier:
    """Tests for signing and recovering offers."""

    @pytest.mark.parametrize("factory", [make_create_offer, make_add_offer, make_remove_offer])
    def test_sign_and_verify(self, factory):
        offer = factory()
        domain = make_domain()
        signature = sign_offer(offer, domain, MAKER_KEY)
        assert SignatureVerifier().verify(domain, offer, signature) == MAKER

    def test_tampered_offer_rejected(self):
        domain = make_domain()
        signature = sign_offer(make_create_offer(), domain, MAKER_KEY)
        tampered = make_create_offer(taker_amount=1)
        with pytest.raises(InvalidSignature) as exc_info:
            SignatureVerifier().verify(domain, tampered, signature)
        assert exc_info.value.reason is FillErrorReason.INVALID_SIGNATURE

    def test_other_signer_rejected(self):
        domain = make_domain()
        offer = make_create_offer()
        signature = sign_offer(offer, domain, TAKER_KEY)
        with pytest.raises(InvalidSignature, match="not maker"):
            SignatureVerifier().verify(domain, offer, signature)

    def test_wrong_domain_rejected(self):
        offer = make_create_offer()
        signature = sign_offer(offer, make_domain(chain_id=1), MAKER_KEY)
        with pytest.raises(InvalidSignature):
            SignatureVerifier().verify(make_domain(), offer, signature)

    def test_unrecoverable_signature(self):
        """A malformed v value cannot be recovered."""
        offer = make_create_offer()
        domain = make_domain()
        signature = sign_offer(offer, domain, MAKER_KEY).model_copy(update={"v": 5})
        with pytest.raises(InvalidSignature, match="recovery failed"):
            SignatureVerifier().recover(domain, offer, signature)
