"""EIP-712 hashing and signer recovery for offers.

Struct hashing is done with eth_abi so the typed offer hash produced here
is byte-identical to the one the settlement contract computes; recovery
and signing go through eth_account.

Hashing follows EIP-712:
    typeHash   = keccak256("Primary(type1 name1,type2 name2,...)")
    hashStruct = keccak256(abi.encode(typeHash, enc(v1), enc(v2), ...))
    digest     = keccak256(0x1901 || domainSeparator || hashStruct)
where dynamic values (string, bytes) are replaced by their keccak256.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from eth_abi import encode  # type: ignore[attr-defined]
from eth_account import Account
from eth_account.messages import SignableMessage
from eth_utils import keccak, to_checksum_address

from offerfill.errors import InvalidSignature
from offerfill.models.offer import OFFER_MODELS, EIP712Domain, Offer, OfferKind, Signature
from offerfill.models.types import same_address

logger = structlog.get_logger()

EIP712_DOMAIN_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
)

TypeFields = Sequence[tuple[str, str]]


def _type_entries(fields: TypeFields) -> list[dict[str, str]]:
    return [{"name": name, "type": solidity_type} for name, solidity_type in fields]


# `types` member of the typed-data document, per offer kind
OFFER_TYPES: dict[OfferKind, dict[str, list[dict[str, str]]]] = {
    kind: {
        "EIP712Domain": _type_entries(EIP712_DOMAIN_FIELDS),
        model.primary_type: _type_entries(model.eip712_fields),
    }
    for kind, model in OFFER_MODELS.items()
}


def encode_type(primary_type: str, fields: TypeFields) -> str:
    """Canonical EIP-712 type string, e.g. "Mail(address from,string body)"."""
    members = ",".join(f"{solidity_type} {name}" for name, solidity_type in fields)
    return f"{primary_type}({members})"


def type_hash(primary_type: str, fields: TypeFields) -> bytes:
    return keccak(text=encode_type(primary_type, fields))


def _encode_field(solidity_type: str, value: Any) -> tuple[str, Any]:
    """Map one field to its (abi type, abi value) for struct encoding."""
    if solidity_type == "string":
        return "bytes32", keccak(text=value)
    if solidity_type == "bytes":
        raw = bytes.fromhex(value[2:]) if isinstance(value, str) else value
        return "bytes32", keccak(raw)
    if solidity_type == "address":
        return "address", to_checksum_address(value)
    if solidity_type.startswith("bytes"):
        raw = bytes.fromhex(value[2:]) if isinstance(value, str) else value
        return solidity_type, raw
    return solidity_type, value


def hash_struct(primary_type: str, fields: TypeFields, message: Mapping[str, Any]) -> bytes:
    """keccak256 of the EIP-712 encoding of `message` as `primary_type`.

    Raises:
        KeyError: If `message` lacks one of the struct's fields
    """
    abi_types = ["bytes32"]
    values: list[Any] = [type_hash(primary_type, fields)]
    for name, solidity_type in fields:
        abi_type, abi_value = _encode_field(solidity_type, message[name])
        abi_types.append(abi_type)
        values.append(abi_value)
    return keccak(encode(abi_types, values))


def domain_separator(domain: EIP712Domain) -> bytes:
    """hashStruct of the EIP712Domain."""
    return hash_struct("EIP712Domain", EIP712_DOMAIN_FIELDS, domain.to_message())


def offer_struct_hash(offer: Offer) -> bytes:
    return hash_struct(offer.primary_type, offer.eip712_fields, offer.to_message())


def signable_offer(offer: Offer, domain: EIP712Domain) -> SignableMessage:
    """EIP-191 version 0x01 message wrapping the typed offer."""
    return SignableMessage(
        version=b"\x01",
        header=domain_separator(domain),
        body=offer_struct_hash(offer),
    )


def typed_offer_hash(offer: Offer, domain: EIP712Domain) -> str:
    """The offer's EIP-712 digest as 0x-hex.

    This is the identifier the settlement layer tracks fills under and the
    relay API stores offers under.
    """
    digest = keccak(b"\x19\x01" + domain_separator(domain) + offer_struct_hash(offer))
    return "0x" + digest.hex()


def typed_data(offer: Offer, domain: EIP712Domain) -> dict[str, Any]:
    """Full EIP-712 typed-data document for `offer`.

    This is the JSON document wallets sign through eth_signTypedData_v4;
    bytes32 members are 0x-hex strings.
    """
    return {
        "types": {name: list(entries) for name, entries in OFFER_TYPES[offer.kind].items()},
        "primaryType": offer.primary_type,
        "domain": domain.to_message(),
        "message": offer.to_message(),
    }


def sign_offer(offer: Offer, domain: EIP712Domain, private_key: bytes | str) -> Signature:
    """Sign an offer as its maker."""
    signed = Account.sign_message(signable_offer(offer, domain), private_key)
    return Signature(
        v=signed.v,
        r="0x" + signed.r.to_bytes(32, "big").hex(),
        s="0x" + signed.s.to_bytes(32, "big").hex(),
    )


class SignatureVerifier:
    """Recovers and checks the signer of an offer.

    Stateless; safe to share.
    """

    def recover(self, domain: EIP712Domain, offer: Offer, signature: Signature) -> str:
        """Recover the checksummed address that signed `offer` under `domain`.

        Raises:
            InvalidSignature: If no address can be recovered from the signature
        """
        try:
            return Account.recover_message(signable_offer(offer, domain), vrs=signature.to_vrs())
        except Exception as e:
            raise InvalidSignature(f"Signature recovery failed: {e}") from e

    def verify(self, domain: EIP712Domain, offer: Offer, signature: Signature) -> str:
        """Recover the signer and require it to be the offer's maker.

        Returns:
            The recovered (maker) address

        Raises:
            InvalidSignature: If recovery fails or recovers a different address
        """
        recovered = self.recover(domain, offer, signature)
        if not same_address(recovered, offer.maker):
            logger.info(
                "signature_maker_mismatch",
                maker=offer.maker,
                recovered=recovered,
                kind=offer.kind.value,
            )
            raise InvalidSignature(f"Signature recovers to {recovered}, not maker {offer.maker}")
        return recovered


__all__ = [
    "EIP712_DOMAIN_FIELDS",
    "OFFER_TYPES",
    "SignatureVerifier",
    "domain_separator",
    "encode_type",
    "hash_struct",
    "offer_struct_hash",
    "sign_offer",
    "signable_offer",
    "typed_data",
    "typed_offer_hash",
]
