"""Minimal ABIs for the settlement contract and ERC20 tokens.

Offer struct components are derived from the EIP-712 field lists on the
offer models, so the signed struct and the call argument cannot drift
apart.
"""

from __future__ import annotations

from typing import Any

from eth_utils import to_checksum_address

from offerfill.models.offer import OFFER_MODELS, Offer, OfferKind, Signature

# Per-kind entry points: (state getter, fill function, fill amount parameter)
OFFER_FUNCTIONS: dict[OfferKind, tuple[str, str, str]] = {
    OfferKind.CREATE_POOL: (
        "getOfferRelevantStateCreateContingentPool",
        "fillOfferCreateContingentPool",
        "takerFillAmount",
    ),
    OfferKind.ADD_LIQUIDITY: (
        "getOfferRelevantStateAddLiquidity",
        "fillOfferAddLiquidity",
        "takerFillAmount",
    ),
    OfferKind.REMOVE_LIQUIDITY: (
        "getOfferRelevantStateRemoveLiquidity",
        "fillOfferRemoveLiquidity",
        "positionTokenFillAmount",
    ),
}

SIGNATURE_COMPONENTS = [
    {"name": "v", "type": "uint8"},
    {"name": "r", "type": "bytes32"},
    {"name": "s", "type": "bytes32"},
]

OFFER_INFO_COMPONENTS = [
    {"name": "typedOfferHash", "type": "bytes32"},
    {"name": "status", "type": "uint8"},
    {"name": "takerFilledAmount", "type": "uint256"},
]

# Pool struct as returned by getPoolParameters, in declaration order
POOL_COMPONENTS = [
    {"name": "floor", "type": "uint256"},
    {"name": "inflection", "type": "uint256"},
    {"name": "cap", "type": "uint256"},
    {"name": "gradient", "type": "uint256"},
    {"name": "collateralBalance", "type": "uint256"},
    {"name": "finalReferenceValue", "type": "uint256"},
    {"name": "capacity", "type": "uint256"},
    {"name": "statusTimestamp", "type": "uint256"},
    {"name": "shortToken", "type": "address"},
    {"name": "payoutShort", "type": "uint96"},
    {"name": "longToken", "type": "address"},
    {"name": "payoutLong", "type": "uint96"},
    {"name": "collateralToken", "type": "address"},
    {"name": "expiryTime", "type": "uint96"},
    {"name": "dataProvider", "type": "address"},
    {"name": "indexFees", "type": "uint32"},
    {"name": "indexSettlementPeriods", "type": "uint32"},
    {"name": "statusFinalReferenceValue", "type": "uint8"},
    {"name": "referenceAsset", "type": "string"},
]


def offer_components(kind: OfferKind) -> list[dict[str, str]]:
    """ABI tuple components of the offer struct for `kind`."""
    return [
        {"name": name, "type": solidity_type}
        for name, solidity_type in OFFER_MODELS[kind].eip712_fields
    ]


def _offer_functions(kind: OfferKind) -> list[dict[str, Any]]:
    state_fn, fill_fn, amount_name = OFFER_FUNCTIONS[kind]
    offer_input = {
        "name": "offer",
        "type": "tuple",
        "components": offer_components(kind),
    }
    signature_input = {"name": "signature", "type": "tuple", "components": SIGNATURE_COMPONENTS}
    return [
        {
            "name": state_fn,
            "type": "function",
            "stateMutability": "view",
            "inputs": [offer_input, signature_input],
            "outputs": [
                {"name": "offerInfo", "type": "tuple", "components": OFFER_INFO_COMPONENTS},
                {"name": "actualTakerFillableAmount", "type": "uint256"},
                {"name": "isSignatureValid", "type": "bool"},
                {"name": "isValidInputParams", "type": "bool"},
            ],
        },
        {
            "name": fill_fn,
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [offer_input, signature_input, {"name": amount_name, "type": "uint256"}],
            "outputs": [],
        },
    ]


SETTLEMENT_ABI: list[dict[str, Any]] = [
    *(entry for kind in OfferKind for entry in _offer_functions(kind)),
    {
        "name": "getTakerFilledAmount",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "typedOfferHash", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "getPoolIdByTypedCreateOfferHash",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "typedOfferHash", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    {
        "name": "getPoolParameters",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "_poolId", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "tuple", "components": POOL_COMPONENTS}],
    },
    {
        "name": "addLiquidity",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_poolId", "type": "bytes32"},
            {"name": "_collateralAmountIncr", "type": "uint256"},
            {"name": "_longRecipient", "type": "address"},
            {"name": "_shortRecipient", "type": "address"},
        ],
        "outputs": [],
    },
    {
        "name": "OfferFilled",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "typedOfferHash", "type": "bytes32", "indexed": True},
            {"name": "maker", "type": "address", "indexed": True},
            {"name": "taker", "type": "address", "indexed": True},
            {"name": "takerFilledAmount", "type": "uint256", "indexed": False},
        ],
    },
]

ERC20_ABI: list[dict[str, Any]] = [
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


def _abi_value(solidity_type: str, value: Any) -> Any:
    if solidity_type == "bytes32":
        return bytes.fromhex(value[2:])
    if solidity_type == "address":
        return to_checksum_address(value)
    return value


def offer_args(offer: Offer) -> tuple[Any, ...]:
    """Offer as the positional tuple a contract call expects."""
    message = offer.to_message()
    return tuple(
        _abi_value(solidity_type, message[name]) for name, solidity_type in offer.eip712_fields
    )


def signature_args(signature: Signature) -> tuple[int, bytes, bytes]:
    """Signature as the (v, r, s) tuple a contract call expects."""
    return signature.v, bytes.fromhex(signature.r[2:]), bytes.fromhex(signature.s[2:])


__all__ = [
    "ERC20_ABI",
    "OFFER_FUNCTIONS",
    "POOL_COMPONENTS",
    "SETTLEMENT_ABI",
    "offer_args",
    "offer_components",
    "signature_args",
]
