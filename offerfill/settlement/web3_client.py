"""RPC-backed settlement and token clients.

These make actual eth_call / eth_sendTransaction requests. Transactions are
sent from node-managed accounts (`{"from": address}`); key management is
left to the node.
"""

from __future__ import annotations

from typing import Any

import structlog

from offerfill.constants import DEFAULT_TX_TIMEOUT_SECONDS
from offerfill.errors import SettlementRejected
from offerfill.models.offer import Offer, OfferKind, Signature
from offerfill.models.pool import PoolParameters
from offerfill.models.state import OfferState, OfferStatus
from offerfill.settlement.abi import (
    ERC20_ABI,
    OFFER_FUNCTIONS,
    POOL_COMPONENTS,
    SETTLEMENT_ABI,
    offer_args,
    signature_args,
)
from offerfill.settlement.base import FillReceipt

logger = structlog.get_logger()


def _connect(web3_provider: Any) -> Any:
    """Return a Web3 instance for an RPC URL, or pass an existing one through."""
    try:
        from web3 import Web3
    except ImportError as e:
        raise ImportError(
            "web3 package required for RPC-backed clients. Install with: pip install web3"
        ) from e

    if isinstance(web3_provider, Web3):
        return web3_provider
    return Web3(Web3.HTTPProvider(web3_provider))


def _hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


class Web3SettlementClient:
    """Settlement contract accessed over JSON-RPC."""

    def __init__(
        self,
        web3_provider: Any,
        address: str,
        tx_timeout: float | None = DEFAULT_TX_TIMEOUT_SECONDS,
    ):
        """Initialize with a web3 provider.

        Args:
            web3_provider: HTTP RPC URL or a configured Web3 instance
            address: Settlement contract address
            tx_timeout: Seconds to wait for a fill to be mined; None waits indefinitely
        """
        self.w3 = _connect(web3_provider)
        self._address = self.w3.to_checksum_address(address)
        self.tx_timeout = tx_timeout
        self.contract = self.w3.eth.contract(address=self._address, abi=SETTLEMENT_ABI)

    @property
    def address(self) -> str:
        return self._address

    def get_offer_state(self, offer: Offer, signature: Signature) -> OfferState:
        state_fn, _, _ = OFFER_FUNCTIONS[offer.kind]
        fn = getattr(self.contract.functions, state_fn)
        offer_info, fillable, _signature_valid, params_valid = fn(
            offer_args(offer), signature_args(signature)
        ).call()
        typed_hash, status, filled = offer_info
        return OfferState(
            status=OfferStatus(status),
            typed_offer_hash=_hex(typed_hash),
            taker_filled_amount=filled,
            actual_taker_fillable_amount=fillable,
            is_valid_input_params=params_valid,
        )

    def fill_offer(
        self,
        offer: Offer,
        signature: Signature,
        taker_fill_amount: int,
        taker: str,
    ) -> FillReceipt:
        from web3.exceptions import ContractLogicError

        _, fill_fn, _ = OFFER_FUNCTIONS[offer.kind]
        fn = getattr(self.contract.functions, fill_fn)
        try:
            tx_hash = fn(offer_args(offer), signature_args(signature), taker_fill_amount).transact(
                {"from": self.w3.to_checksum_address(taker)}
            )
        except ContractLogicError as e:
            raise SettlementRejected(f"{fill_fn} reverted", revert_reason=e.message) from e

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        if receipt["status"] != 1:
            raise SettlementRejected(f"{fill_fn} transaction {_hex(tx_hash)} reverted")

        typed_offer_hash = None
        events = self.contract.events.OfferFilled().process_receipt(receipt)
        if events:
            typed_offer_hash = _hex(events[0]["args"]["typedOfferHash"])

        if offer.kind is OfferKind.CREATE_POOL:
            pool_id = (
                self._pool_id_for(typed_offer_hash) if typed_offer_hash is not None else None
            )
        else:
            pool_id = offer.pool_id  # type: ignore[attr-defined]

        logger.info(
            "fill_mined",
            kind=offer.kind.value,
            tx_hash=_hex(tx_hash),
            typed_offer_hash=typed_offer_hash,
            pool_id=pool_id,
        )
        return FillReceipt(
            tx_hash=_hex(tx_hash),
            typed_offer_hash=typed_offer_hash,
            pool_id=pool_id,
            taker_fill_amount=taker_fill_amount,
        )

    def get_taker_filled_amount(self, typed_offer_hash: str) -> int:
        return int(
            self.contract.functions.getTakerFilledAmount(
                bytes.fromhex(typed_offer_hash[2:])
            ).call()
        )

    def get_pool_parameters(self, pool_id: str) -> PoolParameters:
        raw = self.contract.functions.getPoolParameters(bytes.fromhex(pool_id[2:])).call()
        fields = {component["name"]: value for component, value in zip(POOL_COMPONENTS, raw)}
        return PoolParameters.model_validate({"poolId": pool_id, **fields})

    def add_liquidity(
        self,
        pool_id: str,
        amount: int,
        long_recipient: str,
        short_recipient: str,
        provider: str,
    ) -> str:
        from web3.exceptions import ContractLogicError

        try:
            tx_hash = self.contract.functions.addLiquidity(
                bytes.fromhex(pool_id[2:]),
                amount,
                self.w3.to_checksum_address(long_recipient),
                self.w3.to_checksum_address(short_recipient),
            ).transact({"from": self.w3.to_checksum_address(provider)})
        except ContractLogicError as e:
            raise SettlementRejected("addLiquidity reverted", revert_reason=e.message) from e

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        if receipt["status"] != 1:
            raise SettlementRejected(f"addLiquidity transaction {_hex(tx_hash)} reverted")

        logger.info("liquidity_added", pool_id=pool_id, amount=amount, tx_hash=_hex(tx_hash))
        return _hex(tx_hash)

    def _pool_id_for(self, typed_offer_hash: str) -> str:
        pool_id = self.contract.functions.getPoolIdByTypedCreateOfferHash(
            bytes.fromhex(typed_offer_hash[2:])
        ).call()
        return _hex(pool_id)


class Web3TokenClient:
    """ERC20 tokens accessed over JSON-RPC."""

    def __init__(self, web3_provider: Any, tx_timeout: float | None = DEFAULT_TX_TIMEOUT_SECONDS):
        self.w3 = _connect(web3_provider)
        self.tx_timeout = tx_timeout

    def _token(self, token: str) -> Any:
        return self.w3.eth.contract(address=self.w3.to_checksum_address(token), abi=ERC20_ABI)

    def decimals(self, token: str) -> int:
        return int(self._token(token).functions.decimals().call())

    def balance_of(self, token: str, owner: str) -> int:
        return int(
            self._token(token).functions.balanceOf(self.w3.to_checksum_address(owner)).call()
        )

    def allowance(self, token: str, owner: str, spender: str) -> int:
        return int(
            self._token(token)
            .functions.allowance(
                self.w3.to_checksum_address(owner),
                self.w3.to_checksum_address(spender),
            )
            .call()
        )

    def approve(self, token: str, owner: str, spender: str, amount: int) -> str:
        tx_hash = (
            self._token(token)
            .functions.approve(self.w3.to_checksum_address(spender), amount)
            .transact({"from": self.w3.to_checksum_address(owner)})
        )
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        if receipt["status"] != 1:
            raise RuntimeError(f"approve transaction {_hex(tx_hash)} reverted")
        return _hex(tx_hash)


__all__ = ["Web3SettlementClient", "Web3TokenClient"]
