"""End-to-end fill of a signed offer.

One fill is: read fresh state and balances, run the preflight checks,
top up allowances, submit. Each external round trip runs in the default
thread-pool executor and is awaited with an optional timeout, so callers
can cancel it. Nothing is retried: a failed approval or a rejected fill
surfaces to the caller as-is.

Between preflight and submission another party may fill or cancel the
same offer. That race is not prevented here; the settlement layer re-checks
everything and a lost race surfaces as SettlementRejected.
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

import structlog

from offerfill.allowance import AllowanceGate, TokenClient
from offerfill.calculator import FillAmounts, FillCalculator
from offerfill.config import EngineConfig
from offerfill.constants import ALLOWANCE_BUFFER
from offerfill.errors import FillErrorReason, PreflightFailed
from offerfill.liquidity import check_add_liquidity
from offerfill.models.offer import (
    EIP712Domain,
    Offer,
    OfferCreateContingentPool,
    OfferRemoveLiquidity,
    Signature,
)
from offerfill.models.pool import PoolParameters
from offerfill.models.state import OfferState
from offerfill.preflight import FillPreflightValidator, OfferSignatureVerifier, PreflightResult
from offerfill.settlement.base import FillReceipt, SettlementClient
from offerfill.settlement.web3_client import Web3SettlementClient, Web3TokenClient

logger = structlog.get_logger()

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class FillLegs:
    """Tokens each party hands over in a fill.

    Attributes:
        maker_token: Token the maker pays in
        taker_token: Token the taker pays in
        requires_allowance: Whether the settlement contract pulls the legs
            through ERC20 allowances. Position tokens returned in a
            remove-liquidity fill are burned by the settlement contract
            directly, so no approval applies to them.
    """

    maker_token: str
    taker_token: str
    requires_allowance: bool = True


@dataclasses.dataclass(frozen=True)
class PreflightReport:
    """Everything read and decided before a fill.

    Attributes:
        legs: Tokens the balances were read in
        state: Offer state snapshot used for validation
        taker_balance: Taker's balance of its leg token
        maker_balance: Maker's balance of its leg token
        result: Preflight outcome
        amounts: Fill amounts, present only if preflight passed
    """

    legs: FillLegs
    state: OfferState
    taker_balance: int
    maker_balance: int
    result: PreflightResult
    amounts: FillAmounts | None = None


class FillExecutor:
    """Fills offers against a settlement contract.

    Attributes:
        settlement: Settlement contract client
        token_client: ERC20 access for balances and allowances
        validator: Preflight validator
        allowance_buffer: Units approved on top of a required allowance
        timeout: Seconds allowed per external round trip; None for no limit
    """

    def __init__(
        self,
        settlement: SettlementClient,
        token_client: TokenClient,
        domain: EIP712Domain,
        *,
        verifier: OfferSignatureVerifier | None = None,
        allowance_buffer: int = ALLOWANCE_BUFFER,
        timeout: float | None = None,
    ):
        self.settlement = settlement
        self.token_client = token_client
        self.calculator = FillCalculator()
        self.validator = FillPreflightValidator(domain, verifier=verifier, calculator=self.calculator)
        self.allowance_buffer = allowance_buffer
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: EngineConfig, *, timeout: float | None = None) -> FillExecutor:
        """Build an executor backed by JSON-RPC settlement and token clients.

        Raises:
            ValueError: If rpc_url, chain_id or settlement_address is not configured
        """
        if config.rpc_url is None:
            raise ValueError("rpc_url is required to build an RPC-backed executor")
        domain = config.domain()
        settlement = Web3SettlementClient(
            config.rpc_url, domain.verifying_contract, tx_timeout=config.tx_timeout_seconds
        )
        token_client = Web3TokenClient(settlement.w3, tx_timeout=config.tx_timeout_seconds)
        return cls(
            settlement,
            token_client,
            domain,
            allowance_buffer=config.allowance_buffer,
            timeout=timeout,
        )

    async def _call(self, fn: Callable[..., T], *args: Any) -> T:
        """Run one blocking collaborator call off the event loop.

        A timeout stops the wait, not the worker thread: an approval or
        fill already handed to the node may still be mined afterwards.

        Raises:
            TimeoutError: If `timeout` is set and the call outlives it
        """
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, partial(fn, *args))
        if self.timeout is not None:
            return await asyncio.wait_for(future, timeout=self.timeout)
        return await future

    async def _existing_pool(self, pool_id: str) -> PoolParameters:
        pool = await self._call(self.settlement.get_pool_parameters, pool_id)
        if not pool.exists:
            raise PreflightFailed(FillErrorReason.POOL_NOT_FOUND, f"No pool with id {pool_id}")
        return pool

    async def resolve_legs(self, offer: Offer) -> FillLegs:
        """Tokens each party pays in when filling `offer`.

        Create offers name their collateral token. Liquidity offers refer to
        an existing pool, which is looked up: adding pays collateral on both
        sides, removing returns each party's own position token (the maker's
        long token if it is long, the taker's the opposite side).

        Raises:
            PreflightFailed: POOL_NOT_FOUND if the offer's pool does not exist
        """
        if isinstance(offer, OfferCreateContingentPool):
            return FillLegs(offer.collateral_token, offer.collateral_token)

        pool = await self._existing_pool(offer.pool_id)  # type: ignore[attr-defined]
        if isinstance(offer, OfferRemoveLiquidity):
            return FillLegs(
                maker_token=pool.position_token(offer.maker_is_long),
                taker_token=pool.position_token(not offer.maker_is_long),
                requires_allowance=False,
            )
        return FillLegs(pool.collateral_token, pool.collateral_token)

    async def preflight(
        self,
        offer: Offer,
        signature: Signature,
        taker_fill_amount: int,
        taker: str,
    ) -> PreflightReport:
        """Read fresh state and balances and validate the fill.

        Does not change any on-chain state.

        Raises:
            PreflightFailed: POOL_NOT_FOUND if a liquidity offer's pool does not exist
        """
        legs = await self.resolve_legs(offer)
        state = await self._call(self.settlement.get_offer_state, offer, signature)
        taker_balance = await self._call(self.token_client.balance_of, legs.taker_token, taker)
        maker_balance = await self._call(
            self.token_client.balance_of, legs.maker_token, offer.maker
        )

        result = self.validator.validate(
            offer,
            state,
            signature,
            taker,
            taker_fill_amount,
            taker_balance,
            maker_balance,
        )
        amounts = None
        if result.is_valid:
            amounts = self.calculator.compute(offer, state, taker_fill_amount, taker)
        return PreflightReport(
            legs=legs,
            state=state,
            taker_balance=taker_balance,
            maker_balance=maker_balance,
            result=result,
            amounts=amounts,
        )

    async def ensure_allowances(
        self,
        offer: Offer,
        amounts: FillAmounts,
        taker: str,
        legs: FillLegs,
    ) -> None:
        """Make sure the settlement contract may pull both legs.

        A maker filling its own offer pays both legs from one account, so a
        single allowance sized to the combined amount is ensured instead.

        Raises:
            AllowanceRequestFailed: If an approval fails
        """
        if not legs.requires_allowance:
            logger.debug("allowance_not_required", kind=offer.kind.value, taker=taker)
            return

        spender = self.settlement.address
        buffer = self.allowance_buffer
        maker_gate = AllowanceGate(self.token_client, legs.maker_token, buffer=buffer)

        if amounts.self_fill and amounts.combined_fill_amount is not None:
            await self._call(
                maker_gate.ensure_allowance, taker, spender, amounts.combined_fill_amount
            )
            return

        taker_gate = AllowanceGate(self.token_client, legs.taker_token, buffer=buffer)
        await self._call(
            maker_gate.ensure_allowance, offer.maker, spender, amounts.maker_fill_amount
        )
        await self._call(taker_gate.ensure_allowance, taker, spender, amounts.taker_fill_amount)

    async def fill(
        self,
        offer: Offer,
        signature: Signature,
        taker_fill_amount: int,
        taker: str,
    ) -> FillReceipt:
        """Validate, authorize and submit one fill.

        Args:
            offer: Offer to fill
            signature: Maker's signature
            taker_fill_amount: Taker-side amount to fill
            taker: Account submitting the fill

        Returns:
            FillReceipt from the settlement layer, with the maker amount set

        Raises:
            PreflightFailed: If a local check fails; nothing is sent
            AllowanceRequestFailed: If an approval fails; the fill is not sent
            SettlementRejected: If the settlement layer reverts the fill
        """
        report = await self.preflight(offer, signature, taker_fill_amount, taker)
        report.result.raise_for_error()
        amounts = report.amounts
        if amounts is None:
            raise RuntimeError("Preflight passed without computing fill amounts")

        await self.ensure_allowances(offer, amounts, taker, report.legs)

        logger.info(
            "fill_submitted",
            kind=offer.kind.value,
            maker=offer.maker,
            taker=taker,
            taker_fill_amount=taker_fill_amount,
            maker_fill_amount=amounts.maker_fill_amount,
        )
        try:
            receipt = await self._call(
                self.settlement.fill_offer, offer, signature, taker_fill_amount, taker
            )
        except Exception:
            logger.warning(
                "fill_failed",
                kind=offer.kind.value,
                taker=taker,
                taker_fill_amount=taker_fill_amount,
                exc_info=True,
            )
            raise

        return dataclasses.replace(receipt, maker_fill_amount=amounts.maker_fill_amount)

    async def add_liquidity(
        self,
        pool_id: str,
        amount: int,
        provider: str,
        long_recipient: str,
        short_recipient: str,
        now: int | None = None,
    ) -> str:
        """Add collateral to an existing pool directly, without an offer.

        The provider approves exactly `amount` of the pool's collateral
        token, then the addition is submitted.

        Args:
            pool_id: Pool to add to
            amount: Collateral to add, in base units
            provider: Account paying the collateral
            long_recipient: Receiver of the minted long tokens
            short_recipient: Receiver of the minted short tokens
            now: Timestamp to check expiry against (defaults to wall-clock time)

        Returns:
            Transaction hash of the addition

        Raises:
            PreflightFailed: If the pool is missing or a local check fails
            AllowanceRequestFailed: If the approval fails; nothing else is sent
            SettlementRejected: If the settlement layer reverts the addition
        """
        pool = await self._existing_pool(pool_id)
        balance = await self._call(self.token_client.balance_of, pool.collateral_token, provider)
        check_add_liquidity(
            pool,
            amount,
            long_recipient,
            short_recipient,
            balance,
            int(time.time()) if now is None else now,
        ).raise_for_error()

        gate = AllowanceGate(self.token_client, pool.collateral_token, buffer=0)
        await self._call(gate.ensure_allowance, provider, self.settlement.address, amount)

        logger.info("liquidity_submitted", pool_id=pool_id, provider=provider, amount=amount)
        return await self._call(
            self.settlement.add_liquidity,
            pool_id,
            amount,
            long_recipient,
            short_recipient,
            provider,
        )


__all__ = ["FillExecutor", "FillLegs", "PreflightReport"]
