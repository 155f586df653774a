"""Pre-submission checks for adding liquidity to a pool directly.

Same idea as the offer preflight: reproduce the settlement layer's checks
in its order so a doomed transaction is never sent.
"""

from __future__ import annotations

import structlog

from offerfill.errors import FillErrorReason
from offerfill.models.pool import PoolParameters
from offerfill.models.types import is_zero_address
from offerfill.preflight import PreflightResult
from offerfill.safe_int import U

logger = structlog.get_logger()


def check_add_liquidity(
    pool: PoolParameters,
    additional_amount: int,
    long_recipient: str,
    short_recipient: str,
    provider_balance: int,
    now: int,
) -> PreflightResult:
    """Validate a direct liquidity addition.

    Args:
        pool: Fresh pool parameters
        additional_amount: Collateral to add
        long_recipient: Receiver of the minted long tokens
        short_recipient: Receiver of the minted short tokens
        provider_balance: Provider's collateral token balance
        now: Current timestamp (proxy for the block timestamp)

    Returns:
        PreflightResult; on success `maker_fill_amount` holds the amount
        the provider commits
    """
    if is_zero_address(long_recipient) or is_zero_address(short_recipient):
        return PreflightResult.with_error(
            FillErrorReason.ZERO_RECIPIENT,
            "Long and short token recipient cannot be the zero address",
        )

    if now >= pool.expiry_time:
        return PreflightResult.with_error(
            FillErrorReason.POOL_EXPIRED,
            f"Pool expired at {pool.expiry_time}",
        )

    if (U(pool.collateral_balance) + additional_amount) > pool.capacity:
        logger.info(
            "pool_capacity_exceeded",
            pool_id=pool.pool_id,
            collateral_balance=pool.collateral_balance,
            additional_amount=additional_amount,
            capacity=pool.capacity,
        )
        return PreflightResult.with_error(
            FillErrorReason.CAPACITY_EXCEEDED,
            f"Adding {additional_amount} exceeds remaining capacity {pool.remaining_capacity}",
        )

    if provider_balance < additional_amount:
        return PreflightResult.with_error(
            FillErrorReason.INSUFFICIENT_BALANCE,
            f"Balance {provider_balance} < {additional_amount}",
        )

    return PreflightResult.ok(additional_amount)


__all__ = ["check_add_liquidity"]
