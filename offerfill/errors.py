"""Failure reasons and exceptions for offer fills.

Every way a fill can be refused has its own reason, so callers can react
differently (top up a balance, wait, or give up) instead of seeing a
generic failure.
"""

from __future__ import annotations

from enum import Enum


class FillErrorReason(str, Enum):
    """Why a fill was refused or failed."""

    STATUS_INVALID = "status_invalid"
    STATUS_CANCELLED = "status_cancelled"
    STATUS_FILLED = "status_filled"
    STATUS_EXPIRED = "status_expired"
    INVALID_PARAMETERS = "invalid_parameters"
    EXCEEDS_FILLABLE = "exceeds_fillable"
    INVALID_SIGNATURE = "invalid_signature"
    UNAUTHORIZED = "unauthorized"
    BELOW_MINIMUM = "below_minimum"
    INSUFFICIENT_TAKER_BALANCE = "insufficient_taker_balance"
    INSUFFICIENT_MAKER_BALANCE = "insufficient_maker_balance"
    OVERFLOW = "overflow"
    ALLOWANCE_REQUEST_FAILED = "allowance_request_failed"
    SETTLEMENT_REJECTED = "settlement_rejected"

    # Pool lookups
    POOL_NOT_FOUND = "pool_not_found"

    # Direct liquidity additions
    ZERO_RECIPIENT = "zero_recipient"
    POOL_EXPIRED = "pool_expired"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    INSUFFICIENT_BALANCE = "insufficient_balance"


class FillError(Exception):
    """Base class for fill failures.

    Attributes:
        reason: Machine-readable failure reason
        detail: Human-readable explanation
    """

    def __init__(self, reason: FillErrorReason, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class PreflightFailed(FillError):
    """A local check showed the fill would be rejected by the settlement layer."""

    pass


class InvalidSignature(FillError):
    """Signature cannot be recovered or was not made by the offer's maker."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(FillErrorReason.INVALID_SIGNATURE, detail)


class AllowanceRequestFailed(FillError):
    """Raising a spending allowance failed or was not reflected on-chain."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(FillErrorReason.ALLOWANCE_REQUEST_FAILED, detail)


class SettlementRejected(FillError):
    """The settlement layer reverted the fill.

    Attributes:
        revert_reason: Revert message reported by the settlement layer, if any
    """

    def __init__(self, detail: str | None = None, revert_reason: str | None = None) -> None:
        self.revert_reason = revert_reason
        super().__init__(FillErrorReason.SETTLEMENT_REJECTED, detail)


class RelayError(Exception):
    """The offer relay API returned an error or an unreadable payload."""

    pass


_STATUS_MESSAGES = {
    FillErrorReason.STATUS_INVALID: "Offer is invalid because its taker amount is zero",
    FillErrorReason.STATUS_CANCELLED: "Offer was cancelled",
    FillErrorReason.STATUS_FILLED: "Offer is already filled",
    FillErrorReason.STATUS_EXPIRED: "Offer is already expired",
}


def status_message(reason: FillErrorReason) -> str:
    """Default detail text for a terminal-status reason."""
    return _STATUS_MESSAGES.get(reason, reason.value)
