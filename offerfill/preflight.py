"""Pre-submission checks for offer fills.

Mirrors, in the same order, the checks the settlement layer performs when
a fill is submitted, so a fill that would revert is caught before any
transaction cost is paid. Order matters: the first failing check decides
the reported reason, and it must be the one the settlement layer would
report.

The validator is pure. Offer state and balances are passed in by the
caller, fetched fresh right before the call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from offerfill.calculator import FillCalculator
from offerfill.errors import (
    FillError,
    FillErrorReason,
    PreflightFailed,
    status_message,
)
from offerfill.models.offer import EIP712Domain, Offer, Signature
from offerfill.models.state import OfferState, OfferStatus
from offerfill.models.types import is_valid_address
from offerfill.safe_int import AmountError
from offerfill.signing import SignatureVerifier

logger = structlog.get_logger()

STATUS_REASONS: dict[OfferStatus, FillErrorReason] = {
    OfferStatus.INVALID: FillErrorReason.STATUS_INVALID,
    OfferStatus.CANCELLED: FillErrorReason.STATUS_CANCELLED,
    OfferStatus.FILLED: FillErrorReason.STATUS_FILLED,
    OfferStatus.EXPIRED: FillErrorReason.STATUS_EXPIRED,
}


class OfferSignatureVerifier(Protocol):
    """Anything that can confirm an offer was signed by its maker."""

    def verify(self, domain: EIP712Domain, offer: Offer, signature: Signature) -> str: ...


@dataclass(frozen=True)
class PreflightResult:
    """Outcome of a preflight validation.

    Attributes:
        maker_fill_amount: Maker-side amount of the fill if all checks passed
        error: The first failing check, or None
        error_detail: Human-readable detail about the failure

    Examples:
        result = PreflightResult.ok(100)
        assert result.is_valid

        result = PreflightResult.with_error(FillErrorReason.BELOW_MINIMUM)
        assert not result.is_valid
    """

    maker_fill_amount: int | None
    error: FillErrorReason | None = None
    error_detail: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def raise_for_error(self) -> None:
        """Raise PreflightFailed if validation failed."""
        if self.error is not None:
            raise PreflightFailed(self.error, self.error_detail)

    @classmethod
    def ok(cls, maker_fill_amount: int) -> PreflightResult:
        return cls(maker_fill_amount=maker_fill_amount)

    @classmethod
    def with_error(cls, error: FillErrorReason, detail: str | None = None) -> PreflightResult:
        return cls(maker_fill_amount=None, error=error, error_detail=detail)


class FillPreflightValidator:
    """Single pass/fail decision on whether a fill may be submitted.

    Attributes:
        domain: EIP-712 domain offers are signed under
        verifier: Signature checker (EIP-712 recovery by default)
        calculator: Fill amount calculator
    """

    def __init__(
        self,
        domain: EIP712Domain,
        verifier: OfferSignatureVerifier | None = None,
        calculator: FillCalculator | None = None,
    ):
        self.domain = domain
        self.verifier = verifier or SignatureVerifier()
        self.calculator = calculator or FillCalculator()

    def validate(
        self,
        offer: Offer,
        state: OfferState,
        signature: Signature,
        requester: str,
        taker_fill_amount: int,
        taker_balance: int,
        maker_balance: int,
    ) -> PreflightResult:
        """Run every check in settlement order, stopping at the first failure.

        Args:
            offer: Offer to fill
            state: Fresh state snapshot from the settlement layer
            signature: Maker's signature over the offer
            requester: Account that will submit the fill (the taker)
            taker_fill_amount: Requested taker-side amount
            taker_balance: Taker's balance of the token it pays in
            maker_balance: Maker's balance of the token it pays in (collateral,
                or its own position token for remove-liquidity offers)

        Returns:
            PreflightResult with the maker fill amount, or the failure reason
        """
        try:
            maker_fill_amount = self._run_checks(
                offer,
                state,
                signature,
                requester,
                taker_fill_amount,
                taker_balance,
                maker_balance,
            )
        except FillError as e:
            logger.info(
                "preflight_failed",
                kind=offer.kind.value,
                reason=e.reason.value,
                detail=e.detail,
                taker_fill_amount=taker_fill_amount,
            )
            return PreflightResult.with_error(e.reason, e.detail)
        except AmountError as e:
            logger.warning(
                "preflight_overflow",
                kind=offer.kind.value,
                taker_fill_amount=taker_fill_amount,
                error=str(e),
            )
            return PreflightResult.with_error(FillErrorReason.OVERFLOW, str(e))

        logger.debug(
            "preflight_passed",
            kind=offer.kind.value,
            taker_fill_amount=taker_fill_amount,
            maker_fill_amount=maker_fill_amount,
        )
        return PreflightResult.ok(maker_fill_amount)

    def _run_checks(
        self,
        offer: Offer,
        state: OfferState,
        signature: Signature,
        requester: str,
        taker_fill_amount: int,
        taker_balance: int,
        maker_balance: int,
    ) -> int:
        # 1. Offer must be fillable
        status_reason = STATUS_REASONS.get(state.status)
        if status_reason is not None:
            raise FillError(status_reason, status_message(status_reason))

        # 2. Structural parameters, as judged by the settlement layer
        if not state.is_valid_input_params:
            raise FillError(FillErrorReason.INVALID_PARAMETERS, "Invalid offer parameters")

        # 3. Remaining capacity
        self.calculator.check_fillable(state, taker_fill_amount)

        # 4. Maker signed this offer
        self.verifier.verify(self.domain, offer, signature)

        # 5. Offer may be reserved for a specific taker
        if not is_valid_address(requester):
            raise FillError(
                FillErrorReason.UNAUTHORIZED, f"Invalid requester address {requester!r}"
            )
        if not offer.is_fillable_by(requester):
            raise FillError(
                FillErrorReason.UNAUTHORIZED,
                f"Offer is reserved for {offer.taker}, not {requester}",
            )

        # 6. Minimum applies to the first fill only
        self.calculator.check_minimum(offer, state, taker_fill_amount)

        maker_fill_amount = self.calculator.maker_fill_amount(offer, taker_fill_amount)
        maker_payment = offer.maker_payment(taker_fill_amount, maker_fill_amount)

        # 7./8. Both sides can pay
        if taker_balance < taker_fill_amount:
            raise FillError(
                FillErrorReason.INSUFFICIENT_TAKER_BALANCE,
                f"Taker balance {taker_balance} < {taker_fill_amount}",
            )
        if maker_balance < maker_payment:
            raise FillError(
                FillErrorReason.INSUFFICIENT_MAKER_BALANCE,
                f"Maker balance {maker_balance} < {maker_payment}",
            )

        return maker_fill_amount


__all__ = [
    "FillPreflightValidator",
    "OfferSignatureVerifier",
    "PreflightResult",
    "STATUS_REASONS",
]
