"""Signed offer fill engine."""

from offerfill.calculator import FillAmounts, FillCalculator
from offerfill.errors import FillError, FillErrorReason
from offerfill.executor import FillExecutor
from offerfill.preflight import FillPreflightValidator, PreflightResult
from offerfill.signing import SignatureVerifier

__version__ = "0.1.0"
__all__ = [
    "FillAmounts",
    "FillCalculator",
    "FillError",
    "FillErrorReason",
    "FillExecutor",
    "FillPreflightValidator",
    "PreflightResult",
    "SignatureVerifier",
    "__version__",
]
