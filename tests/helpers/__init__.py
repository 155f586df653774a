"""Test helpers module for shared test utilities.

- constants: Accounts, keys and token addresses
- factories: Offer, state, pool and domain factory functions
- fakes: In-memory settlement and token collaborators
"""

from tests.helpers.constants import (
    COLLATERAL,
    LONG_TOKEN,
    MAKER,
    MAKER_KEY,
    OTHER,
    POOL_ID,
    SETTLEMENT,
    SHORT_TOKEN,
    TAKER,
    TAKER_KEY,
)
from tests.helpers.factories import (
    make_add_offer,
    make_create_offer,
    make_domain,
    make_pool,
    make_remove_offer,
    make_signature,
    make_state,
)
from tests.helpers.fakes import FakeSettlementClient, FakeTokenClient, StubVerifier

__all__ = [
    # Constants
    "COLLATERAL",
    "LONG_TOKEN",
    "MAKER",
    "MAKER_KEY",
    "OTHER",
    "POOL_ID",
    "SETTLEMENT",
    "SHORT_TOKEN",
    "TAKER",
    "TAKER_KEY",
    # Factories
    "make_create_offer",
    "make_add_offer",
    "make_remove_offer",
    "make_state",
    "make_domain",
    "make_pool",
    "make_signature",
    # Fakes
    "FakeSettlementClient",
    "FakeTokenClient",
    "StubVerifier",
]
