"""Pytest configuration and fixtures."""

import pytest

from offerfill.models.offer import EIP712Domain, OfferCreateContingentPool
from tests.helpers import MAKER, StubVerifier, make_create_offer, make_domain


@pytest.fixture
def domain() -> EIP712Domain:
    """EIP-712 domain of the test settlement contract."""
    return make_domain()


@pytest.fixture
def offer() -> OfferCreateContingentPool:
    """Reference create offer: 100 maker / 50 taker, minimum 10, open to anyone."""
    return make_create_offer()


@pytest.fixture
def maker_verifier() -> StubVerifier:
    """Verifier that accepts offers made by MAKER."""
    return StubVerifier(MAKER)
