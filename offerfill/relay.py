"""HTTP client for the offer relay API.

Makers post signed offers to the relay; takers fetch them by typed offer
hash. Payloads are the offer's camelCase fields plus `chainId`,
`verifyingContract`, `signature` and `offerHash`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from offerfill.config import EngineConfig
from offerfill.constants import (
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    DEFAULT_RELAY_TIMEOUT_SECONDS,
)
from offerfill.errors import RelayError
from offerfill.models.offer import EIP712Domain, Offer, OfferKind, Signature, parse_offer

logger = structlog.get_logger()

RELAY_ROUTES: dict[OfferKind, str] = {
    OfferKind.CREATE_POOL: "create_contingent_pool",
    OfferKind.ADD_LIQUIDITY: "add_liquidity",
    OfferKind.REMOVE_LIQUIDITY: "remove_liquidity",
}


@dataclass(frozen=True)
class RelayedOffer:
    """A signed offer as stored by the relay."""

    offer: Offer
    signature: Signature
    domain: EIP712Domain
    offer_hash: str

    def to_payload(self) -> dict[str, Any]:
        """JSON body accepted by the relay's POST endpoint."""
        payload = self.offer.model_dump(mode="json", by_alias=True)
        payload.update(
            chainId=self.domain.chain_id,
            verifyingContract=self.domain.verifying_contract,
            signature=self.signature.model_dump(mode="json"),
            offerHash=self.offer_hash,
        )
        return payload

    @classmethod
    def from_payload(
        cls,
        kind: OfferKind,
        data: dict[str, Any],
        domain_name: str = DEFAULT_DOMAIN_NAME,
        domain_version: str = DEFAULT_DOMAIN_VERSION,
    ) -> RelayedOffer:
        """Decode a relay payload.

        Raises:
            RelayError: If required fields are missing or malformed
        """
        try:
            raw_signature = data["signature"]
            signature = (
                Signature.from_bytes(raw_signature)
                if isinstance(raw_signature, str)
                else Signature.model_validate(raw_signature)
            )
            domain = EIP712Domain(
                name=domain_name,
                version=domain_version,
                chainId=int(data["chainId"]),
                verifyingContract=data["verifyingContract"],
            )
            return cls(
                offer=parse_offer(kind, data),
                signature=signature,
                domain=domain,
                offer_hash=data["offerHash"],
            )
        except (KeyError, ValueError, ValidationError) as e:
            raise RelayError(f"Malformed {kind.value} offer payload: {e}") from e


class OfferRelayClient:
    """Client for the relay API.

    Usage:
        with OfferRelayClient("https://relay.example") as relay:
            relayed = relay.get_offer(OfferKind.CREATE_POOL, offer_hash)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_RELAY_TIMEOUT_SECONDS,
        domain_name: str = DEFAULT_DOMAIN_NAME,
        domain_version: str = DEFAULT_DOMAIN_VERSION,
        client: httpx.Client | None = None,
    ):
        """Initialize the relay client.

        Args:
            base_url: Relay API root URL
            timeout: Request timeout in seconds
            domain_name: EIP-712 domain name for decoded offers
            domain_version: EIP-712 domain version for decoded offers
            client: Pre-built httpx client (tests inject a mock transport)
        """
        self.domain_name = domain_name
        self.domain_version = domain_version
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    @classmethod
    def from_config(cls, config: EngineConfig) -> OfferRelayClient:
        """Build a client for the configured relay.

        Raises:
            ValueError: If relay_url is not configured
        """
        if config.relay_url is None:
            raise ValueError("relay_url is required to build a relay client")
        return cls(
            config.relay_url,
            timeout=config.relay_timeout_seconds,
            domain_name=config.domain_name,
            domain_version=config.domain_version,
        )

    def __enter__(self) -> OfferRelayClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_offer(self, kind: OfferKind, offer_hash: str) -> RelayedOffer:
        """Fetch a signed offer by its typed offer hash.

        Raises:
            RelayError: On HTTP errors or a malformed payload
        """
        data = self._request("GET", f"/{RELAY_ROUTES[kind]}/{offer_hash}")
        if not isinstance(data, dict):
            raise RelayError(f"Expected an object for offer {offer_hash}, got {type(data).__name__}")
        relayed = RelayedOffer.from_payload(kind, data, self.domain_name, self.domain_version)
        logger.debug("relay_offer_fetched", kind=kind.value, offer_hash=offer_hash)
        return relayed

    def post_offer(self, relayed: RelayedOffer) -> None:
        """Publish a signed offer.

        Raises:
            RelayError: On HTTP errors
        """
        kind = relayed.offer.kind
        self._request("POST", f"/{RELAY_ROUTES[kind]}", json=relayed.to_payload())
        logger.info("relay_offer_posted", kind=kind.value, offer_hash=relayed.offer_hash)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("relay_request_failed", method=method, path=path, error=str(e))
            raise RelayError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RelayError(f"{method} {path} returned invalid JSON") from e


__all__ = ["OfferRelayClient", "RELAY_ROUTES", "RelayedOffer"]
