"""Engine configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from offerfill.constants import (
    ALLOWANCE_BUFFER,
    DEFAULT_DOMAIN_NAME,
    DEFAULT_DOMAIN_VERSION,
    DEFAULT_RELAY_TIMEOUT_SECONDS,
    DEFAULT_TX_TIMEOUT_SECONDS,
)
from offerfill.models.offer import EIP712Domain

ENV_PREFIX = "OFFERFILL_"


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the fill engine.

    Attributes:
        rpc_url: JSON-RPC endpoint of the chain
        settlement_address: Settlement contract (EIP-712 verifying contract
            and allowance spender)
        chain_id: Chain the settlement contract lives on
        relay_url: Base URL of the offer relay API
        domain_name: EIP-712 domain name
        domain_version: EIP-712 domain version
        allowance_buffer: Base units approved on top of a required allowance
        tx_timeout_seconds: Wait for approval / fill transactions; None waits
            indefinitely
        relay_timeout_seconds: HTTP timeout for relay requests
    """

    rpc_url: str | None = None
    settlement_address: str | None = None
    chain_id: int | None = None
    relay_url: str | None = None

    domain_name: str = DEFAULT_DOMAIN_NAME
    domain_version: str = DEFAULT_DOMAIN_VERSION

    allowance_buffer: int = ALLOWANCE_BUFFER
    tx_timeout_seconds: float | None = DEFAULT_TX_TIMEOUT_SECONDS
    relay_timeout_seconds: float = DEFAULT_RELAY_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.allowance_buffer < 0:
            raise ValueError(f"allowance_buffer must be non-negative, got {self.allowance_buffer}")

    def domain(self) -> EIP712Domain:
        """EIP-712 domain for this chain and settlement contract.

        Raises:
            ValueError: If chain_id or settlement_address is not configured
        """
        if self.chain_id is None or self.settlement_address is None:
            raise ValueError("chain_id and settlement_address are required to build the domain")
        return EIP712Domain(
            name=self.domain_name,
            version=self.domain_version,
            chain_id=self.chain_id,
            verifying_contract=self.settlement_address,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from OFFERFILL_* environment variables.

        Configuration via environment variables:
        - OFFERFILL_RPC_URL
        - OFFERFILL_SETTLEMENT_ADDRESS
        - OFFERFILL_CHAIN_ID
        - OFFERFILL_RELAY_URL
        - OFFERFILL_DOMAIN_NAME (default: "DIVA Protocol")
        - OFFERFILL_DOMAIN_VERSION (default: "1")
        - OFFERFILL_ALLOWANCE_BUFFER (default: 1)
        - OFFERFILL_TX_TIMEOUT (seconds, default: 120; "none" waits forever)
        - OFFERFILL_RELAY_TIMEOUT (seconds, default: 10)
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        chain_id = get("CHAIN_ID")
        tx_timeout = get("TX_TIMEOUT")
        relay_timeout = get("RELAY_TIMEOUT")
        buffer = get("ALLOWANCE_BUFFER")

        return cls(
            rpc_url=get("RPC_URL"),
            settlement_address=get("SETTLEMENT_ADDRESS"),
            chain_id=int(chain_id) if chain_id is not None else None,
            relay_url=get("RELAY_URL"),
            domain_name=get("DOMAIN_NAME") or DEFAULT_DOMAIN_NAME,
            domain_version=get("DOMAIN_VERSION") or DEFAULT_DOMAIN_VERSION,
            allowance_buffer=int(buffer) if buffer is not None else ALLOWANCE_BUFFER,
            tx_timeout_seconds=_parse_timeout(tx_timeout, DEFAULT_TX_TIMEOUT_SECONDS),
            relay_timeout_seconds=float(relay_timeout)
            if relay_timeout is not None
            else DEFAULT_RELAY_TIMEOUT_SECONDS,
        )


def _parse_timeout(value: str | None, default: float) -> float | None:
    if value is None:
        return default
    if value.lower() in ("none", "0"):
        return None
    return float(value)


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
