"""Tests for engine configuration."""

import pytest

from offerfill.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from offerfill.constants import DEFAULT_TX_TIMEOUT_SECONDS
from tests.helpers import SETTLEMENT


class TestEngineConfig:
    def test_defaults(self):
        assert DEFAULT_ENGINE_CONFIG.domain_name == "DIVA Protocol"
        assert DEFAULT_ENGINE_CONFIG.domain_version == "1"
        assert DEFAULT_ENGINE_CONFIG.allowance_buffer == 1
        assert DEFAULT_ENGINE_CONFIG.tx_timeout_seconds == DEFAULT_TX_TIMEOUT_SECONDS

    def test_domain(self):
        config = EngineConfig(chain_id=137, settlement_address=SETTLEMENT)
        domain = config.domain()
        assert domain.chain_id == 137
        assert domain.verifying_contract == SETTLEMENT
        assert domain.name == "DIVA Protocol"

    def test_domain_requires_chain(self):
        with pytest.raises(ValueError, match="required"):
            EngineConfig(settlement_address=SETTLEMENT).domain()

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(allowance_buffer=-1)


class TestFromEnv:
    def test_reads_prefixed_variables(self):
        config = EngineConfig.from_env(
            {
                "OFFERFILL_RPC_URL": "http://localhost:8545",
                "OFFERFILL_SETTLEMENT_ADDRESS": SETTLEMENT,
                "OFFERFILL_CHAIN_ID": "80001",
                "OFFERFILL_RELAY_URL": "https://relay.test",
                "OFFERFILL_ALLOWANCE_BUFFER": "0",
                "OFFERFILL_TX_TIMEOUT": "30",
                "OFFERFILL_RELAY_TIMEOUT": "2.5",
            }
        )
        assert config.rpc_url == "http://localhost:8545"
        assert config.chain_id == 80001
        assert config.allowance_buffer == 0
        assert config.tx_timeout_seconds == 30.0
        assert config.relay_timeout_seconds == 2.5

    def test_empty_environment_uses_defaults(self):
        config = EngineConfig.from_env({})
        assert config.rpc_url is None
        assert config.chain_id is None
        assert config.tx_timeout_seconds == DEFAULT_TX_TIMEOUT_SECONDS

    @pytest.mark.parametrize("value", ["none", "None", "0"])
    def test_tx_timeout_disabled(self, value):
        assert EngineConfig.from_env({"OFFERFILL_TX_TIMEOUT": value}).tx_timeout_seconds is None
