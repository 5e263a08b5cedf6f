"""Tests for configuration loading, routing table and client registry."""
import json

import pytest
from pydantic import ValidationError

from clients.registry import ChainClientRegistry
from clients.web3_client import Web3DestinationChainClient, Web3SourceChainClient
from core.config import BridgeSyncConfig, load_config
from core.errors import ConfigurationError, RouteNotConfigured, UnknownChain
from core.routing import InMemoryRoutingTable

L1_SYNC = "0x1000777700000000000000000000000000000001"
L2_SYNC = "0x1670010000000000000000000000000000000001"

CONFIG = {
    "chains": [
        {"chain_id": 31336, "rpc_url": "http://localhost:8545", "name": "L1"},
        {"chain_id": 167001, "rpc_url": "http://localhost:8547", "request_timeout": 3},
    ],
    "routes": [
        {"dest_chain_id": 167001, "src_chain_id": 31336, "cross_chain_sync_address": L2_SYNC},
        {"dest_chain_id": 31336, "src_chain_id": 167001, "cross_chain_sync_address": L1_SYNC},
    ],
}

CONFIG_YAML = f"""
chains:
  - chain_id: 31336
    rpc_url: http://localhost:8545
  - chain_id: 167001
    rpc_url: http://localhost:8547
routes:
  - dest_chain_id: 167001
    src_chain_id: 31336
    cross_chain_sync_address: "{L2_SYNC}"
"""


class TestBridgeSyncConfig:
    """Validation of the static configuration."""

    def test_valid(self):
        cfg = BridgeSyncConfig.model_validate(CONFIG)
        assert cfg.chain(167001).request_timeout == 3
        assert cfg.chain(31336).request_timeout == 10.0

    def test_unknown_chain_lookup(self):
        with pytest.raises(ConfigurationError):
            BridgeSyncConfig.model_validate(CONFIG).chain(1)

    def test_duplicate_chain(self):
        data = dict(CONFIG, chains=CONFIG["chains"] + [CONFIG["chains"][0]])
        with pytest.raises(ValidationError, match="duplicate chain_id"):
            BridgeSyncConfig.model_validate(data)

    def test_duplicate_route(self):
        data = dict(CONFIG, routes=CONFIG["routes"] + [CONFIG["routes"][0]])
        with pytest.raises(ValidationError, match="duplicate route"):
            BridgeSyncConfig.model_validate(data)

    def test_route_with_undeclared_chain(self):
        data = dict(CONFIG, chains=CONFIG["chains"][:1])
        with pytest.raises(ValidationError, match="undeclared chain"):
            BridgeSyncConfig.model_validate(data)

    @pytest.mark.parametrize("address", ["0x1234", "1000777700000000000000000000000000000001xx", "0x" + "zz" * 20])
    def test_bad_address(self, address):
        data = dict(CONFIG, routes=[dict(CONFIG["routes"][0], cross_chain_sync_address=address)])
        with pytest.raises(ValidationError):
            BridgeSyncConfig.model_validate(data)

    def test_non_positive_timeout(self):
        data = dict(CONFIG, chains=[dict(CONFIG["chains"][0], request_timeout=0), CONFIG["chains"][1]])
        with pytest.raises(ValidationError):
            BridgeSyncConfig.model_validate(data)


class TestLoadConfig:
    """Reading configuration files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "bridge.yaml"
        path.write_text(CONFIG_YAML)

        cfg = load_config(path)

        assert [c.chain_id for c in cfg.chains] == [31336, 167001]
        assert cfg.routes[0].cross_chain_sync_address == L2_SYNC

    def test_json(self, tmp_path):
        path = tmp_path / "bridge.json"
        path.write_text(json.dumps(CONFIG))
        assert len(load_config(str(path)).routes) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.yaml")


class TestRoutingTable:
    """Ordered-pair lookups of sync oracle addresses."""

    def test_from_config(self):
        table = InMemoryRoutingTable.from_config(BridgeSyncConfig.model_validate(CONFIG))
        assert len(table) == 2
        assert table.lookup(167001, 31336) == L2_SYNC
        assert table.lookup(31336, 167001) == L1_SYNC

    def test_missing_pair(self):
        table = InMemoryRoutingTable({(167001, 31336): L2_SYNC})
        assert (167001, 31336) in table
        with pytest.raises(RouteNotConfigured) as excinfo:
            table.lookup(31336, 167001)
        assert isinstance(excinfo.value, LookupError)
        assert (excinfo.value.dest_chain_id, excinfo.value.src_chain_id) == (31336, 167001)

    def test_rejects_bad_address(self):
        with pytest.raises(ValueError):
            InMemoryRoutingTable({(1, 2): "not-an-address"})


class TestChainClientRegistry:
    """Per-chain client handles."""

    def test_from_config_builds_web3_clients(self):
        registry = ChainClientRegistry.from_config(BridgeSyncConfig.model_validate(CONFIG))

        dest = registry.destination(167001)
        src = registry.source(31336)

        assert isinstance(dest, Web3DestinationChainClient)
        assert isinstance(src, Web3SourceChainClient)
        assert dest.timeout == 3
        assert src.timeout == 10.0

    def test_unknown_chain(self):
        registry = ChainClientRegistry()
        with pytest.raises(UnknownChain, match="destination"):
            registry.destination(5)
        with pytest.raises(UnknownChain, match="source"):
            registry.source(5)
