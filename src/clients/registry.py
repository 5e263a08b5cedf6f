from __future__ import annotations

from typing import Dict, Optional

from clients.base import DestinationChainClient, SourceChainClient
from clients.web3_client import Web3DestinationChainClient, Web3SourceChainClient, make_web3
from core.config import BridgeSyncConfig
from core.errors import UnknownChain


class ChainClientRegistry:
    """
    Per-chain client handles, keyed by chain_id.

    A chain usually plays both roles (it is the source for one route and the
    destination for the reverse route), so the two maps are kept separately
    and may hold the same underlying connection.
    """

    def __init__(self) -> None:
        self._destinations: Dict[int, DestinationChainClient] = {}
        self._sources: Dict[int, SourceChainClient] = {}

    def register_destination(self, client: DestinationChainClient) -> None:
        self._destinations[client.chain_id] = client

    def register_source(self, client: SourceChainClient) -> None:
        self._sources[client.chain_id] = client

    def destination(self, chain_id: int) -> DestinationChainClient:
        client: Optional[DestinationChainClient] = self._destinations.get(chain_id)
        if client is None:
            raise UnknownChain(chain_id, "destination")
        return client

    def source(self, chain_id: int) -> SourceChainClient:
        client: Optional[SourceChainClient] = self._sources.get(chain_id)
        if client is None:
            raise UnknownChain(chain_id, "source")
        return client

    @classmethod
    def from_config(cls, cfg: BridgeSyncConfig) -> "ChainClientRegistry":
        """
        Build web3-backed clients for every configured chain endpoint.
        """
        registry = cls()
        for endpoint in cfg.chains:
            w3 = make_web3(endpoint)
            registry.register_destination(
                Web3DestinationChainClient(endpoint.chain_id, w3, timeout=endpoint.request_timeout)
            )
            registry.register_source(
                Web3SourceChainClient(endpoint.chain_id, w3, timeout=endpoint.request_timeout)
            )
        return registry
