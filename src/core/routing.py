from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Tuple

from core.config import BridgeSyncConfig, check_address
from core.errors import RouteNotConfigured

RouteKey = Tuple[int, int]  # (dest_chain_id, src_chain_id)


class RoutingTable(ABC):
    """
    Read-only view of where each destination chain keeps its cross-chain
    sync oracle for a given source chain.

    The table is populated before evaluation starts and is static for the
    process lifetime. A missing pair is a configuration error, reported as
    RouteNotConfigured.
    """

    @abstractmethod
    def lookup(self, dest_chain_id: int, src_chain_id: int) -> str:
        """
        Return the oracle address on `dest_chain_id` that tracks `src_chain_id`.
        """
        raise NotImplementedError


class InMemoryRoutingTable(RoutingTable):
    """
    Dictionary-backed routing table.

    Internal structure:
        _routes: (dest_chain_id, src_chain_id) -> cross_chain_sync_address
    """

    def __init__(self, routes: Optional[Mapping[RouteKey, str]] = None) -> None:
        self._routes: Dict[RouteKey, str] = {}
        for (dest, src), address in (routes or {}).items():
            self.register(dest, src, address)

    def register(self, dest_chain_id: int, src_chain_id: int, address: str) -> None:
        self._routes[(dest_chain_id, src_chain_id)] = check_address(address)

    def lookup(self, dest_chain_id: int, src_chain_id: int) -> str:
        try:
            return self._routes[(dest_chain_id, src_chain_id)]
        except KeyError:
            raise RouteNotConfigured(dest_chain_id, src_chain_id) from None

    def __contains__(self, key: RouteKey) -> bool:
        return key in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    @classmethod
    def from_config(cls, cfg: BridgeSyncConfig) -> "InMemoryRoutingTable":
        table = cls()
        for route in cfg.routes:
            table.register(route.dest_chain_id, route.src_chain_id, route.cross_chain_sync_address)
        return table
