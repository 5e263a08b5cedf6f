"""Web3 adapters for the two chain-client roles.

Both adapters wrap a shared ``AsyncWeb3`` connection per chain. Every RPC call
is bounded by the endpoint's request timeout, and any failure below this
boundary is re-raised as a ``ChainClientError`` subclass so callers never see
web3, aiohttp or JSON-RPC exception types.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from web3 import AsyncWeb3
from web3.exceptions import BlockNotFound
from web3.providers import AsyncHTTPProvider

from clients.base import LATEST_CHECKPOINT_SLOT, DestinationChainClient, SourceChainClient
from core.config import ChainEndpoint
from core.errors import ChainClientError, MalformedCheckpoint, OracleUnavailable
from core.models import BlockLookup, SourceBlock, SyncCheckpoint

logger = logging.getLogger(__name__)

#: Read surface of the cross-chain sync contract
CROSS_CHAIN_SYNC_ABI = [
    {
        "type": "function",
        "name": "getSyncedSnippet",
        "stateMutability": "view",
        "inputs": [{"name": "blockId", "type": "uint64"}],
        "outputs": [
            {
                "name": "snippet",
                "type": "tuple",
                "components": [
                    {"name": "remoteBlockId", "type": "uint64"},
                    {"name": "blockHash", "type": "bytes32"},
                    {"name": "signalRoot", "type": "bytes32"},
                ],
            }
        ],
    },
]


def make_web3(endpoint: ChainEndpoint) -> AsyncWeb3:
    """Create an AsyncWeb3 connection for a configured chain endpoint."""
    provider = AsyncHTTPProvider(
        endpoint.rpc_url,
        request_kwargs={"timeout": endpoint.request_timeout},
    )
    return AsyncWeb3(provider)


class Web3DestinationChainClient(DestinationChainClient):
    """Reads ``getSyncedSnippet`` from the sync oracle on a destination chain."""

    def __init__(self, chain_id: int, w3: AsyncWeb3, *, timeout: float) -> None:
        self.chain_id = chain_id
        self.w3 = w3
        self.timeout = timeout

    async def read_synced_checkpoint(
        self,
        oracle_address: str,
        slot: int = LATEST_CHECKPOINT_SLOT,
    ) -> SyncCheckpoint:
        try:
            contract = self.w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(oracle_address),
                abi=CROSS_CHAIN_SYNC_ABI,
            )
            raw: Any = await asyncio.wait_for(
                contract.functions.getSyncedSnippet(slot).call(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise OracleUnavailable(
                f"getSyncedSnippet({slot}) on {oracle_address} timed out after {self.timeout}s",
                chain_id=self.chain_id,
            ) from exc
        except Exception as exc:
            raise OracleUnavailable(
                f"getSyncedSnippet({slot}) on {oracle_address} failed: {exc}",
                chain_id=self.chain_id,
            ) from exc

        try:
            return SyncCheckpoint.from_call_result(raw)
        except MalformedCheckpoint as exc:
            exc.chain_id = self.chain_id
            raise


class Web3SourceChainClient(SourceChainClient):
    """Resolves block hashes through ``eth_getBlockByHash`` on a source chain."""

    def __init__(self, chain_id: int, w3: AsyncWeb3, *, timeout: float) -> None:
        self.chain_id = chain_id
        self.w3 = w3
        self.timeout = timeout

    async def get_block_by_hash(self, block_hash: str) -> BlockLookup:
        try:
            block = await asyncio.wait_for(self.w3.eth.get_block(block_hash), timeout=self.timeout)
        except BlockNotFound:
            return BlockLookup.not_found(block_hash)
        except asyncio.TimeoutError as exc:
            raise ChainClientError(
                f"eth_getBlockByHash({block_hash}) timed out after {self.timeout}s",
                chain_id=self.chain_id,
            ) from exc
        except Exception as exc:
            raise ChainClientError(
                f"eth_getBlockByHash({block_hash}) failed: {exc}",
                chain_id=self.chain_id,
            ) from exc

        if block is None:
            return BlockLookup.not_found(block_hash)

        return BlockLookup.of(
            SourceBlock(
                hash=block.get("hash") or block_hash,
                number=block.get("number"),
                parent_hash=block.get("parentHash"),
                timestamp=block.get("timestamp"),
            )
        )
