# src/experiments/config.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from clients.base import LATEST_CHECKPOINT_SLOT, DestinationChainClient, SourceChainClient
from core.errors import ChainClientError, OracleUnavailable
from core.models import ZERO_HASH, BlockLookup, SourceBlock, SyncCheckpoint


def _block_hash(chain_id: int, height: int, fork: int) -> str:
    digest = hashlib.sha256(f"{chain_id}:{height}:{fork}".encode("utf-8")).hexdigest()
    return "0x" + digest


@dataclass
class SimulationChain:
    """
    Minimal in-memory source chain used in scenarios and tests.

    This is *not* a consensus model. It only records:
        - _blocks:     hash -> SourceBlock for every block the node knows
        - _canonical:  hashes of the canonical chain, index == height

    A reorg moves the dropped blocks out of the canonical chain. With
    `forget=True` the node no longer knows them at all; otherwise it still
    returns them, with a null number.
    """

    chain_id: int
    _blocks: Dict[str, SourceBlock] = field(default_factory=dict)
    _canonical: List[str] = field(default_factory=list)
    _fork: int = 0

    def mine(self, count: int = 1) -> List[SourceBlock]:
        """Append `count` canonical blocks and return them."""
        mined = []
        for _ in range(count):
            height = len(self._canonical)
            parent = self._canonical[-1] if self._canonical else None
            block = SourceBlock(
                hash=_block_hash(self.chain_id, height, self._fork),
                number=height,
                parent_hash=parent,
                timestamp=1_700_000_000 + 12 * height,
            )
            self._blocks[block.hash] = block
            self._canonical.append(block.hash)
            mined.append(block)
        return mined

    def add_pending_block(self) -> SourceBlock:
        """A block the node has seen but not placed at a height yet."""
        block = SourceBlock(hash=_block_hash(self.chain_id, -1, len(self._blocks)), number=None)
        self._blocks[block.hash] = block
        return block

    def reorg(self, depth: int, *, forget: bool = False) -> List[SourceBlock]:
        """Drop the last `depth` canonical blocks and return them."""
        if depth > len(self._canonical):
            raise ValueError(f"reorg depth {depth} exceeds chain length {len(self._canonical)}")
        dropped_hashes = self._canonical[len(self._canonical) - depth:]
        del self._canonical[len(self._canonical) - depth:]
        self._fork += 1

        dropped = []
        for h in dropped_hashes:
            block = self._blocks.pop(h)
            dropped.append(block)
            if not forget:
                self._blocks[h] = block.model_copy(update={"number": None})
        return dropped

    def block_at(self, height: int) -> SourceBlock:
        return self._blocks[self._canonical[height]]

    def get_block(self, block_hash: str) -> Optional[SourceBlock]:
        return self._blocks.get(block_hash.lower())

    @property
    def tip(self) -> Optional[SourceBlock]:
        if not self._canonical:
            return None
        return self._blocks[self._canonical[-1]]


@dataclass
class SimulatedSyncOracle:
    """
    Cross-chain sync contract deployed on a destination chain.

    Slot 0 holds the latest snippet; older snippets are kept by remote
    block id so tests can inspect history. `fail_with` makes every read
    raise, to simulate an unreachable node or a reverting call.
    """

    address: str
    src_chain_id: int
    _latest: Optional[SyncCheckpoint] = None
    _history: Dict[int, SyncCheckpoint] = field(default_factory=dict)
    fail_with: Optional[Exception] = None

    def sync_to(self, block: SourceBlock) -> SyncCheckpoint:
        checkpoint = SyncCheckpoint(
            remote_block_id=block.number,
            block_hash=block.hash,
            signal_root="0x" + hashlib.sha256(block.hash.encode("utf-8")).hexdigest(),
        )
        self._latest = checkpoint
        if block.number is not None:
            self._history[block.number] = checkpoint
        return checkpoint

    def snippet(self, slot: int) -> SyncCheckpoint:
        if slot == LATEST_CHECKPOINT_SLOT:
            return self._latest or SyncCheckpoint(remote_block_id=0, block_hash=ZERO_HASH)
        return self._history.get(slot) or SyncCheckpoint(remote_block_id=0, block_hash=ZERO_HASH)


class InMemoryDestinationChainClient(DestinationChainClient):
    """Destination chain holding SimulatedSyncOracle contracts by address."""

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        self.oracles: Dict[str, SimulatedSyncOracle] = {}
        self.calls = 0

    def deploy(self, oracle: SimulatedSyncOracle) -> SimulatedSyncOracle:
        self.oracles[oracle.address.lower()] = oracle
        return oracle

    async def read_synced_checkpoint(
        self,
        oracle_address: str,
        slot: int = LATEST_CHECKPOINT_SLOT,
    ) -> SyncCheckpoint:
        self.calls += 1
        oracle = self.oracles.get(oracle_address.lower())
        if oracle is None:
            raise OracleUnavailable(
                f"no contract at {oracle_address} on chain {self.chain_id}", chain_id=self.chain_id
            )
        if oracle.fail_with is not None:
            raise OracleUnavailable(str(oracle.fail_with), chain_id=self.chain_id) from oracle.fail_with
        return oracle.snippet(slot)


class InMemorySourceChainClient(SourceChainClient):
    """Source chain node backed by a SimulationChain."""

    def __init__(self, chain: SimulationChain) -> None:
        self.chain = chain
        self.chain_id = chain.chain_id
        self.calls = 0
        self.fail_with: Optional[Exception] = None

    async def get_block_by_hash(self, block_hash: str) -> BlockLookup:
        self.calls += 1
        if self.fail_with is not None:
            raise ChainClientError(str(self.fail_with), chain_id=self.chain_id) from self.fail_with
        block = self.chain.get_block(block_hash)
        if block is None:
            return BlockLookup.not_found(block_hash)
        return BlockLookup.of(block)
