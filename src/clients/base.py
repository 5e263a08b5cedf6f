from __future__ import annotations

from abc import ABC, abstractmethod

from core.models import BlockLookup, SyncCheckpoint

# Slot 0 of the sync oracle always holds the most recent snippet.
LATEST_CHECKPOINT_SLOT = 0


class DestinationChainClient(ABC):
    """
    Read-only handle on a destination chain, used to query its cross-chain
    sync oracle.

    Implementations must:
      - validate the raw contract answer into a SyncCheckpoint before
        returning it;
      - raise OracleUnavailable (or its subclass MalformedCheckpoint) for
        transport errors, reverts and unusable answers.
    """

    chain_id: int

    @abstractmethod
    async def read_synced_checkpoint(
        self,
        oracle_address: str,
        slot: int = LATEST_CHECKPOINT_SLOT,
    ) -> SyncCheckpoint:
        raise NotImplementedError


class SourceChainClient(ABC):
    """
    Read-only handle on a source chain, used to resolve block hashes.

    An unknown hash is answered with BlockLookup.not_found(...). Only
    transport-level failures raise, as ChainClientError.
    """

    chain_id: int

    @abstractmethod
    async def get_block_by_hash(self, block_hash: str) -> BlockLookup:
        raise NotImplementedError
