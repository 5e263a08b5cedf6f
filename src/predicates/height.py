from __future__ import annotations

import logging

from clients.registry import ChainClientRegistry
from core.enums import ProcessabilityOutcome, StepName
from core.errors import ChainClientError
from predicates.base import EvaluationStep, StepResult

logger = logging.getLogger(__name__)


class HeightComparator(EvaluationStep):
    """
    Resolve the checkpoint hash on the source chain and compare heights.

    The destination chain may act on a message only once it has observed a
    source-chain history at least as long as the one the receipt was minted
    against:

        receipt_height <= resolved_height   (inclusive)

    An unknown hash, a block without a number, or a transport failure all
    give False. None of these are raised to the caller.
    """

    name = StepName.HEIGHT
    description = "Checkpoint block height on the source chain is >= the receipt height."

    def __init__(self, clients: ChainClientRegistry) -> None:
        self.clients = clients

    async def is_synced(self, src_chain_id: int, block_hash: str, receipt_height: int) -> bool:
        result = await self.compare(src_chain_id, block_hash, receipt_height)
        return bool(result.decision)

    async def compare(self, src_chain_id: int, block_hash: str, receipt_height: int) -> StepResult:
        client = self.clients.source(src_chain_id)
        ids = {
            "src_chain_id": src_chain_id,
            "block_hash": block_hash,
            "receipt_height": receipt_height,
        }

        try:
            lookup = await client.get_block_by_hash(block_hash)
        except ChainClientError as exc:
            logger.warning(
                "Block lookup for %s on chain %d failed: %s", block_hash, src_chain_id, exc
            )
            return self._settle(
                ProcessabilityOutcome.TRANSPORT_ERROR,
                f"HeightCompare: block lookup failed: {exc}",
                error_type=type(exc).__name__,
                **ids,
            )

        height = lookup.height
        if height is None:
            # Expected while chains converge (unindexed or reorganised block).
            logger.debug(
                "Block %s unresolved on chain %d (found=%s)", block_hash, src_chain_id, lookup.found
            )
            return self._settle(
                ProcessabilityOutcome.UNKNOWN_BLOCK,
                f"HeightCompare: block {block_hash} has no height on chain {src_chain_id}.",
                found=lookup.found,
                **ids,
            )

        if receipt_height <= height:
            outcome = ProcessabilityOutcome.SYNCED
            reason = f"HeightCompare: receipt height {receipt_height} <= synced height {height}."
        else:
            outcome = ProcessabilityOutcome.NOT_SYNCED
            reason = f"HeightCompare: receipt height {receipt_height} > synced height {height}."

        logger.debug(
            "Chain %d synced height %d vs receipt height %d -> %s",
            src_chain_id, height, receipt_height, outcome.value,
        )
        return self._settle(outcome, reason, synced_height=height, **ids)
