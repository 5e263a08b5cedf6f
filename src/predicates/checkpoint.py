from __future__ import annotations

import logging
from typing import Optional, Tuple

from clients.base import LATEST_CHECKPOINT_SLOT
from clients.registry import ChainClientRegistry
from core.enums import ProcessabilityOutcome, StepName
from core.errors import ConfigurationError, OracleUnavailable
from core.models import BridgeMessage, SyncCheckpoint
from core.routing import RoutingTable
from predicates.base import EvaluationStep, StepResult

logger = logging.getLogger(__name__)


class CheckpointResolver(EvaluationStep):
    """
    Read the destination chain's record of the last source-chain block it
    has synced.

    The oracle address comes from the routing table for the ordered pair
    (dest_chain_id, src_chain_id); the read always targets the latest slot.
    Failures are not retried.
    """

    name = StepName.CHECKPOINT
    description = "Destination chain's sync oracle yields a source-chain block hash."

    def __init__(
        self,
        routing: RoutingTable,
        clients: ChainClientRegistry,
        *,
        slot: int = LATEST_CHECKPOINT_SLOT,
    ) -> None:
        self.routing = routing
        self.clients = clients
        self.slot = slot

    async def resolve(self, dest_chain_id: int, src_chain_id: int) -> SyncCheckpoint:
        """
        Raises:
            RouteNotConfigured / UnknownChain: the pair or chain is not configured.
            OracleUnavailable: the oracle read failed or returned garbage.
        """
        oracle_address = self.routing.lookup(dest_chain_id, src_chain_id)
        client = self.clients.destination(dest_chain_id)

        logger.debug(
            "Reading synced checkpoint slot=%d from %s on chain %d (src chain %d)",
            self.slot, oracle_address, dest_chain_id, src_chain_id,
        )
        checkpoint = await client.read_synced_checkpoint(oracle_address, self.slot)
        logger.debug(
            "Chain %d has synced chain %d up to block %s",
            dest_chain_id, src_chain_id, checkpoint.block_hash,
        )
        return checkpoint

    async def evaluate(self, message: BridgeMessage) -> Tuple[StepResult, Optional[SyncCheckpoint]]:
        """
        Run `resolve` for the message's chain pair and classify the failure
        modes into a settled StepResult.
        """
        ids = {"dest_chain_id": message.dest_chain_id, "src_chain_id": message.src_chain_id}
        try:
            checkpoint = await self.resolve(message.dest_chain_id, message.src_chain_id)
        except ConfigurationError as exc:
            logger.error("Cannot resolve sync checkpoint: %s", exc)
            return self._settle(
                ProcessabilityOutcome.NOT_CONFIGURED,
                f"CheckpointResolve: {exc}",
                **ids,
            ), None
        except OracleUnavailable as exc:
            logger.warning(
                "Sync oracle unavailable for dest=%d src=%d: %s",
                message.dest_chain_id, message.src_chain_id, exc,
            )
            return self._settle(
                ProcessabilityOutcome.ORACLE_UNAVAILABLE,
                f"CheckpointResolve: {exc}",
                error_type=type(exc).__name__,
                **ids,
            ), None

        result = self._proceed(
            slot=self.slot,
            block_hash=checkpoint.block_hash,
            remote_block_id=checkpoint.remote_block_id,
            **ids,
        )
        return result, checkpoint
