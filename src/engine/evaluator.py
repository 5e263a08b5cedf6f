from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel

from clients.registry import ChainClientRegistry
from core.enums import ProcessabilityOutcome
from core.errors import ConfigurationError
from core.models import BridgeMessage
from core.routing import RoutingTable
from predicates.base import StepResult
from predicates.checkpoint import CheckpointResolver
from predicates.height import HeightComparator
from predicates.precondition import PreconditionFilter

logger = logging.getLogger(__name__)


class ProcessabilityResult(BaseModel):
    """
    Result of one processability evaluation.

    Fields
    ------
    processable : bool
        The answer. True only for ALREADY_ADVANCED or SYNCED outcomes.

    outcome : ProcessabilityOutcome
        Which branch of the decision produced the answer.

    steps : List[StepResult]
        Per-step diagnostics, in execution order. Steps that were never
        reached are absent.

    error : Optional[str]
        Set when a collaborator failed in a way none of the steps classify
        (INTERNAL_ERROR) or when configuration is missing. Never changes the
        conservative False answer.
    """

    processable: bool
    outcome: ProcessabilityOutcome
    steps: List[StepResult]
    error: Optional[str] = None


class ProcessabilityEvaluator:
    """
    Decide whether a bridge message can be processed on its destination chain
    right now.

    -------------------------------------------------------------------------
    1. Decision
    -------------------------------------------------------------------------

        Precondition(m)           -> settles on missing data / non-NEW status
        CheckpointResolve(dst, src) -> hash H of the last synced source block
        HeightCompare(src, H, b)  -> height(H) >= receipt height b

    The steps run strictly in this order; each may end the evaluation.

    -------------------------------------------------------------------------
    2. Error handling
    -------------------------------------------------------------------------

    `is_processable` and `evaluate` never raise. Every failure degrades to
    processable=False. A false negative only delays an action the user can
    retry; a false positive would let the caller submit an invalid claim.

    -------------------------------------------------------------------------
    3. State
    -------------------------------------------------------------------------

    No caching and no mutable state: each call re-reads both chains, so
    repeated calls follow the chains as they advance. Independent messages
    can be evaluated concurrently.
    """

    def __init__(self, routing: RoutingTable, clients: ChainClientRegistry) -> None:
        self.precondition = PreconditionFilter()
        self.resolver = CheckpointResolver(routing, clients)
        self.comparator = HeightComparator(clients)

    async def is_processable(self, message: BridgeMessage) -> bool:
        result = await self.evaluate(message)
        return result.processable

    async def is_processable_many(self, messages: Iterable[BridgeMessage]) -> List[bool]:
        results = await asyncio.gather(*(self.is_processable(m) for m in messages))
        return list(results)

    async def evaluate(self, message: BridgeMessage) -> ProcessabilityResult:
        steps: List[StepResult] = []
        try:
            return await self._run(message, steps)
        except ConfigurationError as exc:
            logger.error("Cannot evaluate message on %s: %s", _route_label(message), exc)
            return _finish(ProcessabilityOutcome.NOT_CONFIGURED, steps, error=str(exc))
        except Exception as exc:
            logger.exception("Unexpected failure evaluating message on %s", _route_label(message))
            return _finish(
                ProcessabilityOutcome.INTERNAL_ERROR,
                steps,
                error=f"{type(exc).__name__}: {exc}",
            )

    async def _run(self, message: BridgeMessage, steps: List[StepResult]) -> ProcessabilityResult:
        pre = self.precondition.evaluate(message)
        steps.append(pre)
        if pre.settled:
            return _finish(pre.outcome, steps)

        checkpoint_step, checkpoint = await self.resolver.evaluate(message)
        steps.append(checkpoint_step)
        if checkpoint is None:
            return _finish(checkpoint_step.outcome, steps, error=checkpoint_step.reason)

        height_step = await self.comparator.compare(
            message.src_chain_id,
            checkpoint.block_hash,
            message.receipt.block_number,
        )
        steps.append(height_step)
        return _finish(height_step.outcome, steps)


def _finish(
    outcome: ProcessabilityOutcome,
    steps: List[StepResult],
    error: Optional[str] = None,
) -> ProcessabilityResult:
    return ProcessabilityResult(
        processable=outcome.processable,
        outcome=outcome,
        steps=list(steps),
        error=error,
    )


def _route_label(message: BridgeMessage) -> str:
    return f"src={message.src_chain_id} dest={message.dest_chain_id}"


async def is_transaction_processable(
    message: BridgeMessage,
    *,
    routing: RoutingTable,
    clients: ChainClientRegistry,
) -> bool:
    """
    One-shot form of ProcessabilityEvaluator(routing, clients).is_processable(message).
    """
    return await ProcessabilityEvaluator(routing, clients).is_processable(message)
