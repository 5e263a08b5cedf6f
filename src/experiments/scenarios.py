# src/experiments/scenarios.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from clients.registry import ChainClientRegistry
from core.enums import MessageStatus, ProcessabilityOutcome
from core.models import BridgeMessage, BridgeMessagePayload, MessageReceipt
from core.routing import InMemoryRoutingTable
from experiments.config import (
    InMemoryDestinationChainClient,
    InMemorySourceChainClient,
    SimulatedSyncOracle,
    SimulationChain,
)


class ScenarioId(str, Enum):
    """
    Canonical chain-state situations a bridge message can be evaluated in.

      - SYNCED_PAST_RECEIPT:   oracle checkpoint is above the receipt block.
      - SYNCED_AT_RECEIPT:     checkpoint is exactly the receipt block.
      - BEHIND_RECEIPT:        checkpoint is below the receipt block.
      - NEVER_SYNCED:          oracle slot is still the zero snippet.
      - CHECKPOINT_REORGED:    checkpoint block was reorganised away
                               (node still knows it, without a number).
      - CHECKPOINT_FORGOTTEN:  checkpoint block is unknown to the node.
      - ORACLE_DOWN:           destination-chain read fails.
      - SOURCE_RPC_DOWN:       source-chain block lookup fails.
      - MISSING_RECEIPT:       message record has no receipt.
      - MISSING_PAYLOAD:       message record has no payload.
      - ALREADY_DONE:          message status is past NEW.
      - ROUTE_MISSING:         no oracle configured for the chain pair.
    """

    SYNCED_PAST_RECEIPT = "synced_past_receipt"
    SYNCED_AT_RECEIPT = "synced_at_receipt"
    BEHIND_RECEIPT = "behind_receipt"
    NEVER_SYNCED = "never_synced"
    CHECKPOINT_REORGED = "checkpoint_reorged"
    CHECKPOINT_FORGOTTEN = "checkpoint_forgotten"
    ORACLE_DOWN = "oracle_down"
    SOURCE_RPC_DOWN = "source_rpc_down"
    MISSING_RECEIPT = "missing_receipt"
    MISSING_PAYLOAD = "missing_payload"
    ALREADY_DONE = "already_done"
    ROUTE_MISSING = "route_missing"


class Label(str, Enum):
    """Ground-truth answer expected for a scenario."""

    PROCESSABLE = "processable"
    NOT_PROCESSABLE = "not_processable"


SRC_CHAIN_ID = 31336
DEST_CHAIN_ID = 167001
CROSS_CHAIN_SYNC_ADDRESS = "0x1000777700000000000000000000000000000001"


@dataclass
class SimulationEnvironment:
    """A source chain, a destination chain with its sync oracle, and the wiring."""

    src_chain: SimulationChain
    src_client: InMemorySourceChainClient
    dest_client: InMemoryDestinationChainClient
    oracle: SimulatedSyncOracle
    routing: InMemoryRoutingTable
    clients: ChainClientRegistry

    def make_message(
        self,
        receipt_height: Optional[int],
        *,
        status: MessageStatus = MessageStatus.NEW,
        with_payload: bool = True,
    ) -> BridgeMessage:
        receipt = None
        if receipt_height is not None:
            receipt = MessageReceipt(
                block_number=receipt_height,
                block_hash=self.src_chain.block_at(receipt_height).hash,
            )
        payload = None
        if with_payload:
            payload = BridgeMessagePayload(
                id=receipt_height or 0,
                src_chain_id=SRC_CHAIN_ID,
                dest_chain_id=DEST_CHAIN_ID,
            )
        return BridgeMessage(
            status=status,
            receipt=receipt,
            message=payload,
            src_chain_id=SRC_CHAIN_ID,
            dest_chain_id=DEST_CHAIN_ID,
        )


def make_simulation_environment(*, blocks: int = 20) -> SimulationEnvironment:
    """
    Build a fresh environment with `blocks` mined source blocks and an
    oracle that has not synced anything yet.
    """
    src_chain = SimulationChain(chain_id=SRC_CHAIN_ID)
    src_chain.mine(blocks)

    src_client = InMemorySourceChainClient(src_chain)
    dest_client = InMemoryDestinationChainClient(DEST_CHAIN_ID)
    oracle = dest_client.deploy(
        SimulatedSyncOracle(address=CROSS_CHAIN_SYNC_ADDRESS, src_chain_id=SRC_CHAIN_ID)
    )

    routing = InMemoryRoutingTable({(DEST_CHAIN_ID, SRC_CHAIN_ID): CROSS_CHAIN_SYNC_ADDRESS})
    clients = ChainClientRegistry()
    clients.register_source(src_client)
    clients.register_destination(dest_client)

    return SimulationEnvironment(
        src_chain=src_chain,
        src_client=src_client,
        dest_client=dest_client,
        oracle=oracle,
        routing=routing,
        clients=clients,
    )


class SyncScenario(ABC):
    """
    Abstract base class for chain-state scenarios.

    Each concrete scenario arranges the simulated chains, returns the message
    to evaluate, and declares the expected label and outcome.
    """

    scenario_id: ScenarioId
    label: Label
    outcome: ProcessabilityOutcome
    description: str = ""

    @abstractmethod
    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        raise NotImplementedError


class _HeightScenario(SyncScenario):
    """Oracle synced to `checkpoint_height`; receipt at `receipt_height`."""

    checkpoint_height: int
    receipt_height: int

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.block_at(self.checkpoint_height))
        return env.make_message(self.receipt_height)


class SyncedPastReceipt(_HeightScenario):
    scenario_id = ScenarioId.SYNCED_PAST_RECEIPT
    label = Label.PROCESSABLE
    outcome = ProcessabilityOutcome.SYNCED
    description = "Destination has synced the source past the receipt block."
    checkpoint_height = 15
    receipt_height = 10


class SyncedAtReceipt(_HeightScenario):
    scenario_id = ScenarioId.SYNCED_AT_RECEIPT
    label = Label.PROCESSABLE
    outcome = ProcessabilityOutcome.SYNCED
    description = "Checkpoint is exactly the receipt block; the comparison is inclusive."
    checkpoint_height = 10
    receipt_height = 10


class BehindReceipt(_HeightScenario):
    scenario_id = ScenarioId.BEHIND_RECEIPT
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.NOT_SYNCED
    description = "Destination has not yet synced the receipt block."
    checkpoint_height = 9
    receipt_height = 10


class NeverSynced(SyncScenario):
    scenario_id = ScenarioId.NEVER_SYNCED
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.UNKNOWN_BLOCK
    description = "Oracle still holds the zero snippet; the zero hash resolves to nothing."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        return env.make_message(3)


class CheckpointReorged(SyncScenario):
    scenario_id = ScenarioId.CHECKPOINT_REORGED
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.UNKNOWN_BLOCK
    description = "Checkpoint block was reorganised away and has no height any more."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        env.src_chain.reorg(2)
        env.src_chain.mine(3)
        return env.make_message(5)


class CheckpointForgotten(SyncScenario):
    scenario_id = ScenarioId.CHECKPOINT_FORGOTTEN
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.UNKNOWN_BLOCK
    description = "Source node does not know the checkpoint hash at all."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        env.src_chain.reorg(1, forget=True)
        return env.make_message(5)


class OracleDown(SyncScenario):
    scenario_id = ScenarioId.ORACLE_DOWN
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.ORACLE_UNAVAILABLE
    description = "Reading the sync oracle on the destination chain fails."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        env.oracle.fail_with = ConnectionError("destination node unreachable")
        return env.make_message(5)


class SourceRpcDown(SyncScenario):
    scenario_id = ScenarioId.SOURCE_RPC_DOWN
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.TRANSPORT_ERROR
    description = "Source-chain block lookup fails at the transport level."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        env.src_client.fail_with = TimeoutError("source node timed out")
        return env.make_message(5)


class MissingReceipt(SyncScenario):
    scenario_id = ScenarioId.MISSING_RECEIPT
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.MISSING_DATA
    description = "Message record has no receipt."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        return env.make_message(None)


class MissingPayload(SyncScenario):
    scenario_id = ScenarioId.MISSING_PAYLOAD
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.MISSING_DATA
    description = "Message record has no decoded payload."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        return env.make_message(5, with_payload=False)


class AlreadyDone(SyncScenario):
    scenario_id = ScenarioId.ALREADY_DONE
    label = Label.PROCESSABLE
    outcome = ProcessabilityOutcome.ALREADY_ADVANCED
    description = "Message was already processed; no chain reads are needed."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        # Oracle is behind on purpose: the status alone decides.
        env.oracle.sync_to(env.src_chain.block_at(1))
        return env.make_message(5, status=MessageStatus.DONE)


class RouteMissing(SyncScenario):
    scenario_id = ScenarioId.ROUTE_MISSING
    label = Label.NOT_PROCESSABLE
    outcome = ProcessabilityOutcome.NOT_CONFIGURED
    description = "No sync oracle is configured for the (dest, src) pair."

    def arrange(self, env: SimulationEnvironment) -> BridgeMessage:
        env.oracle.sync_to(env.src_chain.tip)
        message = env.make_message(5)
        return message.model_copy(update={"src_chain_id": 999})


SCENARIOS: Dict[ScenarioId, SyncScenario] = {
    sc.scenario_id: sc
    for sc in (
        SyncedPastReceipt(),
        SyncedAtReceipt(),
        BehindReceipt(),
        NeverSynced(),
        CheckpointReorged(),
        CheckpointForgotten(),
        OracleDown(),
        SourceRpcDown(),
        MissingReceipt(),
        MissingPayload(),
        AlreadyDone(),
        RouteMissing(),
    )
}
