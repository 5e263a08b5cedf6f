"""Tests for the web3-backed chain clients, with AsyncWeb3 mocked out."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from web3.exceptions import BlockNotFound, ContractLogicError

from clients.web3_client import CROSS_CHAIN_SYNC_ABI, Web3DestinationChainClient, Web3SourceChainClient
from core.errors import ChainClientError, MalformedCheckpoint, OracleUnavailable

ORACLE = "0x1000777700000000000000000000000000000001"
HASH = bytes.fromhex("ab" * 32)
ROOT = bytes.fromhex("cd" * 32)


def _destination(call_mock, timeout=5.0):
    w3 = MagicMock()
    w3.eth.contract.return_value.functions.getSyncedSnippet.return_value.call = call_mock
    return Web3DestinationChainClient(167001, w3, timeout=timeout), w3


def _source(get_block_mock, timeout=5.0):
    w3 = MagicMock()
    w3.eth.get_block = get_block_mock
    return Web3SourceChainClient(31336, w3, timeout=timeout)


async def _never_returns(*args, **kwargs):
    await asyncio.sleep(10)


class TestWeb3DestinationChainClient:
    """getSyncedSnippet reads through AsyncWeb3."""

    def test_reads_latest_slot(self, run):
        client, w3 = _destination(AsyncMock(return_value=(42, HASH, ROOT)))

        checkpoint = run(client.read_synced_checkpoint(ORACLE))

        assert checkpoint.block_hash == "0x" + "ab" * 32
        assert checkpoint.remote_block_id == 42
        kwargs = w3.eth.contract.call_args.kwargs
        assert kwargs["abi"] is CROSS_CHAIN_SYNC_ABI
        assert kwargs["address"].lower() == ORACLE
        w3.eth.contract.return_value.functions.getSyncedSnippet.assert_called_once_with(0)

    def test_revert_is_oracle_unavailable(self, run):
        client, _ = _destination(AsyncMock(side_effect=ContractLogicError("execution reverted")))
        with pytest.raises(OracleUnavailable) as excinfo:
            run(client.read_synced_checkpoint(ORACLE))
        assert excinfo.value.chain_id == 167001

    def test_transport_error_is_oracle_unavailable(self, run):
        client, _ = _destination(AsyncMock(side_effect=ConnectionError("refused")))
        with pytest.raises(OracleUnavailable):
            run(client.read_synced_checkpoint(ORACLE))

    def test_timeout_is_oracle_unavailable(self, run):
        client, _ = _destination(AsyncMock(side_effect=_never_returns), timeout=0.01)
        with pytest.raises(OracleUnavailable, match="timed out"):
            run(client.read_synced_checkpoint(ORACLE))

    def test_malformed_answer(self, run):
        client, _ = _destination(AsyncMock(return_value=(42,)))
        with pytest.raises(MalformedCheckpoint) as excinfo:
            run(client.read_synced_checkpoint(ORACLE))
        assert excinfo.value.chain_id == 167001


class TestWeb3SourceChainClient:
    """eth_getBlockByHash lookups through AsyncWeb3."""

    def test_found(self, run):
        client = _source(AsyncMock(return_value={"hash": HASH, "number": 77, "parentHash": ROOT, "timestamp": 10}))

        lookup = run(client.get_block_by_hash("0x" + "ab" * 32))

        assert lookup.found
        assert lookup.height == 77
        assert lookup.block.parent_hash == "0x" + "cd" * 32

    def test_null_number(self, run):
        client = _source(AsyncMock(return_value={"hash": HASH, "number": None}))
        lookup = run(client.get_block_by_hash("0x" + "ab" * 32))
        assert lookup.found
        assert lookup.height is None

    def test_block_not_found_is_a_value(self, run):
        client = _source(AsyncMock(side_effect=BlockNotFound("not found")))
        lookup = run(client.get_block_by_hash("0x" + "ab" * 32))
        assert not lookup.found

    def test_transport_error_raises_client_error(self, run):
        client = _source(AsyncMock(side_effect=ConnectionError("refused")))
        with pytest.raises(ChainClientError) as excinfo:
            run(client.get_block_by_hash("0x" + "ab" * 32))
        assert excinfo.value.chain_id == 31336
        assert not isinstance(excinfo.value, OracleUnavailable)

    def test_timeout_raises_client_error(self, run):
        client = _source(AsyncMock(side_effect=_never_returns), timeout=0.01)
        with pytest.raises(ChainClientError, match="timed out"):
            run(client.get_block_by_hash("0x" + "ab" * 32))
