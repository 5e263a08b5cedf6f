from __future__ import annotations

from typing import Optional


class BridgeSyncError(Exception):
    """Base class for every error raised by the sync-check components."""


class ConfigurationError(BridgeSyncError):
    """Static configuration is missing or inconsistent."""


class RouteNotConfigured(ConfigurationError, LookupError):
    """No cross-chain sync oracle is registered for (dest_chain_id, src_chain_id)."""

    def __init__(self, dest_chain_id: int, src_chain_id: int) -> None:
        super().__init__(
            f"No cross-chain sync address configured for "
            f"dest_chain_id={dest_chain_id}, src_chain_id={src_chain_id}"
        )
        self.dest_chain_id = dest_chain_id
        self.src_chain_id = src_chain_id


class UnknownChain(ConfigurationError, LookupError):
    """No client handle is registered for a chain id."""

    def __init__(self, chain_id: int, role: str) -> None:
        super().__init__(f"No {role} client registered for chain_id={chain_id}")
        self.chain_id = chain_id
        self.role = role


class ChainClientError(BridgeSyncError):
    """
    A read against a chain endpoint failed (transport, timeout, revert, ...).

    `chain_id` identifies the endpoint that failed, when known.
    """

    def __init__(self, message: str, *, chain_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.chain_id = chain_id


class OracleUnavailable(ChainClientError):
    """The destination chain's sync oracle could not be read."""


class MalformedCheckpoint(OracleUnavailable):
    """The oracle answered, but the answer is not a valid sync checkpoint."""
