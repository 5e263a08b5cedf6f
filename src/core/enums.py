# src/core/enums.py
from __future__ import annotations

from enum import Enum


class MessageStatus(str, Enum):
    """
    Lifecycle states of a bridge message as tracked by the destination bridge.

    Only NEW needs a sync check. Every later state has already gone through
    (or bypassed) the check in the message's own lifecycle.

    The on-chain enum is an integer (0..4); `from_raw` accepts either form.
    """

    NEW = "NEW"
    RETRIABLE = "RETRIABLE"
    DONE = "DONE"
    FAILED = "FAILED"
    RECALLED = "RECALLED"

    @classmethod
    def from_raw(cls, value: object) -> "MessageStatus":
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.isdigit():
            value = int(value)
        if isinstance(value, int) and not isinstance(value, bool):
            if not 0 <= value < len(_ONCHAIN_ORDER):
                raise ValueError(f"Unknown on-chain message status: {value}")
            return _ONCHAIN_ORDER[value]
        if isinstance(value, str):
            return cls(value.upper())
        raise ValueError(f"Unsupported message status: {value!r}")


_ONCHAIN_ORDER = [
    MessageStatus.NEW,
    MessageStatus.RETRIABLE,
    MessageStatus.DONE,
    MessageStatus.FAILED,
    MessageStatus.RECALLED,
]


class StepName(str, Enum):
    """
    Canonical names of the three evaluation steps, in execution order:

      Precondition  -> CheckpointResolve -> HeightCompare
    """

    PRECONDITION = "Precondition"
    CHECKPOINT = "CheckpointResolve"
    HEIGHT = "HeightCompare"


class ProcessabilityOutcome(str, Enum):
    """
    Why an evaluation ended the way it did.

    Only ALREADY_ADVANCED and SYNCED come with processable=True.
    """

    MISSING_DATA = "missing_data"
    ALREADY_ADVANCED = "already_advanced"
    NOT_CONFIGURED = "not_configured"
    ORACLE_UNAVAILABLE = "oracle_unavailable"
    UNKNOWN_BLOCK = "unknown_block"
    TRANSPORT_ERROR = "transport_error"
    NOT_SYNCED = "not_synced"
    SYNCED = "synced"
    INTERNAL_ERROR = "internal_error"

    @property
    def processable(self) -> bool:
        return self in (ProcessabilityOutcome.ALREADY_ADVANCED, ProcessabilityOutcome.SYNCED)
