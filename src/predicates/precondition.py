from __future__ import annotations

from core.enums import MessageStatus, ProcessabilityOutcome, StepName
from core.models import BridgeMessage
from predicates.base import EvaluationStep, StepResult


class PreconditionFilter(EvaluationStep):
    """
    Decide what can be decided from the message record alone.

      - No receipt or no payload: nothing can be proven -> False.
      - Status other than NEW: the message already went past this check in
        its own lifecycle -> True.
      - Otherwise: proceed to the chain reads.

    Pure and synchronous; no network access.
    """

    name = StepName.PRECONDITION
    description = "Message carries a receipt and payload, and still needs a sync check."

    def evaluate(self, message: BridgeMessage) -> StepResult:
        if message.receipt is None or message.message is None:
            missing = [
                field
                for field, value in (("receipt", message.receipt), ("message", message.message))
                if value is None
            ]
            return self._settle(
                ProcessabilityOutcome.MISSING_DATA,
                f"Precondition: missing {', '.join(missing)}.",
                missing=missing,
            )

        if message.status is not MessageStatus.NEW:
            return self._settle(
                ProcessabilityOutcome.ALREADY_ADVANCED,
                f"Precondition: status={message.status.value} is past NEW.",
                status=message.status.value,
            )

        return self._proceed(
            status=message.status.value,
            receipt_block_number=message.receipt.block_number,
        )
