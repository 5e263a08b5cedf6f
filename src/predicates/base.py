# src/predicates/base.py
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from core.enums import ProcessabilityOutcome, StepName

JsonDict = Dict[str, Any]


class StepResult(BaseModel):
    """
    Result of running one evaluation step on a bridge message.

    Fields:
      * name:
          Which step produced this result (StepName).
      * decision:
          - True / False: the step settled the overall answer.
          - None:         the step passed; evaluation continues.
      * outcome:
          Classification of a settled decision. None while proceeding.
      * reason:
          Human-readable explanation, intended for logs and debugging.
      * metadata:
          Identifiers the step worked with (chain ids, oracle address,
          checkpoint hash, heights), for observability only.
    """

    name: StepName
    decision: Optional[bool] = None
    outcome: Optional[ProcessabilityOutcome] = None
    reason: Optional[str] = None
    metadata: JsonDict = Field(default_factory=dict)

    @property
    def settled(self) -> bool:
        return self.decision is not None


class EvaluationStep:
    """
    Shared bits of the three evaluation steps.

    Concrete steps set `name` and `description`; `_proceed` and `_settle`
    build StepResults tagged with the step name.
    """

    name: StepName
    description: str = ""

    def _proceed(self, reason: Optional[str] = None, **metadata: Any) -> StepResult:
        return StepResult(name=self.name, reason=reason, metadata=metadata)

    def _settle(
        self,
        outcome: ProcessabilityOutcome,
        reason: str,
        **metadata: Any,
    ) -> StepResult:
        return StepResult(
            name=self.name,
            decision=outcome.processable,
            outcome=outcome,
            reason=reason,
            metadata=metadata,
        )
