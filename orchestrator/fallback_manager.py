from dataclasses import dataclass

from orchestrator.pipeline_types import FallbackDecision, FallbackStage

LLM_STAGES = (FallbackStage.RICH_PROMPT, FallbackStage.SIMPLIFIED_PROMPT)


@dataclass(frozen=True)
class FallbackPolicy:
    simplified_first: bool = False
    max_total_latency_ms: int = 60000


class FallbackManager:
    def __init__(self, policy: FallbackPolicy | None = None):
        self.policy = policy or FallbackPolicy()

    def first_stage(self) -> FallbackStage:
        if self.policy.simplified_first:
            return FallbackStage.SIMPLIFIED_PROMPT
        return FallbackStage.RICH_PROMPT

    def next_stage(
        self,
        *,
        current_stage: FallbackStage,
        reason: str,
        retryable: bool = True,
        elapsed_ms: int = 0,
    ) -> FallbackDecision:
        """
        Decide where to go after ``current_stage`` failed.

        The template stage never fails, so it has no successor.
        """
        if current_stage == FallbackStage.TEMPLATE:
            return FallbackDecision(next_stage=None, reason="template_is_final")

        if not retryable:
            return FallbackDecision(next_stage=FallbackStage.TEMPLATE, reason=f"non_retryable:{reason}")

        if elapsed_ms >= self.policy.max_total_latency_ms:
            return FallbackDecision(next_stage=FallbackStage.TEMPLATE, reason="latency_budget")

        if current_stage == FallbackStage.RICH_PROMPT:
            return FallbackDecision(next_stage=FallbackStage.SIMPLIFIED_PROMPT, reason=reason)

        return FallbackDecision(next_stage=FallbackStage.TEMPLATE, reason=reason)
