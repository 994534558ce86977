from typing import Any

from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.companion_guidance import (
    COMPANION_GUIDANCE_SYSTEM_PROMPT,
    COMPANION_GUIDANCE_TEMPLATE,
)
from red_mansion.flows.schemas import CompanionGuidanceInput, CompanionGuidanceOutput


class CompanionGuidanceFlow(BaseFlow[CompanionGuidanceInput, CompanionGuidanceOutput]):
    """
    Study-companion answers on the goals page. The learning summary and goal
    list are optional context; when absent the prompt says so explicitly.
    """

    name = "ai_companion_guidance"
    request_schema = CompanionGuidanceInput
    response_schema = CompanionGuidanceOutput
    system_prompt = COMPANION_GUIDANCE_SYSTEM_PROMPT
    template = COMPANION_GUIDANCE_TEMPLATE
    failure_message = "AI學伴未能生成有效的指導建議。"

    def render(self, request: CompanionGuidanceInput) -> str:
        fields: dict[str, Any] = request.template_fields()
        summary = (request.user_learning_summary or "").strip()
        fields["user_learning_summary"] = summary or None
        fields["user_goals"] = [goal.strip() for goal in request.user_goals or []] or None
        return self.render_fields(fields)
