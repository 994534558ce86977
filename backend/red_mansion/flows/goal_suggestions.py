from collections.abc import Mapping
from typing import Any

from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.goal_suggestions import (
    GOAL_SUGGESTIONS_SYSTEM_PROMPT,
    GOAL_SUGGESTIONS_TEMPLATE,
)
from red_mansion.flows.schemas import GoalSuggestionsInput, GoalSuggestionsOutput


def _dedupe(goals: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for goal in goals:
        text = goal.strip()
        if text in seen:
            continue
        seen.add(text)
        unique.append(text)
    return unique


class GoalSuggestionsFlow(BaseFlow[GoalSuggestionsInput, GoalSuggestionsOutput]):
    """
    Suggests learning goals for each of the four SOLO taxonomy levels
    (unistructural, multistructural, relational, extended abstract).
    """

    name = "generate_goal_suggestions"
    request_schema = GoalSuggestionsInput
    response_schema = GoalSuggestionsOutput
    system_prompt = GOAL_SUGGESTIONS_SYSTEM_PROMPT
    template = GOAL_SUGGESTIONS_TEMPLATE
    failure_message = "AI模型未能生成有效的學習目標建議。"

    async def run(
        self, input_data: GoalSuggestionsInput | Mapping[str, Any]
    ) -> GoalSuggestionsOutput:
        suggestions = await super().run(input_data)

        # Models sometimes repeat a goal verbatim within a level.
        return suggestions.model_copy(
            update={
                "single_point_goals": _dedupe(suggestions.single_point_goals),
                "multi_point_goals": _dedupe(suggestions.multi_point_goals),
                "relational_goals": _dedupe(suggestions.relational_goals),
                "extended_abstract_goals": _dedupe(suggestions.extended_abstract_goals),
            }
        )
