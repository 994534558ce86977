from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.personalized_goals import (
    PERSONALIZED_GOALS_SYSTEM_PROMPT,
    PERSONALIZED_GOALS_TEMPLATE,
)
from red_mansion.flows.schemas import PersonalizedGoalInput, PersonalizedGoalOutput


class PersonalizedGoalFlow(BaseFlow[PersonalizedGoalInput, PersonalizedGoalOutput]):
    """Teacher-side SMART goals for one student at a chosen SOLO level."""

    name = "personalized_goal_generation"
    request_schema = PersonalizedGoalInput
    response_schema = PersonalizedGoalOutput
    system_prompt = PERSONALIZED_GOALS_SYSTEM_PROMPT
    template = PERSONALIZED_GOALS_TEMPLATE
    failure_message = "AI模型未能生成有效的個人化教學目標。"
