from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.writing_coach import (
    WRITING_COACH_SYSTEM_PROMPT,
    WRITING_COACH_TEMPLATE,
)
from red_mansion.flows.schemas import WritingCoachInput, WritingCoachOutput


class WritingCoachFlow(BaseFlow[WritingCoachInput, WritingCoachOutput]):
    name = "ai_writing_coach"
    request_schema = WritingCoachInput
    response_schema = WritingCoachOutput
    system_prompt = WRITING_COACH_SYSTEM_PROMPT
    template = WRITING_COACH_TEMPLATE
    failure_message = "AI寫作教練未能生成有效的寫作回饋。"
