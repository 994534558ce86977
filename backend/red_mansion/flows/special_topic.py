from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.special_topic import (
    SPECIAL_TOPIC_SYSTEM_PROMPT,
    SPECIAL_TOPIC_TEMPLATE,
)
from red_mansion.flows.schemas import SpecialTopicFrameworkInput, SpecialTopicFrameworkOutput


class SpecialTopicFrameworkFlow(
    BaseFlow[SpecialTopicFrameworkInput, SpecialTopicFrameworkOutput]
):
    """Builds a research framework, reading list and analysis tools for a chosen topic."""

    name = "generate_special_topic_framework"
    request_schema = SpecialTopicFrameworkInput
    response_schema = SpecialTopicFrameworkOutput
    system_prompt = SPECIAL_TOPIC_SYSTEM_PROMPT
    template = SPECIAL_TOPIC_TEMPLATE
    failure_message = "AI模型未能生成有效的專題研究框架。"
