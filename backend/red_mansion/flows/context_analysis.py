from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.context_analysis import (
    CONTEXT_ANALYSIS_SYSTEM_PROMPT,
    CONTEXT_ANALYSIS_TEMPLATE,
)
from red_mansion.flows.schemas import ContextAnalysisInput, ContextAnalysisOutput


class ContextAnalysisFlow(BaseFlow[ContextAnalysisInput, ContextAnalysisOutput]):
    """Word-sense analysis plus the character relationships relevant to a passage."""

    name = "context_aware_analysis"
    request_schema = ContextAnalysisInput
    response_schema = ContextAnalysisOutput
    system_prompt = CONTEXT_ANALYSIS_SYSTEM_PROMPT
    template = CONTEXT_ANALYSIS_TEMPLATE
    failure_message = "AI模型未能生成有效的文本脈絡分析。"
