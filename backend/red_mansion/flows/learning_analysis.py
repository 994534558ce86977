from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.learning_analysis import (
    LEARNING_ANALYSIS_SYSTEM_PROMPT,
    LEARNING_ANALYSIS_TEMPLATE,
)
from red_mansion.flows.schemas import LearningAnalysisInput, LearningAnalysisOutput


class LearningAnalysisFlow(BaseFlow[LearningAnalysisInput, LearningAnalysisOutput]):
    """
    Teacher-facing analytics over a student's reading record: a cognitive
    heatmap description, likely comprehension deviations and content
    recommendations.

    `learning_data` is free text assembled by the caller (chapters completed,
    time spent, quiz scores, notes); it is forwarded as-is.
    """

    name = "learning_analysis"
    request_schema = LearningAnalysisInput
    response_schema = LearningAnalysisOutput
    system_prompt = LEARNING_ANALYSIS_SYSTEM_PROMPT
    template = LEARNING_ANALYSIS_TEMPLATE
    failure_message = "AI模型未能生成有效的學習分析。"
