import logging
from collections.abc import Mapping
from typing import Any

from red_mansion.flows.base import validate_flow_request
from red_mansion.flows.perplexity_client import PerplexityClient, PerplexityQAError
from red_mansion.flows.prompts.explain_text_selection import (
    EXPLAIN_TEXT_SELECTION_FALLBACK_TEMPLATE,
    EXPLAIN_TEXT_SELECTION_SYSTEM_PROMPT,
    EXPLAIN_TEXT_SELECTION_TEMPLATE,
)
from red_mansion.flows.schemas import (
    ExplainTextSelectionInput,
    ExplainTextSelectionOutput,
    PerplexityQAInput,
)
from red_mansion.flows.templates import render_prompt

logger = logging.getLogger(__name__)

ERROR_DETAIL_MAX_CHARS = 100


def _truncate(message: str, limit: int = ERROR_DETAIL_MAX_CHARS) -> str:
    if len(message) <= limit:
        return message
    return message[:limit] + "…"


class ExplainTextSelectionFlow:
    """
    Answers a reader's question about a passage they selected.

    The answer comes from Perplexity; when the provider fails the flow still
    succeeds with a Markdown notice that echoes the selection and question.
    """

    name = "explain_text_selection"
    model_key = "sonar-reasoning-pro"
    reasoning_effort = "medium"

    def __init__(self, client: PerplexityClient | None = None):
        self.client = client or PerplexityClient()

    def validate_request(
        self, input_data: ExplainTextSelectionInput | Mapping[str, Any]
    ) -> ExplainTextSelectionInput:
        return validate_flow_request(self.name, ExplainTextSelectionInput, input_data)

    def render(self, request: ExplainTextSelectionInput) -> str:
        user_prompt = render_prompt(EXPLAIN_TEXT_SELECTION_TEMPLATE, request.template_fields())
        return f"{EXPLAIN_TEXT_SELECTION_SYSTEM_PROMPT}\n\n{user_prompt}"

    def fallback(self, request: ExplainTextSelectionInput, error: str) -> ExplainTextSelectionOutput:
        explanation = render_prompt(
            EXPLAIN_TEXT_SELECTION_FALLBACK_TEMPLATE,
            {**request.template_fields(), "error_message": _truncate(error)},
        )
        return ExplainTextSelectionOutput(explanation=explanation)

    async def run(
        self, input_data: ExplainTextSelectionInput | Mapping[str, Any]
    ) -> ExplainTextSelectionOutput:
        request = self.validate_request(input_data)
        qa_input = PerplexityQAInput(
            user_question=request.user_question,
            selected_text=request.selected_text,
            chapter_context=request.chapter_context,
            model_key=self.model_key,
            reasoning_effort=self.reasoning_effort,
            show_thinking_process=False,
        )

        try:
            response = await self.client.completion_request(qa_input, prompt=self.render(request))
        except PerplexityQAError as exc:
            logger.warning("explain_text_selection falling back (%s): %s", exc.code, exc.message)
            return self.fallback(request, exc.message)

        if not response.answer.strip():
            logger.warning("explain_text_selection falling back: empty answer")
            return self.fallback(request, "Empty response from Perplexity API")

        return ExplainTextSelectionOutput(explanation=response.answer)
