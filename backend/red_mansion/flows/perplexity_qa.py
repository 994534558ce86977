import asyncio
import logging
import time
from collections.abc import AsyncIterator, Mapping
from typing import Any

from red_mansion.core.config import settings
from red_mansion.flows.base import validate_flow_request
from red_mansion.flows.errors import FlowValidationError
from red_mansion.flows.perplexity_client import (
    PerplexityClient,
    PerplexityQAError,
    build_qa_prompt,
    supports_reasoning,
    utc_timestamp,
)
from red_mansion.flows.schemas import (
    PerplexityBatchQAInput,
    PerplexityBatchQAResponse,
    PerplexityQAInput,
    PerplexityQAResponse,
    PerplexityStreamingChunk,
    QuestionContext,
)

logger = logging.getLogger(__name__)

SUGGESTED_QUESTIONS: dict[str, list[str]] = {
    "character": [
        "林黛玉的性格特點和悲劇命運如何體現？",
        "賈寶玉的叛逆精神在哪些情節中表現出來？",
        "王熙鳳的管理才能和性格缺陷有哪些？",
        "薛寶釵的待人處世之道體現了什麼價值觀？",
    ],
    "plot": [
        "第一回中真假虛實的設定有何深層意義？",
        "劉姥姥進大觀園的情節在小說中起什麼作用？",
        "黛玉葬花的象徵意義是什麼？",
        "寶黛初會的情節安排有什麼特殊之處？",
    ],
    "theme": [
        "《紅樓夢》中體現了怎樣的愛情觀念？",
        "小說如何表現封建社會的興衰主題？",
        "真假虛實的哲學思辨在作品中如何體現？",
        "《紅樓夢》中的女性意識覺醒有哪些表現？",
    ],
    "general": [
        "《紅樓夢》的主要藝術成就有哪些？",
        "曹雪芹的寫作技巧有什麼特點？",
        "《紅樓夢》在中國文學史上的地位如何？",
        "《紅樓夢》的現實主義特色體現在哪裡？",
    ],
}


def get_suggested_questions(context: QuestionContext | None = None) -> dict[str, list[str]]:
    if context is None:
        return {key: list(questions) for key, questions in SUGGESTED_QUESTIONS.items()}
    return {context: list(SUGGESTED_QUESTIONS[context])}


def get_model_capabilities(model_key: str) -> dict[str, bool]:
    return {
        "supports_reasoning": supports_reasoning(model_key),
        "supports_streaming": True,
        "supports_citations": True,
        "supports_web_search": True,
    }


class PerplexityQAFlow:
    """
    Cited question answering about the novel through Perplexity Sonar.

    Provider failures never raise: `run` returns a `success=False` response
    whose answer carries the error, and `stream` ends with a chunk whose
    `error` is set. Only request validation raises.
    """

    name = "perplexity_red_chamber_qa"

    def __init__(self, client: PerplexityClient | None = None):
        self.client = client or PerplexityClient()

    def validate_request(self, input_data: PerplexityQAInput | Mapping[str, Any]) -> PerplexityQAInput:
        return validate_flow_request(self.name, PerplexityQAInput, input_data)

    def render(self, request: PerplexityQAInput) -> str:
        return build_qa_prompt(request)

    def error_response(self, request: PerplexityQAInput, message: str) -> PerplexityQAResponse:
        model_key = request.model_key or settings.PERPLEXITY_DEFAULT_MODEL
        return PerplexityQAResponse(
            question=request.user_question,
            answer=f"抱歉，處理您的問題時發生錯誤：{message}",
            model_used=model_key,
            model_key=model_key,
            reasoning_effort=request.reasoning_effort,
            question_context=request.question_context,
            success=False,
            timestamp=utc_timestamp(),
            question_length=len(request.user_question),
            error=message,
        )

    async def run(self, input_data: PerplexityQAInput | Mapping[str, Any]) -> PerplexityQAResponse:
        request = self.validate_request(input_data)
        logger.info(
            "Starting Perplexity QA request: %s (model=%s)",
            request.user_question[:100],
            request.model_key or settings.PERPLEXITY_DEFAULT_MODEL,
        )
        try:
            response = await self.client.completion_request(request)
        except PerplexityQAError as exc:
            logger.error("Perplexity QA error (%s): %s", exc.code, exc.message)
            return self.error_response(request, exc.message)

        logger.info(
            "Perplexity QA completed: %s chars, %s citations in %.2fs",
            response.answer_length,
            response.citation_count,
            response.processing_time,
        )
        return response

    async def stream(
        self, input_data: PerplexityQAInput | Mapping[str, Any]
    ) -> AsyncIterator[PerplexityStreamingChunk]:
        request = self.validate_request(input_data)
        chunk_index = 0
        try:
            async for chunk in self.client.stream_completion_request(request):
                chunk_index = chunk.chunk_index
                yield chunk
                if chunk.is_complete:
                    break
        except PerplexityQAError as exc:
            logger.error("Perplexity streaming QA error (%s): %s", exc.code, exc.message)
            yield PerplexityStreamingChunk(
                content="",
                full_content=f"流式處理時發生錯誤：{exc.message}",
                chunk_index=chunk_index + 1,
                is_complete=True,
                timestamp=utc_timestamp(),
                error=exc.message,
            )

    async def run_batch(self, batch: PerplexityBatchQAInput) -> PerplexityBatchQAResponse:
        """Answer several questions with at most `max_concurrency` in flight.

        Responses keep the order of `batch.questions`.
        """
        start = time.perf_counter()
        semaphore = asyncio.Semaphore(batch.max_concurrency)

        async def _answer(index: int, question: PerplexityQAInput) -> PerplexityQAResponse:
            merged = {**batch.shared_config, **question.model_dump(exclude_unset=True)}
            async with semaphore:
                try:
                    return await self.run(merged)
                except FlowValidationError as exc:
                    logger.warning("Batch question %s failed validation: %s", index + 1, exc)
                    return self.error_response(question, exc.message)

        responses = await asyncio.gather(
            *(_answer(index, question) for index, question in enumerate(batch.questions))
        )

        errors = [
            f"Question {index + 1}: {response.error or 'Unknown error'}"
            for index, response in enumerate(responses)
            if not response.success
        ]
        total = len(responses)
        successful = total - len(errors)
        elapsed = time.perf_counter() - start
        logger.info("Perplexity batch QA completed: %s/%s succeeded", successful, total)

        return PerplexityBatchQAResponse(
            responses=list(responses),
            total_questions=total,
            successful_questions=successful,
            failed_questions=total - successful,
            total_processing_time=elapsed,
            average_processing_time=elapsed / total,
            timestamp=utc_timestamp(),
            success=successful > 0,
            errors=errors,
        )
