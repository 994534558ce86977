import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from red_mansion.api.deps import CurrentUser, PerplexityClientDep
from red_mansion.api.routes.flows import flow_http_error
from red_mansion.flows.errors import FlowError
from red_mansion.flows.perplexity_client import PERPLEXITY_MODELS
from red_mansion.flows.perplexity_qa import (
    PerplexityQAFlow,
    get_model_capabilities,
    get_suggested_questions,
)
from red_mansion.flows.schemas import (
    PerplexityBatchQAInput,
    PerplexityBatchQAResponse,
    PerplexityQAInput,
    PerplexityQAResponse,
    QuestionContext,
)

router = APIRouter(prefix="/qa", tags=["qa"])
logger = logging.getLogger(__name__)


@router.post("/perplexity", response_model=PerplexityQAResponse)
async def perplexity_qa(
    payload: PerplexityQAInput, current_user: CurrentUser, client: PerplexityClientDep
) -> Any:
    try:
        return await PerplexityQAFlow(client=client).run(payload)
    except FlowError as exc:
        raise flow_http_error(exc) from exc


@router.post("/perplexity/batch", response_model=PerplexityBatchQAResponse)
async def perplexity_qa_batch(
    payload: PerplexityBatchQAInput, current_user: CurrentUser, client: PerplexityClientDep
) -> Any:
    return await PerplexityQAFlow(client=client).run_batch(payload)


async def _stream_events(flow: PerplexityQAFlow, request: PerplexityQAInput) -> AsyncIterator[str]:
    async for chunk in flow.stream(request):
        yield chunk.model_dump_json()
    yield "[DONE]"


@router.post("/perplexity/stream")
async def perplexity_qa_stream(
    payload: PerplexityQAInput, current_user: CurrentUser, client: PerplexityClientDep
):
    """Stream the answer as server-sent events, one JSON chunk per event, then `[DONE]`."""
    flow = PerplexityQAFlow(client=client)
    try:
        request = flow.validate_request(payload)
    except FlowError as exc:
        raise flow_http_error(exc) from exc
    return EventSourceResponse(_stream_events(flow, request))


@router.get("/suggested-questions")
async def suggested_questions(context: QuestionContext | None = None) -> dict[str, list[str]]:
    return get_suggested_questions(context)


@router.get("/models/{model_key}/capabilities")
async def model_capabilities(model_key: str) -> dict[str, bool]:
    if model_key not in PERPLEXITY_MODELS:
        raise HTTPException(status_code=404, detail="Unknown Perplexity model")
    return get_model_capabilities(model_key)
