import json
import logging
import re
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import httpx

from red_mansion.core.config import settings
from red_mansion.flows.prompts.perplexity_qa import (
    PERPLEXITY_QA_PERSONA,
    PERPLEXITY_QA_TEMPLATE,
    QUESTION_CONTEXT_INSTRUCTIONS,
)
from red_mansion.flows.schemas import (
    PerplexityCitation,
    PerplexityGroundingMetadata,
    PerplexityQAInput,
    PerplexityQAResponse,
    PerplexityStreamingChunk,
)
from red_mansion.flows.templates import render_prompt

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_ENDPOINT = "/chat/completions"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 2000
MAX_CITATIONS = 10
# Citations beyond this index are only kept when the answer references them.
ALWAYS_KEPT_CITATIONS = 5

PERPLEXITY_MODELS: dict[str, dict[str, Any]] = {
    "sonar-pro": {
        "display_name": "Sonar Pro",
        "max_tokens": 4000,
        "supports_reasoning": False,
    },
    "sonar-reasoning": {
        "display_name": "Sonar Reasoning",
        "max_tokens": 8000,
        "supports_reasoning": True,
    },
    "sonar-reasoning-pro": {
        "display_name": "Sonar Reasoning Pro",
        "max_tokens": 8000,
        "supports_reasoning": True,
    },
}

DOMAIN_TITLES = {
    "zh.wikipedia.org": "維基百科 (中文)",
    "wikipedia.org": "維基百科",
    "baidu.com": "百度百科",
    "zhihu.com": "知乎",
    "guoxue.com": "國學網",
    "literature.org.cn": "中國文學網",
    "cnki.net": "中國知網",
    "douban.com": "豆瓣",
    "academia.edu": "學術網",
    "jstor.org": "JSTOR",
}

DEFAULT_CITATIONS = [
    PerplexityCitation(
        number="1",
        title="紅樓夢研究 - 維基百科",
        url="https://zh.wikipedia.org/wiki/紅樓夢",
        type="default",
        domain="wikipedia.org",
    ),
    PerplexityCitation(
        number="2",
        title="曹雪芹與紅樓夢研究",
        url="https://www.guoxue.com/hongloumeng/",
        type="default",
        domain="guoxue.com",
    ),
]

_THINK_BLOCK = re.compile(r"<think>(.*?)</think>", re.DOTALL)
_UNTERMINATED_THINK = re.compile(r"<think[^>]*>(.*)$", re.DOTALL)
_HTML_TAG = re.compile(r"</?[a-zA-Z][^>]*>")
_CITATION_REF = re.compile(r"\[(\d+)\]")


class PerplexityQAError(Exception):
    def __init__(self, message: str, *, code: str = "API_ERROR", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def supports_reasoning(model_key: str) -> bool:
    return bool(PERPLEXITY_MODELS[model_key]["supports_reasoning"])


def extract_domain(url: str) -> str:
    stripped = re.sub(r"^https?://", "", url.strip())
    stripped = re.sub(r"^www\.", "", stripped)
    return stripped.split("/")[0]


def title_from_url(url: str) -> str:
    domain = extract_domain(url)
    if domain in DOMAIN_TITLES:
        return DOMAIN_TITLES[domain]
    for domain_key, friendly_title in DOMAIN_TITLES.items():
        if domain_key in domain:
            return friendly_title
    return domain.split(".")[0] or "網路來源"


def extract_citations(
    text: str, api_citations: list[str] | None, *, detailed: bool = True
) -> list[PerplexityCitation]:
    """Number the API citation URLs; `detailed` adds the friendly title and domain."""
    referenced = set(_CITATION_REF.findall(text or ""))
    citations: list[PerplexityCitation] = []
    for index, url in enumerate(api_citations or []):
        number = str(index + 1)
        if number in referenced or index < ALWAYS_KEPT_CITATIONS:
            citations.append(
                PerplexityCitation(
                    number=number,
                    title=title_from_url(url) if detailed else url.strip(),
                    url=url.strip(),
                    type="web_citation",
                    domain=extract_domain(url) if detailed else None,
                )
            )

    if not citations:
        citations = [citation.model_copy() for citation in DEFAULT_CITATIONS]

    return citations[:MAX_CITATIONS]


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def _stream_delta(event: Any) -> str | None:
    """Content of one stream event; raises on a JSON value that is not a chunk."""
    choices = (event.get("choices") or []) if isinstance(event, dict) else None
    if not isinstance(choices, list) or (choices and not isinstance(choices[0], dict)):
        raise PerplexityQAError("Invalid stream event from Perplexity API", code="INVALID_RESPONSE")
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    if not isinstance(delta, dict) or (content is not None and not isinstance(content, str)):
        raise PerplexityQAError("Invalid stream event from Perplexity API", code="INVALID_RESPONSE")
    return content


def _thinking_section(content: str, *, complete: bool) -> str:
    content = content.strip()
    if not content:
        return ""
    label = "思考過程" if complete else "思考過程（不完整）"
    return f"\n\n**💭 {label}：**\n\n{content}\n\n---\n\n"


def clean_response(text: str, show_thinking: bool = True) -> str:
    """Render or drop `<think>` blocks, strip HTML tags, normalize whitespace."""
    if not text:
        return ""

    if show_thinking:
        cleaned = _THINK_BLOCK.sub(lambda m: _thinking_section(m.group(1), complete=True), text)
        cleaned = _UNTERMINATED_THINK.sub(
            lambda m: _thinking_section(_HTML_TAG.sub("", m.group(1)), complete=False), cleaned
        )
    else:
        cleaned = _THINK_BLOCK.sub("", text)
        cleaned = _UNTERMINATED_THINK.sub("", cleaned)

    cleaned = _HTML_TAG.sub("", cleaned)
    cleaned = re.sub(r"\n\s*\n\s*\n", "\n\n", cleaned)
    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    return cleaned.strip()


def build_qa_prompt(qa_input: PerplexityQAInput) -> str:
    return render_prompt(
        PERPLEXITY_QA_TEMPLATE,
        {
            **qa_input.template_fields(),
            "persona": PERPLEXITY_QA_PERSONA,
            "context_instruction": QUESTION_CONTEXT_INSTRUCTIONS[qa_input.question_context],
        },
    )


class PerplexityClient:
    """HTTP client for the Perplexity Sonar chat completions API.

    Failures of any kind surface as `PerplexityQAError`; callers decide
    whether to fall back. No retries are attempted.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.PERPLEXITYAI_API_KEY
        self.base_url = (base_url or settings.PERPLEXITY_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PERPLEXITY_TIMEOUT_SECONDS
        self._http_client = http_client

    @property
    def url(self) -> str:
        return f"{self.base_url}{CHAT_COMPLETIONS_ENDPOINT}"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": "RedMansion-Learning-Platform/1.0",
        }

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    def build_request_body(
        self, qa_input: PerplexityQAInput, prompt: str, *, stream: bool
    ) -> dict[str, Any]:
        model_key = qa_input.model_key or settings.PERPLEXITY_DEFAULT_MODEL
        model_config = PERPLEXITY_MODELS[model_key]
        body: dict[str, Any] = {
            "model": model_key,
            "temperature": (
                DEFAULT_TEMPERATURE if qa_input.temperature is None else qa_input.temperature
            ),
            "max_tokens": min(qa_input.max_tokens or DEFAULT_MAX_TOKENS, model_config["max_tokens"]),
            "stream": stream,
            "messages": [{"role": "user", "content": prompt}],
        }
        if supports_reasoning(model_key) and qa_input.reasoning_effort:
            body["reasoning_effort"] = qa_input.reasoning_effort
        return body

    def _ensure_configured(self) -> None:
        if not (self.api_key or "").strip():
            raise PerplexityQAError(
                "Perplexity API key is not configured", code="NOT_CONFIGURED"
            )

    @staticmethod
    def _status_error(response: httpx.Response) -> PerplexityQAError:
        status = response.status_code
        if status == 401:
            code = "AUTHENTICATION_ERROR"
        elif status == 429:
            code = "RATE_LIMIT"
        else:
            code = "API_ERROR"
        return PerplexityQAError(
            f"Perplexity API error {status}: {response.text[:200]}",
            code=code,
            status_code=status,
        )

    async def completion_request(
        self, qa_input: PerplexityQAInput, *, prompt: str | None = None
    ) -> PerplexityQAResponse:
        self._ensure_configured()
        start = time.perf_counter()
        body = self.build_request_body(qa_input, prompt or build_qa_prompt(qa_input), stream=False)

        logger.info("Issuing Perplexity request with model %s...", body["model"])
        try:
            async with self._session() as client:
                response = await client.post(self.url, json=body, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise PerplexityQAError(f"Request timeout: {exc}", code="TIMEOUT") from exc
        except httpx.HTTPError as exc:
            raise PerplexityQAError(f"Network error: {exc}", code="NETWORK_ERROR") from exc

        if response.status_code >= 400:
            raise self._status_error(response)

        try:
            payload = response.json()
            raw_answer = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise PerplexityQAError(
                "Invalid response from Perplexity API", code="INVALID_RESPONSE"
            ) from exc
        if not isinstance(raw_answer, str) or not raw_answer:
            raise PerplexityQAError("Invalid response from Perplexity API", code="INVALID_RESPONSE")

        answer = clean_response(raw_answer, qa_input.show_thinking_process)
        api_citations = _strings(payload.get("citations"))
        citations = extract_citations(
            answer, api_citations, detailed=qa_input.include_detailed_citations
        )
        search_queries = _strings(payload.get("web_search_queries"))
        usage = payload.get("usage")
        model_used = payload.get("model")

        return PerplexityQAResponse(
            question=qa_input.user_question,
            answer=answer,
            raw_answer=raw_answer,
            citations=citations,
            grounding_metadata=PerplexityGroundingMetadata(
                search_queries=search_queries,
                web_sources=[c for c in citations if c.type == "web_citation"],
                grounding_successful=bool(api_citations),
                confidence_score=min(len(api_citations) / 5, 1.0),
            ),
            model_used=model_used if isinstance(model_used, str) and model_used else body["model"],
            model_key=body["model"],
            reasoning_effort=qa_input.reasoning_effort,
            question_context=qa_input.question_context,
            processing_time=time.perf_counter() - start,
            success=True,
            streaming=False,
            timestamp=utc_timestamp(),
            answer_length=len(answer),
            question_length=len(qa_input.user_question),
            citation_count=len(citations),
            usage=usage if isinstance(usage, dict) else None,
        )

    async def stream_completion_request(
        self, qa_input: PerplexityQAInput, *, prompt: str | None = None
    ) -> AsyncIterator[PerplexityStreamingChunk]:
        """Yield incremental chunks; the last one has `is_complete=True`."""
        self._ensure_configured()
        start = time.perf_counter()
        body = self.build_request_body(qa_input, prompt or build_qa_prompt(qa_input), stream=True)

        raw_answer = ""
        api_citations: list[str] = []
        search_queries: list[str] = []
        chunk_index = 0

        try:
            async with self._session() as client:
                async with client.stream(
                    "POST", self.url, json=body, headers=self._headers()
                ) as response:
                    if response.status_code >= 400:
                        await response.aread()
                        raise self._status_error(response)

                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break
                        try:
                            event = json.loads(data)
                        except json.JSONDecodeError:
                            logger.warning("Skipping malformed Perplexity stream line: %s", data[:100])
                            continue

                        delta = _stream_delta(event)
                        api_citations = _strings(event.get("citations")) or api_citations
                        search_queries = _strings(event.get("web_search_queries")) or search_queries
                        if not delta:
                            continue

                        raw_answer += delta
                        chunk_index += 1
                        yield PerplexityStreamingChunk(
                            content=delta,
                            full_content=clean_response(raw_answer, qa_input.show_thinking_process),
                            chunk_index=chunk_index,
                            response_time=time.perf_counter() - start,
                            timestamp=utc_timestamp(),
                        )
        except httpx.TimeoutException as exc:
            raise PerplexityQAError(f"Request timeout: {exc}", code="TIMEOUT") from exc
        except httpx.HTTPError as exc:
            raise PerplexityQAError(f"Network error: {exc}", code="NETWORK_ERROR") from exc

        full_content = clean_response(raw_answer, qa_input.show_thinking_process)
        yield PerplexityStreamingChunk(
            content="",
            full_content=full_content,
            chunk_index=chunk_index + 1,
            is_complete=True,
            citations=extract_citations(
                full_content, api_citations, detailed=qa_input.include_detailed_citations
            ),
            search_queries=search_queries,
            response_time=time.perf_counter() - start,
            timestamp=utc_timestamp(),
        )
