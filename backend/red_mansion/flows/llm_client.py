import json
import logging
import re
from typing import TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from red_mansion.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_CLOSERS = {"{": "}", "[": "]"}


def _first_json_span(text: str) -> str | None:
    """The first top-level `{...}` or `[...]` span, skipping brackets inside strings."""
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    start = min(starts)
    opener, closer = text[start], _CLOSERS[text[start]]

    depth = 0
    in_string = escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def structured_text_candidates(raw_text: str) -> list[str]:
    """Strings worth handing to `json.loads`, most specific first, without duplicates.

    Covers a fenced block, the whole reply, the first bracketed span and a
    reply prefixed with a bare `json` label.
    """
    text = (raw_text or "").strip()
    if not text:
        return []

    fenced = _FENCED_BLOCK.search(text)
    labelled = text[4:].lstrip(": \n\r\t") if text.lower().startswith("json") else None
    ordered = [
        fenced.group(1) if fenced else None,
        text,
        _first_json_span(text),
        labelled,
    ]

    candidates: list[str] = []
    for candidate in ordered:
        candidate = (candidate or "").strip()
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


class LLMClient:
    """Structured generation against any OpenAI-compatible chat endpoint.

    Gemini is reached through its OpenAI compatibility layer by default.
    """

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT

        resolved_api_key = api_key or settings.LLM_API_KEY or settings.GEMINI_API_KEY
        resolved_base_url = base_url or settings.LLM_BASE_URL

        self.client = AsyncOpenAI(
            base_url=resolved_base_url,
            api_key=resolved_api_key,
        )

    def _chat_completion_kwargs(self, *, temperature: float | None) -> dict:
        model_name = (self.model_name or "").lower()
        # GPT-5 family rejects non-default temperature values.
        if model_name.startswith("gpt-5"):
            return {}
        if temperature is None:
            return {}
        return {"temperature": temperature}

    async def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        response_schema: type[T],
        *,
        temperature: float | None = None,
    ) -> T:
        """
        Generate a response matching the provided Pydantic schema.
        The schema is injected into the system prompt; the reply is parsed from
        the first candidate JSON span that validates. A single request is made.
        """
        schema_json = json.dumps(response_schema.model_json_schema(), ensure_ascii=False)

        augmented_system_prompt = (
            f"{system_prompt}\n\n"
            "CRITICAL: You must respond in ONLY valid JSON format matching the following JSON Schema. "
            "Do not include markdown code blocks (```json) or any conversational text around the JSON.\n\n"
            f"EXPECTED SCHEMA:\n{schema_json}"
        )

        logger.info("Issuing structured request to model %s...", self.model_name)
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": augmented_system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **self._chat_completion_kwargs(
                temperature=settings.LLM_TEMPERATURE if temperature is None else temperature
            ),
        )

        if getattr(response, "choices", None) is None:
            logger.error(
                "Received invalid response structure from %s: %s",
                self.model_name,
                response,
            )
            raise ValueError(f"Provider {self.model_name} returned an invalid response.")

        if len(response.choices) == 0:
            logger.error("Received 0 choices from %s: %s", self.model_name, response)
            raise ValueError(f"Provider {self.model_name} returned no output.")

        text_response = response.choices[0].message.content or ""

        parse_candidates = structured_text_candidates(text_response)
        if not parse_candidates:
            raise ValueError("Model returned empty content for structured response")

        parse_errors: list[str] = []
        for candidate in parse_candidates:
            try:
                parsed_data = json.loads(candidate, strict=False)
                result = response_schema.model_validate(parsed_data)
            except (json.JSONDecodeError, ValidationError) as candidate_error:
                parse_errors.append(str(candidate_error))
                continue
            logger.info("Received structured response from %s.", self.model_name)
            return result

        logger.error(
            "Unable to parse structured response from %s: %s",
            self.model_name,
            parse_errors[0],
        )
        raise ValueError(
            "Unable to parse structured response after candidate extraction: "
            + " | ".join(parse_errors[:3])
        )
