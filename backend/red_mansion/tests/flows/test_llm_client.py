from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from red_mansion.flows.llm_client import LLMClient, structured_text_candidates
from red_mansion.tests.utils import openai_client_returning


class DummyModel(BaseModel):
    name: str
    age: int


@pytest.mark.asyncio
async def test_llm_client_json_parsing():
    mock_client_instance, mock_completions = openai_client_returning('{"name": "黛玉", "age": 12}')

    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        with patch("red_mansion.flows.llm_client.settings.LLM_API_KEY", "dummy_key"):
            client = LLMClient(model_name="test-model")

            result = await client.generate_structured(
                system_prompt="You are a helpful assistant.",
                user_prompt="Give me Daiyu's details",
                response_schema=DummyModel,
            )

            assert isinstance(result, DummyModel)
            assert result.name == "黛玉"
            assert result.age == 12
            mock_completions.create.assert_called_once()


@pytest.mark.asyncio
async def test_llm_client_reads_fenced_json_and_sends_schema():
    mock_client_instance, mock_completions = openai_client_returning(
        'Here you go:\n```json\n{"name": "寶玉", "age": 13}\n```'
    )

    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="gemini-2.0-flash", api_key="dummy_key")
        result = await client.generate_structured("sys", "user", DummyModel, temperature=0.5)

    assert result.name == "寶玉"
    kwargs = mock_completions.create.call_args.kwargs
    assert kwargs["model"] == "gemini-2.0-flash"
    assert kwargs["temperature"] == 0.5
    assert "EXPECTED SCHEMA" in kwargs["messages"][0]["content"]
    assert kwargs["messages"][1] == {"role": "user", "content": "user"}


@pytest.mark.asyncio
async def test_llm_client_omits_temperature_for_gpt5():
    mock_client_instance, mock_completions = openai_client_returning('{"name": "a", "age": 1}')

    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="gpt-5-mini", api_key="dummy_key")
        await client.generate_structured("sys", "user", DummyModel)

    assert "temperature" not in mock_completions.create.call_args.kwargs


@pytest.mark.asyncio
async def test_llm_client_makes_a_single_attempt_on_invalid_output():
    mock_client_instance, mock_completions = openai_client_returning(
        '{"name": "missing age"}', '{"name": "never read", "age": 1}'
    )

    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model", api_key="dummy_key")
        with pytest.raises(ValueError, match="Unable to parse structured response"):
            await client.generate_structured("sys", "user", DummyModel)

    assert mock_completions.create.await_count == 1


@pytest.mark.asyncio
async def test_llm_client_rejects_empty_content_and_missing_choices():
    mock_client_instance, _ = openai_client_returning("   ")
    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model", api_key="dummy_key")
        with pytest.raises(ValueError, match="empty content"):
            await client.generate_structured("sys", "user", DummyModel)

    empty_response = MagicMock()
    empty_response.choices = []
    mock_client_instance.chat.completions.create = AsyncMock(return_value=empty_response)
    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        client = LLMClient(model_name="test-model", api_key="dummy_key")
        with pytest.raises(ValueError, match="no output"):
            await client.generate_structured("sys", "user", DummyModel)


def test_structured_text_candidates_handles_prefixes_and_prose():
    assert structured_text_candidates("") == []

    candidates = structured_text_candidates('json: {"a": 1}')
    assert '{"a": 1}' in candidates

    candidates = structured_text_candidates('分析如下 {"a": {"b": "}"}} 以上')
    assert '{"a": {"b": "}"}}' in candidates
