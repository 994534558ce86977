from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def fake_llm() -> MagicMock:
    """An LLMClient double; set `fake_llm.generate_structured.return_value`."""
    llm = MagicMock()
    llm.generate_structured = AsyncMock()
    return llm
