from unittest.mock import AsyncMock, MagicMock


def openai_client_returning(*contents: str) -> tuple[AsyncMock, MagicMock]:
    """Build an AsyncOpenAI stand-in whose chat completions return `contents` in order."""
    responses = []
    for content in contents:
        mock_message = MagicMock()
        mock_message.content = content

        mock_choice = MagicMock()
        mock_choice.message = mock_message

        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        responses.append(mock_response)

    mock_completions = MagicMock()
    mock_completions.create = AsyncMock(side_effect=responses)

    mock_chat = MagicMock()
    mock_chat.completions = mock_completions

    mock_client_instance = AsyncMock()
    mock_client_instance.chat = mock_chat
    return mock_client_instance, mock_completions

