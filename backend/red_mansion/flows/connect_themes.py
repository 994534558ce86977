from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.connect_themes import (
    CONNECT_THEMES_SYSTEM_PROMPT,
    CONNECT_THEMES_TEMPLATE,
)
from red_mansion.flows.schemas import ConnectThemesInput, ConnectThemesOutput


class ConnectThemesFlow(BaseFlow[ConnectThemesInput, ConnectThemesOutput]):
    """
    Connects the themes of the chapter being read to modern life, for the
    modern-relevance page.
    """

    name = "connect_themes_to_modern_contexts"
    request_schema = ConnectThemesInput
    response_schema = ConnectThemesOutput
    system_prompt = CONNECT_THEMES_SYSTEM_PROMPT
    template = CONNECT_THEMES_TEMPLATE
    failure_message = "AI模型未能生成有效的現代關聯見解。"
