from red_mansion.flows.base import BaseFlow
from red_mansion.flows.prompts.character_map import (
    CHARACTER_MAP_SYSTEM_PROMPT,
    CHARACTER_MAP_TEMPLATE,
)
from red_mansion.flows.schemas import (
    CharacterRelationshipMapInput,
    CharacterRelationshipMapOutput,
)


class CharacterRelationshipMapFlow(
    BaseFlow[CharacterRelationshipMapInput, CharacterRelationshipMapOutput]
):
    name = "character_relationship_map"
    request_schema = CharacterRelationshipMapInput
    response_schema = CharacterRelationshipMapOutput
    system_prompt = CHARACTER_MAP_SYSTEM_PROMPT
    template = CHARACTER_MAP_TEMPLATE
    failure_message = "AI模型未能生成有效的人物關係描述。"
