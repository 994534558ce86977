import logging
from abc import ABC
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from red_mansion.core.config import settings
from red_mansion.flows.errors import FlowError, FlowValidationError
from red_mansion.flows.llm_client import LLMClient
from red_mansion.flows.schemas import FlowRequest, FlowResponse
from red_mansion.flows.templates import render_prompt

logger = logging.getLogger(__name__)

InType = TypeVar("InType", bound=FlowRequest)
OutType = TypeVar("OutType", bound=FlowResponse)


def validate_flow_request(
    flow_name: str, schema: type[InType], input_data: InType | Mapping[str, Any]
) -> InType:
    if isinstance(input_data, schema):
        return input_data
    try:
        if isinstance(input_data, BaseModel):
            input_data = input_data.model_dump()
        return schema.model_validate(input_data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise FlowValidationError(
            f"輸入驗證失敗: {fields}",
            flow_name=flow_name,
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc


class BaseFlow(ABC, Generic[InType, OutType]):
    """Validate -> render -> call -> validate pipeline with a strict failure policy.

    Subclasses only declare their schemas, prompts and failure message. The
    LLM client is injectable so tests can substitute a fake provider.
    """

    name: ClassVar[str]
    request_schema: ClassVar[type[FlowRequest]]
    response_schema: ClassVar[type[FlowResponse]]
    system_prompt: ClassVar[str]
    template: ClassVar[str]
    failure_message: ClassVar[str] = "AI模型未能生成有效的回應。"

    def __init__(self, model_name: str | None = None, llm: LLMClient | None = None):
        self.llm = llm or LLMClient(model_name=model_name or settings.MODEL_DEFAULT)

    def validate_request(self, input_data: InType | Mapping[str, Any]) -> InType:
        return validate_flow_request(self.name, self.request_schema, input_data)

    def render(self, request: InType) -> str:
        return self.render_fields(request.template_fields())

    def render_fields(self, fields: dict[str, Any]) -> str:
        return render_prompt(self.template, fields)

    async def run(self, input_data: InType | Mapping[str, Any]) -> OutType:
        request = self.validate_request(input_data)
        prompt = self.render(request)
        try:
            output = await self.llm.generate_structured(
                system_prompt=self.system_prompt,
                user_prompt=prompt,
                response_schema=self.response_schema,
            )
        except Exception as exc:
            logger.error("Flow %s did not produce a valid output: %s", self.name, exc)
            raise FlowError(self.failure_message, flow_name=self.name) from exc
        return output  # type: ignore[return-value]
