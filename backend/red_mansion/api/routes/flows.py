import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from red_mansion.api.deps import CurrentUser, LLMClientDep, PerplexityClientDep
from red_mansion.flows.base import BaseFlow
from red_mansion.flows.character_map import CharacterRelationshipMapFlow
from red_mansion.flows.companion_guidance import CompanionGuidanceFlow
from red_mansion.flows.connect_themes import ConnectThemesFlow
from red_mansion.flows.context_analysis import ContextAnalysisFlow
from red_mansion.flows.errors import FlowError, FlowValidationError
from red_mansion.flows.explain_text_selection import ExplainTextSelectionFlow
from red_mansion.flows.goal_suggestions import GoalSuggestionsFlow
from red_mansion.flows.learning_analysis import LearningAnalysisFlow
from red_mansion.flows.personalized_goals import PersonalizedGoalFlow
from red_mansion.flows.schemas import ExplainTextSelectionInput, ExplainTextSelectionOutput
from red_mansion.flows.special_topic import SpecialTopicFrameworkFlow
from red_mansion.flows.writing_coach import WritingCoachFlow

router = APIRouter(prefix="/flows", tags=["flows"])
logger = logging.getLogger(__name__)

STRICT_FLOWS: tuple[type[BaseFlow], ...] = (
    ConnectThemesFlow,
    ContextAnalysisFlow,
    LearningAnalysisFlow,
    CompanionGuidanceFlow,
    WritingCoachFlow,
    GoalSuggestionsFlow,
    SpecialTopicFrameworkFlow,
    CharacterRelationshipMapFlow,
    PersonalizedGoalFlow,
)


def flow_http_error(exc: FlowError) -> HTTPException:
    if isinstance(exc, FlowValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": exc.message, "errors": exc.errors},
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)


def _register_strict_flow(flow_cls: type[BaseFlow]) -> None:
    request_schema = flow_cls.request_schema

    async def run_flow(
        payload: request_schema,  # type: ignore[valid-type]
        current_user: CurrentUser,
        llm: LLMClientDep,
    ) -> Any:
        flow = flow_cls(llm=llm)
        try:
            return await flow.run(payload)
        except FlowError as exc:
            logger.warning("Flow %s failed for user %s: %s", flow_cls.name, current_user.id, exc.message)
            raise flow_http_error(exc) from exc

    run_flow.__name__ = flow_cls.name
    run_flow.__doc__ = (flow_cls.__doc__ or "").strip() or None
    router.add_api_route(
        f"/{flow_cls.name}",
        run_flow,
        methods=["POST"],
        response_model=flow_cls.response_schema,
        name=flow_cls.name,
    )


for _flow_cls in STRICT_FLOWS:
    _register_strict_flow(_flow_cls)


@router.post(f"/{ExplainTextSelectionFlow.name}", response_model=ExplainTextSelectionOutput)
async def explain_text_selection(
    payload: ExplainTextSelectionInput,
    current_user: CurrentUser,
    client: PerplexityClientDep,
) -> Any:
    """
    Explain a selected passage. Provider failures come back as a 200 with a
    fallback explanation.
    """
    flow = ExplainTextSelectionFlow(client=client)
    try:
        return await flow.run(payload)
    except FlowError as exc:
        raise flow_http_error(exc) from exc
