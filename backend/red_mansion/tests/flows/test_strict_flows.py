from unittest.mock import patch

import pytest
from jinja2.exceptions import UndefinedError

from red_mansion.flows.character_map import CharacterRelationshipMapFlow
from red_mansion.flows.companion_guidance import CompanionGuidanceFlow
from red_mansion.flows.connect_themes import ConnectThemesFlow
from red_mansion.flows.context_analysis import ContextAnalysisFlow
from red_mansion.flows.errors import FlowError, FlowValidationError
from red_mansion.flows.goal_suggestions import GoalSuggestionsFlow
from red_mansion.flows.learning_analysis import LearningAnalysisFlow
from red_mansion.flows.personalized_goals import PersonalizedGoalFlow
from red_mansion.flows.schemas import (
    CharacterRelationshipMapOutput,
    CompanionGuidanceOutput,
    ConnectThemesOutput,
    ContextAnalysisOutput,
    GoalSuggestionsOutput,
    LearningAnalysisOutput,
    PersonalizedGoalOutput,
    SpecialTopicFrameworkOutput,
    TeachingGoal,
    WritingCoachOutput,
)
from red_mansion.flows.special_topic import SpecialTopicFrameworkFlow
from red_mansion.flows.templates import render_prompt
from red_mansion.flows.writing_coach import WritingCoachFlow
from red_mansion.tests.utils import openai_client_returning

CASES = [
    (
        ConnectThemesFlow,
        {"chapter_text": "賈雨村風塵懷閨秀。"},
        ConnectThemesOutput(modern_context_insights="## 現代職場\n功名心與人際網絡。"),
        "賈雨村風塵懷閨秀。",
    ),
    (
        ContextAnalysisFlow,
        {"text": "滿紙荒唐言，一把辛酸淚。", "chapter": "第一回"},
        ContextAnalysisOutput(
            word_sense_analysis="**荒唐言**：虛構之言。",
            character_relationships="曹雪芹自題。",
        ),
        "第一回",
    ),
    (
        LearningAnalysisFlow,
        {"student_id": "s-001", "learning_data": "完成第1-5回，測驗平均 72 分"},
        LearningAnalysisOutput(
            cognitive_heatmap="人物關係理解較弱。",
            comprehension_deviations="混淆甄士隱與賈雨村。",
            recommendations="先讀人物表。",
        ),
        "s-001",
    ),
    (
        WritingCoachFlow,
        {"text": "我認為林黛玉只是愛哭。"},
        WritingCoachOutput(
            structure_suggestions="補充論據。",
            bias_detection="以偏概全。",
            completeness_check="缺少文本引用。",
            expression_optimizations="避免「只是」。",
        ),
        "我認為林黛玉只是愛哭。",
    ),
    (
        SpecialTopicFrameworkFlow,
        {"reading_data": "讀完前八十回", "selected_topic": "大觀園的空間敘事"},
        SpecialTopicFrameworkOutput(
            research_framework="一、研究問題",
            related_materials="《紅樓夢》脂評本",
            analysis_tools="空間敘事理論",
        ),
        "大觀園的空間敘事",
    ),
    (
        CharacterRelationshipMapFlow,
        {"text": "寶玉與黛玉、寶釵。"},
        CharacterRelationshipMapOutput(description="寶玉 -> 黛玉：知己"),
        "寶玉與黛玉、寶釵。",
    ),
    (
        PersonalizedGoalFlow,
        {
            "user_data": {
                "reading_interest": "詩詞",
                "ability_level": "中等",
                "learning_style": "視覺型",
            },
            "class_characteristics": "高二，閱讀程度參差",
            "solo_level": "Relational",
        },
        PersonalizedGoalOutput(teaching_goals=[TeachingGoal(goal="比較黛玉與寶釵的詩風")]),
        "Reading Interests: 詩詞",
    ),
]


@pytest.mark.asyncio
@pytest.mark.parametrize(("flow_cls", "payload", "output", "prompt_fragment"), CASES)
async def test_flow_returns_validated_output(fake_llm, flow_cls, payload, output, prompt_fragment):
    fake_llm.generate_structured.return_value = output

    result = await flow_cls(llm=fake_llm).run(payload)

    assert result == output
    fake_llm.generate_structured.assert_awaited_once()
    kwargs = fake_llm.generate_structured.call_args.kwargs
    assert kwargs["system_prompt"] == flow_cls.system_prompt
    assert kwargs["response_schema"] is flow_cls.response_schema
    assert prompt_fragment in kwargs["user_prompt"]


@pytest.mark.asyncio
@pytest.mark.parametrize(("flow_cls", "payload", "output", "prompt_fragment"), CASES)
async def test_flow_rejects_invalid_input_without_calling_provider(
    fake_llm, flow_cls, payload, output, prompt_fragment
):
    with pytest.raises(FlowValidationError) as exc_info:
        await flow_cls(llm=fake_llm).run({})

    assert exc_info.value.flow_name == flow_cls.name
    assert exc_info.value.errors
    assert "輸入驗證失敗" in exc_info.value.message
    assert fake_llm.generate_structured.await_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(("flow_cls", "payload", "output", "prompt_fragment"), CASES)
async def test_flow_wraps_provider_failure(fake_llm, flow_cls, payload, output, prompt_fragment):
    fake_llm.generate_structured.side_effect = ValueError("Model returned empty content")

    with pytest.raises(FlowError) as exc_info:
        await flow_cls(llm=fake_llm).run(payload)

    assert not isinstance(exc_info.value, FlowValidationError)
    assert exc_info.value.message == flow_cls.failure_message
    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.parametrize(("flow_cls", "payload", "output", "prompt_fragment"), CASES)
def test_render_is_deterministic(flow_cls, payload, output, prompt_fragment, fake_llm):
    flow = flow_cls(llm=fake_llm)
    request = flow.validate_request(payload)

    assert flow.render(request) == flow.render(request)
    assert "{{" not in flow.render(request)


@pytest.mark.asyncio
async def test_blank_required_field_is_rejected(fake_llm):
    with pytest.raises(FlowValidationError) as exc_info:
        await WritingCoachFlow(llm=fake_llm).run({"text": "   "})

    assert exc_info.value.errors[0]["loc"] == ("text",)
    assert fake_llm.generate_structured.await_count == 0


@pytest.mark.asyncio
async def test_personalized_goals_rejects_unknown_solo_level(fake_llm):
    payload = dict(CASES[-1][1], solo_level="Advanced")

    with pytest.raises(FlowValidationError):
        await PersonalizedGoalFlow(llm=fake_llm).run(payload)

    assert fake_llm.generate_structured.await_count == 0


@pytest.mark.asyncio
async def test_personalized_goals_rejects_empty_goal_list_from_model():
    mock_client_instance, mock_completions = openai_client_returning('{"teaching_goals": []}')

    with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        flow = PersonalizedGoalFlow(model_name="test-model")
        with pytest.raises(FlowError) as exc_info:
            await flow.run(CASES[-1][1])

    assert exc_info.value.message == "AI模型未能生成有效的個人化教學目標。"
    mock_completions.create.assert_called_once()


class TestCompanionGuidance:
    @pytest.mark.asyncio
    async def test_optional_context_is_omitted_from_prompt(self, fake_llm):
        fake_llm.generate_structured.return_value = CompanionGuidanceOutput(guidance="先讀第三回。")

        result = await CompanionGuidanceFlow(llm=fake_llm).run(
            {"user_question": "如何開始閱讀？", "user_learning_summary": "  ", "user_goals": []}
        )

        assert result.guidance == "先讀第三回。"
        prompt = fake_llm.generate_structured.call_args.kwargs["user_prompt"]
        assert "用戶尚未提供學習概況。" in prompt
        assert "用戶尚未提供具體的學習目標。" in prompt
        assert "如何開始閱讀？" in prompt

    def test_goals_are_listed_when_present(self, fake_llm):
        flow = CompanionGuidanceFlow(llm=fake_llm)
        request = flow.validate_request(
            {
                "user_question": "下一步？",
                "user_learning_summary": "已讀十回",
                "user_goals": ["理解金陵十二釵", "背誦葬花吟"],
            }
        )

        prompt = flow.render(request)

        assert "已讀十回" in prompt
        assert "- 理解金陵十二釵\n- 背誦葬花吟" in prompt
        assert "尚未提供" not in prompt


class TestGoalSuggestions:
    @pytest.mark.asyncio
    async def test_duplicate_goals_are_removed(self, fake_llm):
        fake_llm.generate_structured.return_value = GoalSuggestionsOutput(
            single_point_goals=["認識主要人物", "認識主要人物 "],
            multi_point_goals=["比較四大家族"],
            relational_goals=["分析寶黛關係"],
            extended_abstract_goals=["評論封建制度"],
        )

        result = await GoalSuggestionsFlow(llm=fake_llm).run(
            {"user_learning_summary": "剛開始閱讀"}
        )

        assert result.single_point_goals == ["認識主要人物"]
        assert result.extended_abstract_goals == ["評論封建制度"]

    @pytest.mark.asyncio
    async def test_level_without_goals_fails(self):
        mock_client_instance, _ = openai_client_returning(
            '{"single_point_goals": [], "multi_point_goals": ["a"],'
            ' "relational_goals": ["b"], "extended_abstract_goals": ["c"]}'
        )

        with patch("red_mansion.flows.llm_client.AsyncOpenAI", return_value=mock_client_instance):
            with pytest.raises(FlowError) as exc_info:
                await GoalSuggestionsFlow(model_name="test-model").run(
                    {"user_learning_summary": "剛開始閱讀"}
                )

        assert exc_info.value.message == GoalSuggestionsFlow.failure_message


def test_render_prompt_fails_on_missing_placeholder():
    with pytest.raises(UndefinedError):
        render_prompt("Text: {{ text }}", {})
