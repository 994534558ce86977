from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, Field


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


NonEmptyStr = Annotated[str, AfterValidator(_require_text)]


class FlowRequest(BaseModel):
    """Base for every flow input."""

    def template_fields(self) -> dict[str, Any]:
        return self.model_dump()


class FlowResponse(BaseModel):
    """Base for every flow output."""


# Explain a selection


class ExplainTextSelectionInput(FlowRequest):
    selected_text: NonEmptyStr = Field(description="The text snippet selected by the user.")
    chapter_context: NonEmptyStr = Field(
        description="A snippet of the current chapter content giving context to the selection."
    )
    user_question: NonEmptyStr = Field(
        description="The user's specific question about the selected text."
    )


class ExplainTextSelectionOutput(FlowResponse):
    explanation: NonEmptyStr = Field(
        description="Markdown answer to the user's question, in Traditional Chinese."
    )


# Modern relevance


class ConnectThemesInput(FlowRequest):
    chapter_text: NonEmptyStr = Field(description="The text of the chapter currently being read.")


class ConnectThemesOutput(FlowResponse):
    modern_context_insights: NonEmptyStr = Field(
        description="Markdown insights connecting the chapter's themes to modern life."
    )


# Context analysis


class ContextAnalysisInput(FlowRequest):
    text: NonEmptyStr = Field(description="The current text being read by the student.")
    chapter: NonEmptyStr = Field(description="The current chapter of the book.")


class ContextAnalysisOutput(FlowResponse):
    word_sense_analysis: NonEmptyStr = Field(
        description="Markdown analysis of difficult words or phrases in context."
    )
    character_relationships: NonEmptyStr = Field(
        description="Markdown description of the character relationships relevant to the text."
    )


# Learning analytics


class LearningAnalysisInput(FlowRequest):
    student_id: NonEmptyStr = Field(description="The ID of the student.")
    learning_data: NonEmptyStr = Field(
        description="Completed chapters, time spent, quiz scores and notes."
    )


class LearningAnalysisOutput(FlowResponse):
    cognitive_heatmap: NonEmptyStr = Field(
        description="Description of a heatmap of the student's understanding per content area."
    )
    comprehension_deviations: NonEmptyStr = Field(
        description="Potential misunderstandings suggested by the learning data."
    )
    recommendations: NonEmptyStr = Field(
        description="How to adjust difficulty and format of recommended content."
    )


# Companion guidance


class CompanionGuidanceInput(FlowRequest):
    user_question: NonEmptyStr = Field(description="用戶在學習目標頁面提出的具體問題。")
    user_learning_summary: str | None = Field(
        default=None, description="用戶當前學習情況的簡要概述。"
    )
    user_goals: list[NonEmptyStr] | None = Field(
        default=None, description="用戶當前設定的學習目標列表。"
    )


class CompanionGuidanceOutput(FlowResponse):
    guidance: NonEmptyStr = Field(description="AI學伴針對用戶問題提供的 Markdown 指導性回答。")


# Writing coach


class WritingCoachInput(FlowRequest):
    text: NonEmptyStr = Field(description="The text to be reviewed by the writing coach.")


class WritingCoachOutput(FlowResponse):
    structure_suggestions: NonEmptyStr = Field(
        description="Suggestions for improving the structure of the text."
    )
    bias_detection: NonEmptyStr = Field(description="Identified biases in the text.")
    completeness_check: NonEmptyStr = Field(
        description="Analysis of the completeness of the arguments in the text."
    )
    expression_optimizations: NonEmptyStr = Field(
        description="Suggestions for optimizing the expression in the text."
    )


# SOLO goal suggestions


class GoalSuggestionsInput(FlowRequest):
    user_learning_summary: NonEmptyStr = Field(description="用戶當前學習情況的簡要概述。")


GoalList = Annotated[list[NonEmptyStr], Field(min_length=1)]


class GoalSuggestionsOutput(FlowResponse):
    single_point_goals: GoalList = Field(description="單點結構目標建議。")
    multi_point_goals: GoalList = Field(description="多點結構目標建議。")
    relational_goals: GoalList = Field(description="關聯結構目標建議。")
    extended_abstract_goals: GoalList = Field(description="抽象拓展目標建議。")


# Special topic research framework


class SpecialTopicFrameworkInput(FlowRequest):
    reading_data: NonEmptyStr = Field(
        description="Reading progress, notes and interests of the student."
    )
    selected_topic: NonEmptyStr = Field(description="The special topic selected by the student.")


class SpecialTopicFrameworkOutput(FlowResponse):
    research_framework: NonEmptyStr = Field(description="The generated research framework.")
    related_materials: NonEmptyStr = Field(description="Related materials for the topic.")
    analysis_tools: NonEmptyStr = Field(description="Analysis tools for the research.")


# Character relationship map


class CharacterRelationshipMapInput(FlowRequest):
    text: NonEmptyStr = Field(description="The text from which to extract character relationships.")


class CharacterRelationshipMapOutput(FlowResponse):
    description: NonEmptyStr = Field(
        description="Character relationships in the text, structured for rendering as a graph."
    )


# Personalized teaching goals

SoloLevel = Literal[
    "Prestructural", "Unistructural", "Multistructural", "Relational", "Extended Abstract"
]


class UserData(BaseModel):
    reading_interest: NonEmptyStr
    ability_level: NonEmptyStr
    learning_style: NonEmptyStr


class PersonalizedGoalInput(FlowRequest):
    user_data: UserData
    class_characteristics: NonEmptyStr = Field(
        description="Characteristics of the class, like average reading level and diversity."
    )
    solo_level: SoloLevel


class TeachingGoal(BaseModel):
    goal: NonEmptyStr = Field(description="A specific SMART teaching goal.")


class PersonalizedGoalOutput(FlowResponse):
    teaching_goals: list[TeachingGoal] = Field(min_length=1)


# Perplexity-backed question answering

PerplexityModelKey = Literal["sonar-pro", "sonar-reasoning", "sonar-reasoning-pro"]
ReasoningEffort = Literal["low", "medium", "high"]
QuestionContext = Literal["character", "plot", "theme", "general"]


class PerplexityQAInput(FlowRequest):
    user_question: NonEmptyStr = Field(max_length=1000, description="使用者關於《紅樓夢》的問題")
    selected_text: str | None = Field(default=None, description="使用者選取的文字片段")
    chapter_context: str | None = Field(default=None, description="當前章回的上下文片段")
    current_chapter: str | None = Field(default=None, description="當前章回名稱/編號")
    model_key: PerplexityModelKey | None = None
    reasoning_effort: ReasoningEffort | None = None
    question_context: QuestionContext = "general"
    show_thinking_process: bool = True
    include_detailed_citations: bool = True
    temperature: float | None = Field(default=None, ge=0, le=1)
    max_tokens: int | None = Field(default=None, ge=1, le=8000)


class PerplexityCitation(BaseModel):
    number: str
    title: str
    url: str
    type: Literal["web_citation", "default", "academic", "news"] = "web_citation"
    snippet: str | None = None
    domain: str | None = None


class PerplexityGroundingMetadata(BaseModel):
    search_queries: list[str] = Field(default_factory=list)
    web_sources: list[PerplexityCitation] = Field(default_factory=list)
    grounding_successful: bool = False
    confidence_score: float | None = None


class PerplexityQAResponse(FlowResponse):
    question: str
    answer: str
    raw_answer: str = ""
    citations: list[PerplexityCitation] = Field(default_factory=list)
    grounding_metadata: PerplexityGroundingMetadata = Field(
        default_factory=PerplexityGroundingMetadata
    )
    model_used: str
    model_key: str
    reasoning_effort: str | None = None
    question_context: str | None = None
    processing_time: float = 0.0
    success: bool
    streaming: bool = False
    timestamp: str
    answer_length: int = 0
    question_length: int = 0
    citation_count: int = 0
    error: str | None = None
    usage: dict[str, Any] | None = None


class PerplexityStreamingChunk(BaseModel):
    content: str = ""
    full_content: str = ""
    chunk_index: int
    is_complete: bool = False
    citations: list[PerplexityCitation] = Field(default_factory=list)
    search_queries: list[str] = Field(default_factory=list)
    response_time: float = 0.0
    timestamp: str
    error: str | None = None


class PerplexityBatchQAInput(BaseModel):
    questions: list[PerplexityQAInput] = Field(min_length=1)
    # Applied under each question's own fields.
    shared_config: dict[str, Any] = Field(default_factory=dict)
    max_concurrency: int = Field(default=3, ge=1, le=10)


class PerplexityBatchQAResponse(BaseModel):
    responses: list[PerplexityQAResponse]
    total_questions: int
    successful_questions: int
    failed_questions: int
    total_processing_time: float
    average_processing_time: float
    timestamp: str
    success: bool
    errors: list[str] = Field(default_factory=list)
