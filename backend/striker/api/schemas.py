from pydantic import BaseModel, Field
from typing import Any, Optional, Union

from striker.models.bank import BankItem


class NextQuestionRequest(BaseModel):
    learner_id: str
    session_id: str
    seed: Optional[int] = None
    skill_tag: Optional[str] = None


class QuestionOut(BaseModel):
    """What the client sees of an item; the answer stays server-side until graded."""
    id: str
    domain: str
    skill_tag: str
    question_type: str
    global_difficulty: int
    prompt: str
    choices: Optional[list[str]] = None
    visual: Optional[dict[str, Any]] = None

    @classmethod
    def from_item(cls, item: BankItem) -> "QuestionOut":
        return cls(
            id=item.id,
            domain=item.domain,
            skill_tag=item.skill_tag,
            question_type=item.question_type,
            global_difficulty=item.global_difficulty,
            prompt=item.prompt,
            choices=item.choices,
            visual=item.visual,
        )


class NextQuestionResponse(BaseModel):
    session_id: str
    question_index: int
    source: str  # "bank" | "procedural"
    question: QuestionOut


class SubmitAnswerRequest(BaseModel):
    learner_id: str
    session_id: str
    item_id: str
    answer: Union[str, list[str]]
    response_time_ms: int = Field(default=0, ge=0)


class ProgressOut(BaseModel):
    learner_id: str
    current_difficulty: int
    current_league: str
    xp: int
    coins: int
    streak_current: int
    streak_best: int
    skill_model: dict[str, float] = {}
    questions_answered: int = 0
    weak_skills: list[str] = []
    difficulty_band: list[int] = []


class SubmitAnswerResponse(BaseModel):
    correct: bool
    correct_answer: Union[str, list[str]]
    explanation: str = ""
    xp_gained: int
    coins_gained: int
    difficulty_changed: bool = False
    promoted_to: Optional[str] = None
    reward_events: list[dict[str, Any]] = []
    progress: ProgressOut


class AssessmentAttemptIn(BaseModel):
    skill_tag: str
    correct: bool
    response_time_ms: int = Field(default=0, ge=0)


class AssessmentRequest(BaseModel):
    learner_id: str
    attempts: list[AssessmentAttemptIn] = Field(min_length=1)


class AssessmentResponse(BaseModel):
    overall_score: int
    per_skill_scores: dict[str, int]
    starting_difficulty: int
    starting_league: str
    progress: ProgressOut


class AssessmentStartRequest(BaseModel):
    learner_id: str
    seed: Optional[int] = None


class AssessmentStartResponse(BaseModel):
    assessment_id: str
    question_index: int
    questions_remaining: int
    source: str
    question: QuestionOut


class AssessmentAnswerRequest(BaseModel):
    assessment_id: str
    item_id: str
    answer: Union[str, list[str]]
    response_time_ms: int = Field(default=0, ge=0)


class AssessmentAnswerResponse(BaseModel):
    correct: bool
    correct_answer: Union[str, list[str]]
    explanation: str = ""
    questions_remaining: int
    complete: bool = False
    question_index: Optional[int] = None
    next_question: Optional[QuestionOut] = None
    result: Optional[AssessmentResponse] = None


class BankStatsResponse(BaseModel):
    total: int
    by_domain: dict[str, int]
    by_difficulty: dict[str, int]
