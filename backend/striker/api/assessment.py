import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException

from striker.api.progress import progress_out
from striker.api.schemas import (
    AssessmentAnswerRequest,
    AssessmentAnswerResponse,
    AssessmentRequest,
    AssessmentResponse,
    AssessmentStartRequest,
    AssessmentStartResponse,
    QuestionOut,
)
from striker.core.config import get_settings
from striker.core.deps import get_assessment_store, get_bank_store, get_progress_store
from striker.services.assessment import AssessmentSession, AssessmentStore, apply_assessment
from striker.services.bank_store import BankStore
from striker.services.practice import grade_answer, serve_next
from striker.services.progress_store import LearnerState, ProgressStore
from striker.services.progression import AssessmentResult, Attempt, score_assessment
from striker.services.telemetry import emit_event, instrument

logger = logging.getLogger("striker.api.assessment")
router = APIRouter(prefix="/api/v1/assessment", tags=["assessment"])


def _serve(session: AssessmentSession, bank: BankStore):
    settings = get_settings()
    difficulty = session.next_difficulty
    try:
        pool = bank.working_set(difficulty)
    except Exception as e:
        logger.warning("[assessment] bank store unavailable, using procedural fallback: %s", e)
        pool = []
    return serve_next(session.history, difficulty, pool, settings.selector_pool_cap)


def _finish(learner_id: str, result: AssessmentResult, progress: ProgressStore) -> AssessmentResponse:
    state = apply_assessment(progress.get(learner_id) or LearnerState(learner_id=learner_id), result)
    progress.upsert(state)
    logger.info(
        "[assessment] %s scored %d -> d%d %s",
        learner_id, result.overall_score, result.starting_difficulty, result.starting_league.value,
    )
    return AssessmentResponse(
        overall_score=result.overall_score,
        per_skill_scores=result.per_skill_scores,
        starting_difficulty=result.starting_difficulty,
        starting_league=result.starting_league.value,
        progress=progress_out(state),
    )


@router.post("/start", response_model=AssessmentStartResponse, status_code=201)
@instrument(route="/api/v1/assessment/start", version="v1")
async def start(
    request: AssessmentStartRequest,
    bank: BankStore = Depends(get_bank_store),
    assessments: AssessmentStore = Depends(get_assessment_store),
):
    seed = request.seed if request.seed is not None else secrets.randbits(32)
    session = assessments.start(request.learner_id, seed, length=get_settings().assessment_length)
    item, source = _serve(session, bank)

    emit_event("assessment_started", route="/api/v1/assessment/start", version="v1",
               learner_id=request.learner_id, session_id=session.assessment_id, item_id=item.id)
    return AssessmentStartResponse(
        assessment_id=session.assessment_id,
        question_index=0,
        questions_remaining=session.remaining,
        source=source,
        question=QuestionOut.from_item(item),
    )


@router.post("/answer", response_model=AssessmentAnswerResponse)
@instrument(route="/api/v1/assessment/answer", version="v1")
async def answer(
    request: AssessmentAnswerRequest,
    bank: BankStore = Depends(get_bank_store),
    progress: ProgressStore = Depends(get_progress_store),
    assessments: AssessmentStore = Depends(get_assessment_store),
):
    session = assessments.get(request.assessment_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown assessment: {request.assessment_id}")

    item = session.served_item
    if item is None or item.id != request.item_id:
        raise HTTPException(status_code=409, detail=f"Item {request.item_id} is not the question being asked")

    correct = grade_answer(item, request.answer)
    session.record_answer(item, correct, request.response_time_ms)
    emit_event("assessment_answered", route="/api/v1/assessment/answer", version="v1",
               learner_id=session.learner_id, session_id=session.assessment_id,
               skill_tag=item.skill_tag, item_id=item.id, ok=correct)

    if session.complete:
        result = _finish(session.learner_id, session.result(), progress)
        assessments.end(session.assessment_id)
        return AssessmentAnswerResponse(
            correct=correct,
            correct_answer=item.correct_answer,
            explanation=item.explanation,
            questions_remaining=0,
            complete=True,
            result=result,
        )

    index = session.history.question_index
    next_item, _ = _serve(session, bank)
    return AssessmentAnswerResponse(
        correct=correct,
        correct_answer=item.correct_answer,
        explanation=item.explanation,
        questions_remaining=session.remaining,
        question_index=index,
        next_question=QuestionOut.from_item(next_item),
    )


@router.post("/score", response_model=AssessmentResponse)
@instrument(route="/api/v1/assessment/score", version="v1")
async def score(request: AssessmentRequest, progress: ProgressStore = Depends(get_progress_store)):
    """Score a full batch graded elsewhere, e.g. by an offline client replaying a finished run."""
    length = get_settings().assessment_length
    if len(request.attempts) != length:
        raise HTTPException(
            status_code=422,
            detail=f"An assessment has {length} attempts, got {len(request.attempts)}",
        )

    result = score_assessment([
        Attempt(skill_tag=a.skill_tag, correct=a.correct, response_time_ms=a.response_time_ms)
        for a in request.attempts
    ])
    out = _finish(request.learner_id, result, progress)
    emit_event("assessment_scored", route="/api/v1/assessment/score", version="v1",
               learner_id=request.learner_id, ok=True)
    return out
