import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException

from striker.api.progress import progress_out
from striker.api.schemas import (
    NextQuestionRequest,
    NextQuestionResponse,
    QuestionOut,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from striker.core.config import get_settings
from striker.core.deps import get_bank_store, get_history_store, get_progress_store
from striker.services.bank_store import BankStore
from striker.services.practice import apply_attempt, grade_answer, serve_next
from striker.services.progress_store import AttemptLog, LearnerState, ProgressStore
from striker.services.progression import get_weak_skills
from striker.services.session_history import SessionHistoryStore
from striker.services.telemetry import emit_event, instrument

logger = logging.getLogger("striker.api.game")
router = APIRouter(prefix="/api/v1/game", tags=["game"])


def _learner_state(store: ProgressStore, learner_id: str) -> LearnerState:
    return store.get(learner_id) or LearnerState(learner_id=learner_id)


@router.post("/next-question", response_model=NextQuestionResponse)
@instrument(route="/api/v1/game/next-question", version="v1")
async def next_question(
    request: NextQuestionRequest,
    bank: BankStore = Depends(get_bank_store),
    progress: ProgressStore = Depends(get_progress_store),
    histories: SessionHistoryStore = Depends(get_history_store),
):
    settings = get_settings()
    history = histories.get(request.session_id)
    if history is None:
        seed = request.seed if request.seed is not None else secrets.randbits(32)
        history = histories.start(request.session_id, request.learner_id, seed)

    state = _learner_state(progress, request.learner_id)
    weak = get_weak_skills(state.skill_model, settings.weak_skill_threshold)
    target = state.current_difficulty

    try:
        pool = bank.working_set(target)
    except Exception as e:
        logger.warning("[game.next_question] bank store unavailable, using procedural fallback: %s", e)
        pool = []

    index = history.question_index
    item, source = serve_next(history, target, pool, settings.selector_pool_cap, weak, request.skill_tag)
    emit_event("question_served", route="/api/v1/game/next-question", version="v1",
               learner_id=request.learner_id, session_id=request.session_id,
               skill_tag=item.skill_tag, item_id=item.id)
    return NextQuestionResponse(
        session_id=request.session_id,
        question_index=index,
        source=source,
        question=QuestionOut.from_item(item),
    )


@router.post("/submit-answer", response_model=SubmitAnswerResponse)
@instrument(route="/api/v1/game/submit-answer", version="v1")
async def submit_answer(
    request: SubmitAnswerRequest,
    bank: BankStore = Depends(get_bank_store),
    progress: ProgressStore = Depends(get_progress_store),
    histories: SessionHistoryStore = Depends(get_history_store),
):
    settings = get_settings()
    history = histories.get(request.session_id)
    if history is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {request.session_id}")

    # grade against the item actually served; procedural items only live in the history
    item = history.last_item if history.last_item and history.last_item.id == request.item_id else None
    if item is None:
        item = bank.get(request.item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Unknown item: {request.item_id}")

    correct = grade_answer(item, request.answer)
    state = _learner_state(progress, request.learner_id)

    progress.record_attempt(AttemptLog(
        learner_id=request.learner_id,
        skill_tag=item.skill_tag,
        correct=correct,
        response_time_ms=request.response_time_ms,
        item_id=item.id,
        difficulty=item.global_difficulty,
    ))
    recent = progress.recent_attempts(request.learner_id, settings.rolling_window)

    outcome = apply_attempt(
        state,
        item.domain,
        correct,
        recent,
        rolling_window=settings.rolling_window,
        adjust_every=settings.adjust_every,
    )
    progress.upsert(outcome.state)

    emit_event("answer_submitted", route="/api/v1/game/submit-answer", version="v1",
               learner_id=request.learner_id, session_id=request.session_id,
               skill_tag=item.skill_tag, item_id=item.id, ok=correct)
    return SubmitAnswerResponse(
        correct=correct,
        correct_answer=item.correct_answer,
        explanation=item.explanation,
        xp_gained=outcome.xp_gained,
        coins_gained=outcome.coins_gained,
        difficulty_changed=outcome.difficulty_changed,
        promoted_to=outcome.promoted_to.value if outcome.promoted_to else None,
        reward_events=outcome.reward_events,
        progress=progress_out(outcome.state),
    )
