import logging

from fastapi import APIRouter, Depends, HTTPException

from striker.api.schemas import ProgressOut
from striker.core.config import get_settings
from striker.core.deps import get_progress_store
from striker.services.progress_store import LearnerState, ProgressStore
from striker.services.progression import get_weak_skills, league_difficulty_band
from striker.services.telemetry import instrument

logger = logging.getLogger("striker.api.progress")
router = APIRouter(prefix="/api/v1/progress", tags=["progress"])


def progress_out(state: LearnerState) -> ProgressOut:
    threshold = get_settings().weak_skill_threshold
    return ProgressOut(
        learner_id=state.learner_id,
        current_difficulty=state.current_difficulty,
        current_league=state.current_league,
        xp=state.xp,
        coins=state.coins,
        streak_current=state.streak_current,
        streak_best=state.streak_best,
        skill_model=state.skill_model,
        questions_answered=state.questions_answered,
        weak_skills=get_weak_skills(state.skill_model, threshold),
        difficulty_band=list(league_difficulty_band(state.current_league)),
    )


@router.get("/{learner_id}", response_model=ProgressOut)
@instrument(route="/api/v1/progress", version="v1")
async def get_progress(learner_id: str, store: ProgressStore = Depends(get_progress_store)):
    state = store.get(learner_id)
    if state is None:
        raise HTTPException(status_code=404, detail=f"Unknown learner: {learner_id}")
    return progress_out(state)
