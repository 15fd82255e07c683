from dataclasses import dataclass, asdict, field
from typing import Optional
import time

from striker.models.bank import League


@dataclass
class LearnerState:
    learner_id: str
    current_difficulty: int = 1
    current_league: str = League.U8.value
    xp: int = 0
    coins: int = 0
    streak_current: int = 0
    streak_best: int = 0
    skill_model: dict = field(default_factory=dict)
    questions_answered: int = 0
    updated_at: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass
class AttemptLog:
    learner_id: str
    skill_tag: str
    correct: bool
    response_time_ms: int = 0
    item_id: Optional[str] = None
    difficulty: Optional[int] = None
    created_at: float = 0.0


class ProgressStore:
    def get(self, learner_id: str) -> Optional[LearnerState]:
        raise NotImplementedError

    def upsert(self, state: LearnerState) -> LearnerState:
        raise NotImplementedError

    def record_attempt(self, attempt: AttemptLog) -> AttemptLog:
        raise NotImplementedError

    def recent_attempts(self, learner_id: str, limit: int = 20) -> list[AttemptLog]:
        """Most recent attempts, oldest first."""
        raise NotImplementedError


class InMemoryProgressStore(ProgressStore):
    def __init__(self):
        self._states: dict[str, LearnerState] = {}
        self._attempts: dict[str, list[AttemptLog]] = {}

    def get(self, learner_id: str) -> Optional[LearnerState]:
        return self._states.get(learner_id)

    def upsert(self, state: LearnerState) -> LearnerState:
        state.updated_at = time.time()
        self._states[state.learner_id] = state
        return state

    def record_attempt(self, attempt: AttemptLog) -> AttemptLog:
        attempt.created_at = time.time()
        self._attempts.setdefault(attempt.learner_id, []).append(attempt)
        return attempt

    def recent_attempts(self, learner_id: str, limit: int = 20) -> list[AttemptLog]:
        return self._attempts.get(learner_id, [])[-limit:]


class SupabaseProgressStore(ProgressStore):
    def __init__(self, supabase_client):
        self.sb = supabase_client

    @staticmethod
    def _state_from_row(d: dict) -> LearnerState:
        return LearnerState(
            learner_id=d["learner_id"],
            current_difficulty=int(d.get("current_difficulty") or 1),
            current_league=d.get("current_league") or League.U8.value,
            xp=int(d.get("xp") or 0),
            coins=int(d.get("coins") or 0),
            streak_current=int(d.get("streak_current") or 0),
            streak_best=int(d.get("streak_best") or 0),
            skill_model=dict(d.get("skill_model") or {}),
            questions_answered=int(d.get("questions_answered") or 0),
            updated_at=float(time.time()),
        )

    def get(self, learner_id: str) -> Optional[LearnerState]:
        r = (
            self.sb.table("progress")
            .select("*")
            .eq("learner_id", learner_id)
            .maybe_single()
            .execute()
        )
        data = getattr(r, "data", None)
        if not data:
            return None
        return self._state_from_row(data)

    def upsert(self, state: LearnerState) -> LearnerState:
        payload = state.to_dict()
        payload["updated_at"] = time.time()
        (
            self.sb.table("progress")
            .upsert(payload, on_conflict="learner_id")
            .execute()
        )
        return state

    def record_attempt(self, attempt: AttemptLog) -> AttemptLog:
        attempt.created_at = time.time()
        self.sb.table("attempts").insert(asdict(attempt)).execute()
        return attempt

    def recent_attempts(self, learner_id: str, limit: int = 20) -> list[AttemptLog]:
        r = (
            self.sb.table("attempts")
            .select("*")
            .eq("learner_id", learner_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        rows = getattr(r, "data", None) or []
        out = [
            AttemptLog(
                learner_id=d["learner_id"],
                skill_tag=d["skill_tag"],
                correct=bool(d["correct"]),
                response_time_ms=int(d.get("response_time_ms") or 0),
                item_id=d.get("item_id"),
                difficulty=d.get("difficulty"),
                created_at=float(d.get("created_at") or 0.0),
            )
            for d in rows
        ]
        out.reverse()
        return out
