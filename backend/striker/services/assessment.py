"""
Placement assessment, run and graded on the server.

A run serves a fixed number of questions: the first eight target difficulty
2, the rest difficulty 3. Each answer is graded against the item that was
served, so the client never reports its own correctness. When the last
answer is in, the attempts are scored with score_assessment and the result
sets the learner's starting difficulty, league and skill model.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional

from striker.models.bank import BankItem
from striker.services.progress_store import LearnerState
from striker.services.progression import (
    AssessmentResult,
    Attempt,
    score_assessment,
    skill_model_from_assessment,
)
from striker.services.session_history import SessionHistory

logger = logging.getLogger("striker.assessment")

ASSESSMENT_LENGTH = 15
START_DIFFICULTY = 2
RAMP_DIFFICULTY = 3
RAMP_AFTER_INDEX = 7


def assessment_difficulty(question_index: int) -> int:
    return RAMP_DIFFICULTY if question_index > RAMP_AFTER_INDEX else START_DIFFICULTY


@dataclass
class AssessmentSession:
    assessment_id: str
    learner_id: str
    seed: int
    length: int = ASSESSMENT_LENGTH
    attempts: list[Attempt] = field(default_factory=list)
    history: Optional[SessionHistory] = None

    def __post_init__(self):
        if self.history is None:
            self.history = SessionHistory(
                session_id=self.assessment_id,
                learner_id=self.learner_id,
                seed=self.seed,
            )

    @property
    def served_item(self) -> Optional[BankItem]:
        return self.history.last_item

    @property
    def next_difficulty(self) -> int:
        return assessment_difficulty(self.history.question_index)

    @property
    def remaining(self) -> int:
        return max(0, self.length - len(self.attempts))

    @property
    def complete(self) -> bool:
        return len(self.attempts) >= self.length

    def record_answer(self, item: BankItem, correct: bool, response_time_ms: int = 0) -> Attempt:
        """Log a graded answer. Mastery is keyed by domain, as in practice."""
        if self.complete:
            raise ValueError(f"assessment {self.assessment_id} already has {self.length} answers")
        attempt = Attempt(skill_tag=str(item.domain), correct=correct, response_time_ms=response_time_ms)
        self.attempts.append(attempt)
        return attempt

    def result(self) -> AssessmentResult:
        if not self.complete:
            raise ValueError(f"assessment {self.assessment_id} has {self.remaining} question(s) left")
        return score_assessment(self.attempts)


def apply_assessment(state: LearnerState, result: AssessmentResult) -> LearnerState:
    """Starting point from a scored assessment; existing skill keys not assessed are kept."""
    return replace(
        state,
        current_difficulty=result.starting_difficulty,
        current_league=result.starting_league.value,
        skill_model={**state.skill_model, **skill_model_from_assessment(result)},
    )


class AssessmentStore:
    def start(self, learner_id: str, seed: int, length: int = ASSESSMENT_LENGTH) -> AssessmentSession:
        raise NotImplementedError

    def get(self, assessment_id: str) -> Optional[AssessmentSession]:
        raise NotImplementedError

    def end(self, assessment_id: str) -> Optional[AssessmentSession]:
        raise NotImplementedError


class InMemoryAssessmentStore(AssessmentStore):
    def __init__(self):
        self._data: dict[str, AssessmentSession] = {}

    def start(self, learner_id: str, seed: int, length: int = ASSESSMENT_LENGTH) -> AssessmentSession:
        session = AssessmentSession(
            assessment_id=uuid.uuid4().hex,
            learner_id=learner_id,
            seed=seed,
            length=length,
        )
        self._data[session.assessment_id] = session
        logger.debug("assessment started: %s learner=%s length=%d", session.assessment_id, learner_id, length)
        return session

    def get(self, assessment_id: str) -> Optional[AssessmentSession]:
        return self._data.get(assessment_id)

    def end(self, assessment_id: str) -> Optional[AssessmentSession]:
        return self._data.pop(assessment_id, None)
