"""
Per-session anti-repetition history.

Tracks the last 100 served item ids and the last 5 skill tags (FIFO) so the
selector can avoid immediate repeats. One writer per session: the API applies
a session's updates in request order.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

from striker.models.bank import MAX_RECENT_IDS, MAX_RECENT_SKILL_TAGS, BankItem, SelectionCriteria

logger = logging.getLogger("striker.session_history")


@dataclass
class SessionHistory:
    session_id: str
    learner_id: str = ""
    seed: int = 0
    question_index: int = 0
    recent_ids: deque = field(default_factory=lambda: deque(maxlen=MAX_RECENT_IDS))
    recent_skill_tags: deque = field(default_factory=lambda: deque(maxlen=MAX_RECENT_SKILL_TAGS))
    last_item: Optional[BankItem] = None

    def record(self, item: BankItem) -> None:
        """Append the served item; the oldest entries fall off."""
        self.recent_ids.append(item.id)
        self.recent_skill_tags.append(item.skill_tag)
        self.last_item = item
        self.question_index += 1

    def criteria(
        self,
        target_difficulty: int,
        weak_skills: Optional[list[str]] = None,
        skill_tag: Optional[str] = None,
    ) -> SelectionCriteria:
        return SelectionCriteria(
            target_difficulty=target_difficulty,
            skill_tag=skill_tag,
            weak_skills=list(weak_skills or []),
            recent_ids=list(self.recent_ids),
            recent_skill_tags=list(self.recent_skill_tags),
        )


class SessionHistoryStore:
    def get(self, session_id: str) -> Optional[SessionHistory]:
        raise NotImplementedError

    def start(self, session_id: str, learner_id: str, seed: int) -> SessionHistory:
        raise NotImplementedError

    def end(self, session_id: str) -> Optional[SessionHistory]:
        raise NotImplementedError


class InMemorySessionHistoryStore(SessionHistoryStore):
    def __init__(self, max_recent_ids: int = MAX_RECENT_IDS, max_recent_skill_tags: int = MAX_RECENT_SKILL_TAGS):
        self._data: dict[str, SessionHistory] = {}
        if max_recent_ids > MAX_RECENT_IDS or max_recent_skill_tags > MAX_RECENT_SKILL_TAGS:
            logger.warning(
                "history windows clamped to %d ids / %d skill tags (asked for %d / %d)",
                MAX_RECENT_IDS, MAX_RECENT_SKILL_TAGS, max_recent_ids, max_recent_skill_tags,
            )
        self.max_recent_ids = min(max_recent_ids, MAX_RECENT_IDS)
        self.max_recent_skill_tags = min(max_recent_skill_tags, MAX_RECENT_SKILL_TAGS)

    def get(self, session_id: str) -> Optional[SessionHistory]:
        return self._data.get(session_id)

    def start(self, session_id: str, learner_id: str, seed: int) -> SessionHistory:
        history = SessionHistory(
            session_id=session_id,
            learner_id=learner_id,
            seed=seed,
            recent_ids=deque(maxlen=self.max_recent_ids),
            recent_skill_tags=deque(maxlen=self.max_recent_skill_tags),
        )
        self._data[session_id] = history
        logger.debug("session started: %s learner=%s seed=%d", session_id, learner_id, seed)
        return history

    def end(self, session_id: str) -> Optional[SessionHistory]:
        return self._data.pop(session_id, None)
