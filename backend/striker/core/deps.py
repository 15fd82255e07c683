import logging
from functools import lru_cache
from supabase import create_client, Client

from striker.core.config import get_settings
from striker.services.assessment import AssessmentStore, InMemoryAssessmentStore
from striker.services.bank_store import BankStore, InMemoryBankStore, SupabaseBankStore, load_bank
from striker.services.progress_store import InMemoryProgressStore, ProgressStore, SupabaseProgressStore
from striker.services.session_history import InMemorySessionHistoryStore, SessionHistoryStore

logger = logging.getLogger("striker.deps")


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise RuntimeError("Supabase env vars missing")
    return create_client(settings.supabase_url, settings.supabase_service_key)


def _use_supabase() -> bool:
    return get_settings().store_backend.lower() == "supabase"


@lru_cache
def get_bank_store() -> BankStore:
    if _use_supabase():
        try:
            return SupabaseBankStore(get_supabase_client())
        except Exception as e:
            logger.warning("[deps.get_bank_store] supabase unavailable, using local bank: %s", e)
    return InMemoryBankStore(load_bank(get_settings().bank_dir))


@lru_cache
def get_progress_store() -> ProgressStore:
    if _use_supabase():
        try:
            return SupabaseProgressStore(get_supabase_client())
        except Exception as e:
            logger.warning("[deps.get_progress_store] supabase unavailable, using memory: %s", e)
    return InMemoryProgressStore()


@lru_cache
def get_history_store() -> SessionHistoryStore:
    settings = get_settings()
    return InMemorySessionHistoryStore(
        max_recent_ids=settings.recent_ids_limit,
        max_recent_skill_tags=settings.recent_skill_tags_limit,
    )


@lru_cache
def get_assessment_store() -> AssessmentStore:
    return InMemoryAssessmentStore()
