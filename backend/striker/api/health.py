import logging

from fastapi import APIRouter, Depends

from striker.core.config import get_settings
from striker.core.deps import get_bank_store
from striker.services.bank_store import BankStore

logger = logging.getLogger("striker.api.health")
router = APIRouter(tags=["health"])


@router.get("/health")
async def health(bank: BankStore = Depends(get_bank_store)):
    settings = get_settings()
    try:
        bank_items = bank.count()
    except Exception as e:
        logger.warning("[health] bank store unavailable: %s", e)
        bank_items = None
    return {
        "status": "ok" if bank_items else "degraded",
        "app": settings.app_name,
        "bank_version": settings.bank_version,
        "bank_items": bank_items,
        "store_backend": settings.store_backend,
    }
