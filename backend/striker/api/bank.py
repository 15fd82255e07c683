import logging

from fastapi import APIRouter, Depends, HTTPException

from striker.api.schemas import BankStatsResponse
from striker.core.deps import get_bank_store
from striker.services.bank_store import BankStore
from striker.services.telemetry import instrument

logger = logging.getLogger("striker.api.bank")
router = APIRouter(prefix="/api/v1/question-bank", tags=["question-bank"])


@router.get("/stats", response_model=BankStatsResponse)
@instrument(route="/api/v1/question-bank/stats", version="v1")
async def stats(bank: BankStore = Depends(get_bank_store)):
    try:
        return bank.stats()
    except Exception as e:
        logger.error(f"[bank.stats] {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Question bank unavailable")
