import time
import json
import inspect
import logging
from contextlib import contextmanager
from typing import Optional
from functools import wraps

from striker.core.config import get_settings

logger = logging.getLogger("striker.telemetry")


def emit_event(event: str, *, route: str, version: str, learner_id: Optional[str] = None,
               session_id: Optional[str] = None, skill_tag: Optional[str] = None,
               item_id: Optional[str] = None, error_type: Optional[str] = None,
               latency_ms: Optional[int] = None, ok: Optional[bool] = None):
    payload = {
        "event": event,
        "route": route,
        "version": version,
        "learner_id": learner_id,
        "session_id": session_id,
        "skill_tag": skill_tag,
        "item_id": item_id,
        "error_type": error_type,
        "latency_ms": latency_ms,
        "ok": ok,
        "ts": time.time(),
    }
    logger.info("telemetry=%s", json.dumps(payload, separators=(",", ":")))

    if not get_settings().telemetry_db:
        return

    # best-effort: a telemetry write never fails the request
    try:
        from striker.core.deps import get_supabase_client
        sb = get_supabase_client()
        sb.table("telemetry_events").insert({k: v for k, v in payload.items() if k != "ts"}).execute()
    except Exception as e:
        logger.error(f"[telemetry.emit_event] {e}", exc_info=True)


@contextmanager
def api_call(route: str, version: str):
    """Time the enclosed block and emit one api_call event, failed or not."""
    t0 = time.time()
    error_type = None
    try:
        yield
    except Exception as e:
        error_type = e.__class__.__name__
        raise
    finally:
        emit_event("api_call", route=route, version=version,
                   latency_ms=int((time.time() - t0) * 1000),
                   ok=error_type is None, error_type=error_type)


def instrument(route: str, version: str):
    def deco(fn):
        if inspect.iscoroutinefunction(fn):
            @wraps(fn)
            async def wrapped_async(*args, **kwargs):
                with api_call(route, version):
                    return await fn(*args, **kwargs)
            return wrapped_async

        @wraps(fn)
        def wrapped(*args, **kwargs):
            with api_call(route, version):
                return fn(*args, **kwargs)
        return wrapped
    return deco
