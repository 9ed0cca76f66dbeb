from __future__ import annotations

import json
import logging
import time
from functools import wraps
from typing import Any, Callable

Handler = Callable[..., Any]

logger = logging.getLogger("medvend.audit")


def now_ms() -> int:
    return int(time.time() * 1000)


def log_mutation(action: str) -> Callable[[Handler], Handler]:
    """Decorator to write an audit log line after a store mutation succeeds."""
    def deco(fn: Handler) -> Handler:
        @wraps(fn)
        def wrapper(self, *args, **kwargs):
            result = fn(self, *args, **kwargs)
            logger.info(
                "[AUDIT] %s args=%s result=%s",
                action,
                json.dumps(_safe_json(args)),
                json.dumps(_safe_json(result)),
            )
            return result
        return wrapper
    return deco


def _safe_json(x: Any) -> Any:
    if hasattr(x, "model_dump"):
        return x.model_dump(mode="json")
    if isinstance(x, (list, tuple)):
        return [_safe_json(v) for v in x]
    if isinstance(x, dict):
        return {k: _safe_json(v) for k, v in x.items()}
    try:
        json.dumps(x)
        return x
    except (TypeError, ValueError):
        return str(x)
