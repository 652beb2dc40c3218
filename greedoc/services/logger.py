import json
import logging
from datetime import datetime, timezone

from greedoc.core.config import settings

logger = logging.getLogger("greedoc.debug")


def log_debug(event: str, data: dict):
    """
    Logs structured debug info if enabled.
    """
    if not settings.AI_DEBUG_MODE:
        return

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "data": data,
    }
    logger.info("[AI DEBUG] %s: %s", event, json.dumps(entry, indent=2, default=str))
