"""
Firebase Cloud Messaging (FCM) pushes.

A failed push is logged and reported as ``None``; it never fails the
request or worker tick that triggered it.
"""

import logging
from typing import Any, Dict, Optional

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

logger = logging.getLogger(__name__)


def _string_data(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    # FCM data payload values must be strings
    return {str(k): "" if v is None else str(v) for k, v in (data or {}).items()}


def _send(message: messaging.Message, target: str) -> Optional[str]:
    try:
        return messaging.send(message)
    except (firebase_exceptions.FirebaseError, ValueError) as exc:
        logger.warning("FCM push to %s failed: %s", target, exc)
        return None


def send_to_token(token: Optional[str], title: str, body: str, data: Optional[dict] = None) -> Optional[str]:
    """Push to a single device token. Returns the FCM message id, if sent."""
    if not token:
        return None
    message = messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data=_string_data(data),
    )
    return _send(message, "device")


def send_to_topic(topic: str, title: str, body: str, data: Optional[dict] = None) -> Optional[str]:
    """Push to an FCM topic such as ``user_<id>``."""
    message = messaging.Message(
        topic=topic,
        notification=messaging.Notification(title=title, body=body),
        data=_string_data(data),
    )
    return _send(message, f"topic {topic}")


def user_topic(user_id: str) -> str:
    return f"user_{user_id}"
