"""
Reminder notifications for calendar events, follow-ups and medication doses.

Every NOTIFICATION_INTERVAL_MS the worker looks at today's calendar events,
scheduled follow-ups and active medications. Items whose time falls within
the next NOTIFICATION_ADVANCE_MINUTES (a medication's own
``reminders.advanceTime`` when set) get a notification document and an FCM
push to the ``user_<id>`` topic. Events and follow-ups are flagged
``reminderSent``; medication doses are remembered per day in
``reminders.sentDoses`` so they are not sent twice.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from google.api_core.exceptions import RetryError, ServiceUnavailable

from greedoc.core.config import settings
from greedoc.services import (
    ai_client,
    event_service,
    followup_service,
    medication_service,
    notification_service,
    push,
)
from greedoc.services.time_utils import combine_date_time, local_today, utcnow

logger = logging.getLogger(__name__)

_stop = threading.Event()
_thread: Optional[threading.Thread] = None


def start_worker() -> threading.Thread:
    global _thread
    if _thread is not None and _thread.is_alive():
        return _thread

    _stop.clear()
    thread = threading.Thread(target=_run_job, name="notification-worker", daemon=True)
    thread.start()
    _thread = thread
    logger.info(
        "Notification worker started (every %ss, %s min ahead)",
        settings.NOTIFICATION_INTERVAL_MS / 1000,
        settings.NOTIFICATION_ADVANCE_MINUTES,
    )
    return thread


def stop_worker(timeout: float = 5.0):
    """Signal the loop to stop and wait for the current tick to finish."""
    global _thread
    _stop.set()
    if _thread is not None:
        _thread.join(timeout=timeout)
        if _thread.is_alive():
            logger.warning("Notification worker did not stop within %ss", timeout)
        _thread = None


def _run_job():
    while not _stop.is_set():
        try:
            check_due_reminders()
        except (RetryError, ServiceUnavailable) as e:
            logger.warning("Network error in notification worker: %s", e)
        except Exception:
            logger.exception("Error in notification worker tick")

        _stop.wait(settings.NOTIFICATION_INTERVAL_MS / 1000)


def _in_window(at: Optional[datetime], now: datetime) -> bool:
    if at is None:
        return False
    return now <= at <= now + timedelta(minutes=settings.NOTIFICATION_ADVANCE_MINUTES)


def compose_message(base_text: str) -> str:
    """Short friendly reminder text; the plain text when no AI provider answers."""
    messages = [
        {
            "role": "system",
            "content": "Rewrite health reminders as one short, warm sentence for a patient app notification.",
        },
        {"role": "user", "content": base_text},
    ]
    text, _ = ai_client.complete(messages, fallback=base_text, max_tokens=60, temperature=0.5)
    return text


def _notify(user_id: str, title: str, base_text: str, kind: str, data: dict):
    body = compose_message(base_text)
    notification_service.create_notification(user_id, title, body, kind, data)
    push.send_to_topic(push.user_topic(user_id), title, body, data)


def check_due_reminders(now: Optional[datetime] = None) -> int:
    """Send reminders that are due. Returns how many were sent."""
    now = now or utcnow()
    today_iso = local_today(now).isoformat()
    sent = 0

    for event in event_service.due_on(today_iso):
        at = combine_date_time(event.get("date"), event.get("time"))
        if not event.get("time") or not _in_window(at, now):
            continue
        _notify(
            event["userId"],
            f"Upcoming {event.get('type', 'event')}",
            f"Reminder: {event.get('title')} at {event['time']}.",
            "event_reminder",
            {"type": "event", "eventId": event["id"]},
        )
        event_service.mark_reminded(event["id"])
        sent += 1

    for followup in followup_service.due_on(today_iso):
        if not _in_window(followup_service.when(followup), now):
            continue
        _notify(
            followup["patientId"],
            "Upcoming follow-up",
            f"Reminder: follow-up with {followup.get('doctorName') or 'your doctor'} "
            f"at {followup.get('followUpTime')} for {followup.get('purpose')}.",
            "followup_reminder",
            {"type": "followup", "followUpId": followup["id"]},
        )
        followup_service.mark_reminded(followup["id"])
        sent += 1

    for medication in medication_service.reminder_candidates():
        already = set(medication_service.sent_dose_keys(medication))
        doses = [(key, hhmm) for key, hhmm in medication_service.due_doses(medication, now) if key not in already]
        for key, hhmm in doses:
            _notify(
                medication["userId"],
                "Medication reminder",
                f"Reminder to take {medication.get('name')} "
                f"({medication_service.dosage_text(medication)}). Due at {hhmm}.",
                "medication_reminder",
                {"type": "medication", "medicationId": medication["id"], "dueAt": hhmm},
            )
            sent += 1
        if doses:
            medication_service.mark_reminded(medication, [key for key, _ in doses], today_iso)

    if sent:
        logger.info("Sent %s reminder notification(s)", sent)
    return sent
