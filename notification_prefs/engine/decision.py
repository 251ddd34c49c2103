"""
Decision Engine — allow or suppress a notification for one event.

Order, first match wins:
  1. no stored preferences          -> PROCESS (fail-open)
  2. event type explicitly disabled -> DO_NOT_NOTIFY(USER_UNSUBSCRIBED_FROM_EVENT)
  3. timestamp inside DND window    -> DO_NOT_NOTIFY(DND_ACTIVE)
  4. otherwise                      -> PROCESS
"""

from typing import Optional, Union

from loguru import logger

from notification_prefs.engine.models import (
    Decision, DoNotNotify, EventPayload, PreferenceRecord, ProcessNotification,
    Reason, ValidationError,
)
from notification_prefs.engine.store import PreferenceStore
from notification_prefs.engine.validator import parse_event_payload, parse_preference_update
from notification_prefs.engine.window import is_within_window


def decide(record: Optional[PreferenceRecord], event: EventPayload) -> Decision:
    if record is None:
        return ProcessNotification()

    # Unsubscribe beats DND; a missing or enabled flag falls through
    flag = record.flag_for(event.event_type)
    if flag is not None and not flag.enabled:
        return DoNotNotify(Reason.USER_UNSUBSCRIBED_FROM_EVENT)

    if record.dnd is not None and is_within_window(record.dnd, event.timestamp):
        return DoNotNotify(Reason.DND_ACTIVE)

    return ProcessNotification()


class NotificationGate:
    """Binds the pure decision rules to a preference store."""

    def __init__(self, store: PreferenceStore):
        self.store = store

    def evaluate(self, event: EventPayload) -> Decision:
        # StoreUnavailableError propagates; only a real miss is fail-open
        record = self.store.get(event.user_id)
        decision = decide(record, event)

        logger.debug(
            "decision user={} event={} type={} prefs={} -> {}",
            event.user_id, event.event_id, event.event_type,
            "none" if record is None else "found",
            decision.to_dict(),
        )
        return decision

    def submit_event(self, raw) -> Union[Decision, ValidationError]:
        event = parse_event_payload(raw)
        if isinstance(event, ValidationError):
            return event
        return self.evaluate(event)

    def get_preferences(self, user_id: str) -> Optional[PreferenceRecord]:
        return self.store.get(user_id)

    def replace_preferences(self, user_id: str, raw) -> Union[PreferenceRecord, ValidationError]:
        record = parse_preference_update(raw)
        if isinstance(record, ValidationError):
            return record
        self.store.put(user_id, record)
        logger.info("preferences replaced user={} event_types={}", user_id, len(record.event_settings))
        return record
